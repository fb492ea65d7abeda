"""Layer stack data model.

A filter configuration is a tagged union: each :class:`FilterKind` owns one
frozen config dataclass and :func:`default_config` yields its defaults.
:class:`Selection` enforces that its ``config`` always belongs to its
``filter``; switching filter through :meth:`Selection.merge` resets the
config in the same step.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type, Union

from imaging.geometry import RGBA, Point
from imaging.pixels import hex_to_rgb

from . import config
from .history import CommandHistory

LOGGER = logging.getLogger(__name__)


class FilterKind(str, Enum):
    NONE = "None"
    AS_SOUND = "AsSound"
    FRACTAL_PIXEL_SORT = "FractalPixelSort"
    BRIGHTNESS = "Brightness"
    TINT = "Tint"
    GRAYSCALE = "Grayscale"
    DUOTONE = "Duotone"


@dataclass(frozen=True, slots=True)
class EmptyConfig:
    _empty: bool = True


@dataclass(frozen=True, slots=True)
class AsSoundConfig:
    blend: float = config.AS_SOUND_BLEND


@dataclass(frozen=True, slots=True)
class FractalPixelSortConfig:
    intensity: float = config.FRACTAL_PIXEL_SORT_INTENSITY


@dataclass(frozen=True, slots=True)
class BrightnessConfig:
    intensity: float = config.BRIGHTNESS_INTENSITY


@dataclass(frozen=True, slots=True)
class TintConfig:
    r: int = config.TINT_COLOR[0]
    g: int = config.TINT_COLOR[1]
    b: int = config.TINT_COLOR[2]


@dataclass(frozen=True, slots=True)
class GrayscaleConfig:
    intensity: float = config.GRAYSCALE_INTENSITY


@dataclass(frozen=True, slots=True)
class DuotoneConfig:
    highlights_color: str = config.DUOTONE_HIGHLIGHTS_COLOR
    shadows_color: str = config.DUOTONE_SHADOWS_COLOR
    brightness: float = config.DUOTONE_BRIGHTNESS


FilterConfig = Union[
    EmptyConfig,
    AsSoundConfig,
    FractalPixelSortConfig,
    BrightnessConfig,
    TintConfig,
    GrayscaleConfig,
    DuotoneConfig,
]

CONFIG_TYPES: Dict[FilterKind, Type[Any]] = {
    FilterKind.NONE: EmptyConfig,
    FilterKind.AS_SOUND: AsSoundConfig,
    FilterKind.FRACTAL_PIXEL_SORT: FractalPixelSortConfig,
    FilterKind.BRIGHTNESS: BrightnessConfig,
    FilterKind.TINT: TintConfig,
    FilterKind.GRAYSCALE: GrayscaleConfig,
    FilterKind.DUOTONE: DuotoneConfig,
}


def default_config(kind: Union[FilterKind, str]) -> FilterConfig:
    """Return the default configuration for ``kind``."""

    return CONFIG_TYPES[FilterKind(kind)]()


def _coerce_option(name: str, current: Any, value: Any) -> Any:
    """Convert ``value`` to the type of the option's ``current`` value.

    Raises ``ValueError`` when the value cannot stand in for the option.
    """

    if isinstance(current, bool):
        if not isinstance(value, bool):
            raise ValueError(f"{name} expects true or false, got {value!r}")
        return value
    if isinstance(current, str):
        if not isinstance(value, str):
            raise ValueError(f"{name} expects a string, got {value!r}")
        if name.endswith("_color"):
            hex_to_rgb(value)
        return value
    if isinstance(value, bool):
        raise ValueError(f"{name} expects a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} expects a number, got {value!r}") from exc
    if isinstance(current, int):
        if not number.is_integer():
            raise ValueError(f"{name} expects a whole number, got {value!r}")
        return int(number)
    return number


def make_config(kind: Union[FilterKind, str], values: Optional[Mapping[str, Any]] = None) -> FilterConfig:
    """Build a config for ``kind`` overriding defaults with ``values``.

    Raises ``ValueError`` for keys the filter does not know and for values
    that do not fit the option.
    """

    config_type = CONFIG_TYPES[FilterKind(kind)]
    values = dict(values or {})
    known = {f.name for f in fields(config_type)}
    unknown = set(values) - known
    if unknown:
        raise ValueError(
            f"Unknown option(s) for {FilterKind(kind).value}: {', '.join(sorted(unknown))}"
        )
    defaults = config_type()
    return replace(
        defaults,
        **{k: _coerce_option(k, getattr(defaults, k), v) for k, v in values.items()},
    )


def config_matches(kind: FilterKind, filter_config: Any) -> bool:
    return type(filter_config) is CONFIG_TYPES[kind]


def is_filter_kind(value: Any) -> bool:
    try:
        FilterKind(value)
    except ValueError:
        return False
    return True


@dataclass(frozen=True, slots=True)
class Selection:
    """A traced selection, the pixels it resolves to and its filter."""

    start: Point = Point(0, 0)
    points: Tuple[Point, ...] = ()
    area: Tuple[Point, ...] = ()
    filter: FilterKind = FilterKind.NONE
    config: FilterConfig = field(default_factory=EmptyConfig)

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", tuple(self.points))
        object.__setattr__(self, "area", tuple(self.area))
        object.__setattr__(self, "filter", FilterKind(self.filter))
        if not config_matches(self.filter, self.config):
            raise TypeError(
                f"{type(self.config).__name__} does not configure {self.filter.value}"
            )

    def merge(self, **changes: Any) -> "Selection":
        """Return a copy with ``changes`` applied.

        Changing ``filter`` resets ``config`` to the new filter's defaults.
        A ``config`` passed alongside is applied on top when it belongs to
        the resulting filter, either as a config instance or as a mapping of
        option overrides; anything else is dropped with a warning.
        """

        unknown = set(changes) - {"start", "points", "area", "filter", "config"}
        if unknown:
            raise TypeError(f"Unknown selection field(s): {', '.join(sorted(unknown))}")

        kind = FilterKind(changes.get("filter", self.filter))
        new_config = self.config
        if kind != self.filter:
            new_config = default_config(kind)

        if "config" in changes:
            candidate = changes["config"]
            if isinstance(candidate, Mapping):
                known = {f.name for f in fields(new_config)}
                dropped = set(candidate) - known
                if dropped:
                    LOGGER.warning(
                        "Ignoring unknown %s option(s): %s",
                        kind.value,
                        ", ".join(sorted(dropped)),
                    )
                options = {}
                for key, value in candidate.items():
                    if key not in known:
                        continue
                    try:
                        options[key] = _coerce_option(key, getattr(new_config, key), value)
                    except ValueError as exc:
                        LOGGER.warning("Ignoring invalid %s option: %s", kind.value, exc)
                new_config = replace(new_config, **options)
            elif config_matches(kind, candidate):
                new_config = candidate
            else:
                LOGGER.warning(
                    "Ignoring %s for %s selection",
                    type(candidate).__name__,
                    kind.value,
                )

        return replace(
            self,
            start=changes.get("start", self.start),
            points=tuple(changes.get("points", self.points)),
            area=tuple(changes.get("area", self.area)),
            filter=kind,
            config=new_config,
        )

    def colored_area(self) -> List[Point]:
        """Return the area points that carry a sampled colour."""

        return [p for p in self.area if p.data is not None]


def random_color(rng: Optional[random.Random] = None) -> str:
    """Return a random ``#rrggbb`` display colour."""

    rng = rng or random
    return f"#{rng.randrange(0x1000000):06x}"


@dataclass
class Layer:
    """One entry of the stack: a selection, its history and a UI handle."""

    selection: Selection
    color: str
    commands: CommandHistory[Selection]
    surface: Any = None


@dataclass
class StackState:
    """Everything the compositing pass needs.

    ``original_area_data`` is the pristine image captured at load time and
    is never mutated afterwards; every reset restores from it.
    """

    surface: Any = None
    original_area_data: Tuple[Point, ...] = ()
    layers: List[Layer] = field(default_factory=list)
    selected_layer_idx: int = -1

    @property
    def current_layer(self) -> Optional[Layer]:
        if 0 <= self.selected_layer_idx < len(self.layers):
            return self.layers[self.selected_layer_idx]
        return None

    def in_bounds(self, idx: int) -> bool:
        return 0 <= idx < len(self.layers)


__all__ = [
    "RGBA",
    "Point",
    "FilterKind",
    "EmptyConfig",
    "AsSoundConfig",
    "FractalPixelSortConfig",
    "BrightnessConfig",
    "TintConfig",
    "GrayscaleConfig",
    "DuotoneConfig",
    "FilterConfig",
    "CONFIG_TYPES",
    "default_config",
    "make_config",
    "is_filter_kind",
    "Selection",
    "Layer",
    "StackState",
    "random_color",
]
