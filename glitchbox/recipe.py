"""Layer recipes: a JSON description of a layer stack.

A recipe lets scripts and the CLI build the same stack a user would
draw by hand::

    {
      "seed": 7,
      "layers": [
        {"filter": "Grayscale", "config": {"intensity": 0.8},
         "area": {"rect": [10, 10, 64, 32]}},
        {"filter": "AsSound", "area": {"points": [[0, 0], [1, 0], [1, 1]]}},
        {"filter": "FractalPixelSort"}
      ]
    }

A layer without ``area`` covers the whole image.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from imaging.geometry import sample_points

from .controllers import LayerStackController
from .models import FilterKind, is_filter_kind, make_config

LOGGER = logging.getLogger(__name__)

Coord = Tuple[int, int]


class RecipeError(ValueError):
    """Raised when a recipe cannot be parsed."""


@dataclass(frozen=True)
class LayerSpec:
    filter: FilterKind
    config: Dict[str, Any] = field(default_factory=dict)
    coords: Optional[Tuple[Coord, ...]] = None


@dataclass(frozen=True)
class Recipe:
    layers: Tuple[LayerSpec, ...]
    seed: Optional[int] = None


def _parse_area(raw: Any, where: str) -> Optional[Tuple[Coord, ...]]:
    if raw is None:
        return None
    if not isinstance(raw, Mapping):
        raise RecipeError(f"{where}: area must be an object")
    if "rect" in raw:
        try:
            x, y, width, height = (int(v) for v in raw["rect"])
        except (TypeError, ValueError) as exc:
            raise RecipeError(f"{where}: rect must be [x, y, width, height]") from exc
        if width <= 0 or height <= 0:
            raise RecipeError(f"{where}: rect needs a positive size")
        return tuple((x + dx, y + dy) for dy in range(height) for dx in range(width))
    if "points" in raw:
        try:
            return tuple((int(px), int(py)) for px, py in raw["points"])
        except (TypeError, ValueError) as exc:
            raise RecipeError(f"{where}: points must be [[x, y], ...]") from exc
    raise RecipeError(f"{where}: area needs 'rect' or 'points'")


def parse_recipe(data: Mapping[str, Any]) -> Recipe:
    """Validate a decoded recipe document."""

    if not isinstance(data, Mapping):
        raise RecipeError("Recipe must be a JSON object")
    raw_layers = data.get("layers")
    if not isinstance(raw_layers, list):
        raise RecipeError("Recipe needs a 'layers' list")

    layers: List[LayerSpec] = []
    for position, raw in enumerate(raw_layers):
        where = f"layers[{position}]"
        if not isinstance(raw, Mapping):
            raise RecipeError(f"{where}: layer must be an object")
        kind = raw.get("filter", FilterKind.NONE.value)
        if not is_filter_kind(kind):
            raise RecipeError(f"{where}: unknown filter {kind!r}")
        options = raw.get("config", {})
        try:
            make_config(kind, options)
        except (TypeError, ValueError) as exc:
            raise RecipeError(f"{where}: {exc}") from exc
        layers.append(LayerSpec(FilterKind(kind), dict(options), _parse_area(raw.get("area"), where)))

    seed = data.get("seed")
    if seed is not None and not isinstance(seed, int):
        raise RecipeError("seed must be an integer")
    return Recipe(layers=tuple(layers), seed=seed)


def load_recipe(path: Union[str, Path]) -> Recipe:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise RecipeError(f"Cannot read recipe {path}: {exc}") from exc
    try:
        return parse_recipe(json.loads(text))
    except json.JSONDecodeError as exc:
        raise RecipeError(f"Invalid JSON in {path}: {exc}") from exc


def apply_recipe(controller: LayerStackController, recipe: Recipe) -> None:
    """Build the recipe's layers on ``controller`` and render them.

    The controller must already have an image loaded.
    """

    surface = controller.state.surface
    if surface is None:
        raise RecipeError("Load an image before applying a recipe")
    pristine = surface.get_region(0, 0, surface.width, surface.height)

    for entry in recipe.layers:
        controller.create_layer()
        idx = controller.state.selected_layer_idx
        if entry.coords:
            points = sample_points(entry.coords, pristine.data, pristine.width, pristine.height)
            # The first drawn selection seeds history instead of adding a step.
            controller.update_selection(
                idx,
                {"start": points[0], "points": points, "area": points},
                reset_history_baseline=True,
            )
        controller.update_selection(idx, filter=entry.filter, config=entry.config)
        LOGGER.debug("Recipe layer %s: %s", idx, entry.filter.value)

    controller.refresh()
