"""Pixel filters and the dispatch table used by the compositing pass.

Every filter has the same shape: it receives the region buffer read from
the surface, the selection points, the bounding box the buffer was read
from, its config and a random source, and mutates the buffer in place.
"""

from __future__ import annotations

import logging
import random
from typing import Any, Callable, Dict, Optional, Sequence

from imaging.geometry import BoundingBox, Point

from ..models import FilterKind
from . import as_sound, brightness, duotone, grayscale, pixel_sort, tint

FilterFunction = Callable[
    [bytearray, Sequence[Point], BoundingBox, Any, Optional[random.Random]], None
]

LOGGER = logging.getLogger(__name__)


def _no_filter(
    data: bytearray,
    points: Sequence[Point],
    box: BoundingBox,
    cfg: Any,
    rng: Optional[random.Random] = None,
) -> None:
    return None


_FILTER_DISPATCH: Dict[FilterKind, FilterFunction] = {
    FilterKind.NONE: _no_filter,
    FilterKind.AS_SOUND: as_sound.apply,
    FilterKind.FRACTAL_PIXEL_SORT: pixel_sort.apply,
    FilterKind.BRIGHTNESS: brightness.apply,
    FilterKind.TINT: tint.apply,
    FilterKind.GRAYSCALE: grayscale.apply,
    FilterKind.DUOTONE: duotone.apply,
}


def get_filter(kind: Any) -> Optional[FilterFunction]:
    try:
        return _FILTER_DISPATCH.get(FilterKind(kind))
    except ValueError:
        return None


def apply_filter(
    kind: Any,
    data: bytearray,
    points: Sequence[Point],
    box: BoundingBox,
    cfg: Any,
    rng: Optional[random.Random] = None,
) -> bool:
    """Run the filter registered for ``kind``.

    Unknown kinds are skipped with a warning and ``False`` is returned so
    the caller can leave the region untouched.
    """

    func = get_filter(kind)
    if func is None:
        LOGGER.warning("Unknown filter type: %s", kind)
        return False
    func(data, points, box, cfg, rng)
    return True


__all__ = ["FilterFunction", "apply_filter", "get_filter"]
