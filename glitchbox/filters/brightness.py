"""Brightness: scale the sampled colour of every selected pixel."""

from __future__ import annotations

import random
from typing import Optional, Sequence

from imaging.geometry import BoundingBox, Point
from imaging.pixels import brightness, write_rgb

from ..models import BrightnessConfig


def apply(
    data: bytearray,
    points: Sequence[Point],
    box: BoundingBox,
    cfg: BrightnessConfig,
    rng: Optional[random.Random] = None,
) -> None:
    for point in points:
        if point.data is None:
            continue
        write_rgb(data, box.local_index(point.x, point.y), brightness(point.data, cfg.intensity))
