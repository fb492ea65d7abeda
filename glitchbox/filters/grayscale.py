"""Grayscale: pull each channel towards the channel average."""

from __future__ import annotations

import random
from typing import Optional, Sequence

from imaging.geometry import BoundingBox, Point
from imaging.pixels import grayscale, write_rgb

from ..models import GrayscaleConfig


def apply(
    data: bytearray,
    points: Sequence[Point],
    box: BoundingBox,
    cfg: GrayscaleConfig,
    rng: Optional[random.Random] = None,
) -> None:
    """``intensity=1`` gives full grayscale, ``0`` leaves colours alone."""

    for point in points:
        if point.data is None:
            continue
        write_rgb(data, box.local_index(point.x, point.y), grayscale(point.data, cfg.intensity))
