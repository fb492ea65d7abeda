"""Tint: configurable, but it does not touch pixels yet."""

from __future__ import annotations

import random
from typing import Optional, Sequence

from imaging.geometry import BoundingBox, Point

from ..models import TintConfig


def apply(
    data: bytearray,
    points: Sequence[Point],
    box: BoundingBox,
    cfg: TintConfig,
    rng: Optional[random.Random] = None,
) -> None:
    return None
