"""Fractal pixel sort.

The whole region buffer is distorted in a scratch copy, but only the
selected pixels are copied back, so the visible effect stays inside the
selection.  Output is random on purpose; pass a seeded ``random.Random`` to
reproduce a render.
"""

from __future__ import annotations

import math
import random
from typing import Optional, Sequence, Tuple

from imaging.geometry import BoundingBox, Point

from .. import config
from ..models import FractalPixelSortConfig


def smear(scratch: bytearray, intensity: float) -> None:
    """Backward pass pulling each byte down to the byte at ``i * intensity``.

    Only whole, non-negative targets address a byte; everything else is
    skipped.
    """

    length = len(scratch)
    if not length:
        return
    for i in range(length - 1, 0, -1):
        stride = i * intensity
        if not math.isfinite(stride):
            continue
        # fmod keeps the sign of the stride, so negative strides stay negative.
        target = math.fmod(stride, length)
        if target < 0 or target != int(target):
            continue
        value = scratch[int(target)]
        if value < scratch[i]:
            scratch[i] = value


def shift_distances(width: int, rng: random.Random) -> Tuple[int, int]:
    """Draw ``(left_side, right_side)`` with ``10 <= left <= right < width``.

    Regions narrower than the minimum shift use the minimum for both.
    """

    minimum = config.PIXEL_SORT_MIN_SHIFT
    if width <= minimum:
        return minimum, minimum
    left_side = minimum + int(rng.random() * (width - minimum))
    right_side = left_side + int(rng.random() * (width - left_side))
    return left_side, right_side


def shuffle_channels(
    scratch: bytearray,
    width: int,
    height: int,
    left_side: int,
    right_side: int,
    rng: random.Random,
) -> None:
    """Swap channel bytes between each pixel and a neighbour ``left_side`` bytes away.

    The direction is drawn per pixel; ``right_side % 3`` picks one of three
    recipes per direction.  Recipe 2 forward and recipe 1 backward only move
    two channels.
    """

    length = len(scratch)
    recipe = right_side % 3
    for row in range(height):
        for col in range(width):
            pos = (col + row * width) * 4
            r = scratch[pos]
            g = scratch[pos + 1]
            b = scratch[pos + 2]

            if rng.random() < 0.5:
                if pos + left_side + 1 > length - 1:
                    continue
                ahead = pos + left_side
                if recipe == 0:
                    scratch[pos] = b
                    scratch[ahead] = r
                    scratch[ahead + 1] = g
                elif recipe == 1:
                    scratch[pos] = r
                    scratch[ahead] = b
                    scratch[ahead + 1] = g
                else:
                    scratch[pos] = r
                    scratch[ahead] = b
            else:
                if pos - left_side < 0:
                    continue
                behind = pos - left_side
                if recipe == 0:
                    scratch[pos] = b
                    scratch[behind] = g
                    scratch[behind + 1] = r
                elif recipe == 1:
                    scratch[pos + 1] = b
                    scratch[behind] = b
                else:
                    scratch[pos] = g
                    scratch[behind] = b
                    scratch[behind + 1] = r


def apply(
    data: bytearray,
    points: Sequence[Point],
    box: BoundingBox,
    cfg: FractalPixelSortConfig,
    rng: Optional[random.Random] = None,
) -> None:
    rng = rng or random.Random()
    width, height = int(box.width), int(box.height)

    scratch = bytearray(data)
    smear(scratch, cfg.intensity)
    left_side, right_side = shift_distances(width, rng)
    shuffle_channels(scratch, width, height, left_side, right_side, rng)

    for point in points:
        if not box.contains(point.x, point.y):
            continue
        index = box.local_index(point.x, point.y)
        data[index:index + 3] = scratch[index:index + 3]
