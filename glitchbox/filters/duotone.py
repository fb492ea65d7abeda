"""Duotone: map luminance onto a shadows → highlights colour ramp."""

from __future__ import annotations

import random
from typing import Optional, Sequence

from imaging.geometry import BoundingBox, Point
from imaging.pixels import duotone, hex_to_rgb, write_rgb

from ..models import DuotoneConfig

# Swatches offered by the duotone picker, shadows first.
PRESETS = [
    ("#00007e", "#6aff7f"),
    ("#682218", "#f8be3d"),
    ("#7f01d3", "#01dbfe"),
    ("#01ab6d", "#fbf019"),
    ("#ff5d77", "#fbcd20"),
    ("#11245e", "#dc4379"),
    ("#91cff8", "#ffffff"),
    ("#290900", "#ffefb3"),
    ("#602457", "#acd49d"),
    ("#0a0505", "#f00e2e"),
    ("#5062d6", "#ef009e"),
    ("#8682d9", "#defcfe"),
    ("#65b7d6", "#fdd9e2"),
    ("#241a5f", "#01ab6d"),
    ("#36200c", "#ff9738"),
    ("#2f0781", "#dfb233"),
]


def preset_config(index: int, brightness: float = 1.0) -> DuotoneConfig:
    """Return a :class:`DuotoneConfig` for swatch ``index``."""

    shadows, highlights = PRESETS[index]
    return DuotoneConfig(highlights_color=highlights, shadows_color=shadows, brightness=brightness)


def apply(
    data: bytearray,
    points: Sequence[Point],
    box: BoundingBox,
    cfg: DuotoneConfig,
    rng: Optional[random.Random] = None,
) -> None:
    shadows = hex_to_rgb(cfg.shadows_color)
    highlights = hex_to_rgb(cfg.highlights_color)
    for point in points:
        if point.data is None:
            continue
        rgb = duotone(point.data, shadows, highlights, cfg.brightness)
        write_rgb(data, box.local_index(point.x, point.y), rgb)
