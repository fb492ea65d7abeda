"""Channel math on flat RGBA byte buffers.

Buffers follow the canvas ``ImageData`` layout: four bytes per pixel in
R, G, B, A order, rows packed top to bottom.  Writes go through
:func:`clamp_byte`, which mirrors a clamped byte array sink: values are
clamped to ``0..255`` and fractional values are rounded to the nearest
integer.
"""

from __future__ import annotations

from typing import Sequence, Tuple

RGB = Tuple[int, int, int]


def clamp_byte(value: float) -> int:
    """Clamp ``value`` into the byte range."""

    if value != value:  # NaN
        return 0
    if value <= 0:
        return 0
    if value >= 255:
        return 255
    return int(round(value))


def brightness(rgb: Sequence[int], intensity: float) -> RGB:
    """Scale R, G and B by ``intensity``."""

    return (
        clamp_byte(rgb[0] * intensity),
        clamp_byte(rgb[1] * intensity),
        clamp_byte(rgb[2] * intensity),
    )


def channel_average(rgb: Sequence[int]) -> float:
    return (rgb[0] + rgb[1] + rgb[2]) / 3


def grayscale(rgb: Sequence[int], intensity: float) -> RGB:
    """Blend each channel towards the channel average by ``intensity``."""

    avg = channel_average(rgb)
    return (
        clamp_byte(rgb[0] * (1 - intensity) + avg * intensity),
        clamp_byte(rgb[1] * (1 - intensity) + avg * intensity),
        clamp_byte(rgb[2] * (1 - intensity) + avg * intensity),
    )


def luminance(rgb: Sequence[int]) -> float:
    """Return Rec. 601 luma normalised to ``[0, 1]``."""

    return (0.299 * rgb[0] + 0.587 * rgb[1] + 0.114 * rgb[2]) / 255


def lerp_color(low: Sequence[int], high: Sequence[int], t: float) -> RGB:
    """Linearly interpolate between two colours."""

    return (
        clamp_byte(low[0] + (high[0] - low[0]) * t),
        clamp_byte(low[1] + (high[1] - low[1]) * t),
        clamp_byte(low[2] + (high[2] - low[2]) * t),
    )


def duotone(rgb: Sequence[int], shadows: Sequence[int], highlights: Sequence[int], brightness_factor: float) -> RGB:
    """Map the luminance of ``rgb`` onto the shadows→highlights ramp."""

    t = min(max(luminance(rgb) * brightness_factor, 0.0), 1.0)
    return lerp_color(shadows, highlights, t)


def hex_to_rgb(value: str) -> RGB:
    """Parse ``#rrggbb`` (or ``#rgb``) into an RGB tuple."""

    text = value.strip().lstrip("#")
    if len(text) == 3:
        text = "".join(ch * 2 for ch in text)
    if len(text) != 6:
        raise ValueError(f"Invalid hex colour: {value!r}")
    try:
        return int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16)
    except ValueError as exc:
        raise ValueError(f"Invalid hex colour: {value!r}") from exc


def write_rgb(data: bytearray, index: int, rgb: Sequence[int]) -> None:
    """Store R, G, B at ``index`` leaving alpha alone."""

    data[index] = rgb[0]
    data[index + 1] = rgb[1]
    data[index + 2] = rgb[2]


__all__ = [
    "clamp_byte",
    "brightness",
    "channel_average",
    "grayscale",
    "luminance",
    "lerp_color",
    "duotone",
    "hex_to_rgb",
    "write_rgb",
]
