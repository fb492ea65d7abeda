"""Pixel coordinates and region geometry.

Selections are stored as flat lists of :class:`Point` values, each
optionally carrying the RGBA colour that was sampled from the pristine
image when the selection was captured.  Filters never work on the whole
canvas directly; they work on the smallest rectangle that covers the
points they were given, which :func:`bounding_box` computes.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

RGBA = Tuple[int, int, int, int]


@dataclass(frozen=True, slots=True)
class Point:
    """A pixel coordinate, optionally annotated with its original colour."""

    x: int
    y: int
    data: Optional[RGBA] = None

    @property
    def has_color(self) -> bool:
        return self.data is not None


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Inclusive axis-aligned rectangle covering a point set."""

    width: float
    height: float
    min_x: float
    min_y: float

    @property
    def is_empty(self) -> bool:
        """Return ``True`` for the degenerate box produced by an empty input."""

        return not (math.isfinite(self.min_x) and math.isfinite(self.min_y))

    def as_rect(self) -> Tuple[int, int, int, int]:
        """Return ``(x, y, width, height)`` as integers."""

        if self.is_empty:
            raise ValueError("Empty bounding box has no rectangle")
        return int(self.min_x), int(self.min_y), int(self.width), int(self.height)

    def local_index(self, x: int, y: int) -> int:
        """Return the byte offset of ``(x, y)`` inside the region buffer."""

        return ((y - int(self.min_y)) * int(self.width) + (x - int(self.min_x))) * 4

    def contains(self, x: int, y: int) -> bool:
        local_x = x - self.min_x
        local_y = y - self.min_y
        return 0 <= local_x < self.width and 0 <= local_y < self.height


def bounding_box(points: Iterable[Point]) -> BoundingBox:
    """Return the minimal rectangle covering ``points``.

    ``width`` and ``height`` are inclusive pixel counts.  An empty input does
    not raise; it yields infinite sentinels and callers are expected to guard
    against it through :attr:`BoundingBox.is_empty`.
    """

    min_x = min_y = math.inf
    max_x = max_y = -math.inf
    for point in points:
        if point.x < min_x:
            min_x = point.x
        if point.y < min_y:
            min_y = point.y
        if point.x > max_x:
            max_x = point.x
        if point.y > max_y:
            max_y = point.y

    return BoundingBox(
        width=max_x - min_x + 1,
        height=max_y - min_y + 1,
        min_x=min_x,
        min_y=min_y,
    )


def capture_points(data: Sequence[int], width: int, height: int) -> List[Point]:
    """Return one colour-annotated point per pixel of an RGBA buffer."""

    expected = width * height * 4
    if len(data) != expected:
        raise ValueError(f"Expected {expected} bytes for {width}x{height} RGBA, got {len(data)}")

    points: List[Point] = []
    for y in range(height):
        row = y * width * 4
        for x in range(width):
            i = row + x * 4
            points.append(Point(x, y, (data[i], data[i + 1], data[i + 2], data[i + 3])))
    return points


def sample_points(
    coords: Iterable[Tuple[int, int]],
    data: Sequence[int],
    width: int,
    height: int,
) -> List[Point]:
    """Annotate traced ``coords`` with the colour found in ``data``.

    Coordinates outside the image keep no colour so that filters skip them.
    """

    points: List[Point] = []
    for x, y in coords:
        if 0 <= x < width and 0 <= y < height:
            i = (y * width + x) * 4
            points.append(Point(x, y, (data[i], data[i + 1], data[i + 2], data[i + 3])))
        else:
            points.append(Point(x, y))
    return points


__all__ = [
    "RGBA",
    "Point",
    "BoundingBox",
    "bounding_box",
    "capture_points",
    "sample_points",
]
