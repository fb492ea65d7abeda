import random

import pytest

from imaging.geometry import bounding_box, capture_points
from glitchbox.filters import pixel_sort
from glitchbox.models import FractalPixelSortConfig


def _stripe(width):
    return [((i * 37) % 256, (i * 91) % 256, (i * 13) % 256, 200) for i in range(width)]


def test_smear_integral_strides():
    scratch = bytearray([1, 5, 7, 3])
    pixel_sort.smear(scratch, 0)
    assert list(scratch) == [1, 1, 1, 1]


def test_smear_identity_stride_changes_nothing():
    scratch = bytearray([9, 2, 8, 7])
    pixel_sort.smear(scratch, 1)
    assert list(scratch) == [9, 2, 8, 7]


def test_smear_skips_fractional_targets():
    scratch = bytearray([9, 2, 8, 7])
    pixel_sort.smear(scratch, 0.5)
    # Only i=2 lands on a whole byte (index 1).
    assert list(scratch) == [9, 2, 2, 7]


@pytest.mark.parametrize("intensity", [-1, -2.5, float("inf"), float("-inf"), float("nan"), 1e308])
def test_smear_skips_negative_and_non_finite_strides(intensity):
    scratch = bytearray([9, 2, 8, 7])
    pixel_sort.smear(scratch, intensity)
    assert list(scratch) == [9, 2, 8, 7]


def test_apply_survives_negative_intensity(rgba_block):
    data, points, box = rgba_block(_stripe(12), 12)
    pixel_sort.apply(data, points, box, FractalPixelSortConfig(intensity=-3), random.Random(2))
    assert len(data) == 12 * 4


def test_shift_distances_for_narrow_region():
    assert pixel_sort.shift_distances(4, random.Random(0)) == (10, 10)
    assert pixel_sort.shift_distances(10, random.Random(0)) == (10, 10)


@pytest.mark.parametrize("seed", range(20))
def test_shift_distances_are_ordered(seed):
    left, right = pixel_sort.shift_distances(50, random.Random(seed))
    assert 10 <= left <= right < 50


def test_apply_only_touches_selected_rgb(rgba_block):
    width = 32
    data, all_points, box = rgba_block(_stripe(width), width)
    original = bytes(data)
    selected = all_points[:8]

    pixel_sort.apply(data, selected, box, FractalPixelSortConfig(), random.Random(7))

    selected_offsets = {box.local_index(p.x, p.y) for p in selected}
    for offset in range(0, len(data), 4):
        assert data[offset + 3] == original[offset + 3]
        if offset not in selected_offsets:
            assert data[offset:offset + 4] == original[offset:offset + 4]


def test_apply_is_reproducible_with_seed():
    width = 24
    raw = bytearray(channel for pixel in _stripe(width) for channel in pixel)
    points = capture_points(raw, width, 1)
    box = bounding_box(points)
    first, second = bytearray(raw), bytearray(raw)
    pixel_sort.apply(first, points, box, FractalPixelSortConfig(intensity=3), random.Random(11))
    pixel_sort.apply(second, points, box, FractalPixelSortConfig(intensity=3), random.Random(11))
    assert first == second


class _FixedRandom:
    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value


# Two pixels, one row, neighbour one pixel (4 bytes) away.
# Forward (draw < 0.5) only fits for the first pixel, backward only for the second.
@pytest.mark.parametrize(
    "draw,right_side,expected",
    [
        (0.0, 3, [3, 2, 3, 9, 1, 2, 6, 8]),
        (0.0, 4, [1, 2, 3, 9, 3, 2, 6, 8]),
        (0.0, 5, [1, 2, 3, 9, 3, 5, 6, 8]),
        (0.9, 3, [5, 4, 3, 9, 6, 5, 6, 8]),
        (0.9, 4, [6, 2, 3, 9, 4, 6, 6, 8]),
        (0.9, 5, [6, 4, 3, 9, 5, 5, 6, 8]),
    ],
)
def test_shuffle_channels_recipes(draw, right_side, expected):
    scratch = bytearray([1, 2, 3, 9, 4, 5, 6, 8])
    pixel_sort.shuffle_channels(scratch, 2, 1, 4, right_side, _FixedRandom(draw))
    assert list(scratch) == expected


def test_shuffle_channels_skips_neighbours_outside_buffer():
    scratch = bytearray([1, 2, 3, 9, 4, 5, 6, 8])
    pixel_sort.shuffle_channels(scratch, 2, 1, 8, 3, _FixedRandom(0.0))
    pixel_sort.shuffle_channels(scratch, 2, 1, 8, 3, _FixedRandom(0.9))
    assert list(scratch) == [1, 2, 3, 9, 4, 5, 6, 8]
