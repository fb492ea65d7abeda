import logging
import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from imaging.geometry import bounding_box, capture_points  # noqa: E402
from glitchbox.surface import PillowSurface  # noqa: E402


@pytest.fixture(autouse=True)
def _restore_app_logger():
    """Undo configure_logging() so caplog keeps seeing glitchbox records."""
    logger = logging.getLogger("glitchbox")
    handlers = list(logger.handlers)
    level, propagate = logger.level, logger.propagate
    yield
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)
    logger.propagate = propagate


@pytest.fixture
def rgba_block():
    """Build ``(data, points, box)`` from a row-major list of RGBA tuples."""

    def build(pixels, width):
        data = bytearray(channel for pixel in pixels for channel in pixel)
        points = capture_points(data, width, len(pixels) // width)
        return data, points, bounding_box(points)

    return build


@pytest.fixture
def make_surface():
    def build(pixels, width):
        data = bytes(channel for pixel in pixels for channel in pixel)
        return PillowSurface.from_rgba(width, len(pixels) // width, data)

    return build
