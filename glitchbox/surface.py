"""Render surfaces the compositing pass reads from and writes to.

A surface is anything exposing ``width``, ``height``, ``get_region`` and
``put_region``; the controller never creates or destroys one, it is
handed over by whoever loaded the image.  Two implementations ship here:
:class:`PillowSurface` for headless rendering and exports, and
:class:`QImageSurface` for a Qt canvas.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Union, runtime_checkable

from PIL import Image, ImageOps, UnidentifiedImageError

from imaging.validation import validate_image_path

from . import config

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class ImageData:
    """A rectangular RGBA region, four bytes per pixel, rows packed."""

    width: int
    height: int
    data: bytearray

    def __post_init__(self) -> None:
        if len(self.data) != self.width * self.height * 4:
            raise ValueError(
                f"{self.width}x{self.height} RGBA needs {self.width * self.height * 4} bytes, "
                f"got {len(self.data)}"
            )

    @classmethod
    def blank(cls, width: int, height: int) -> "ImageData":
        return cls(width, height, bytearray(width * height * 4))


@runtime_checkable
class RenderSurface(Protocol):
    width: int
    height: int

    def get_region(self, x: int, y: int, width: int, height: int) -> ImageData:
        ...

    def put_region(self, region: ImageData, x: int, y: int) -> None:
        ...


class PillowSurface:
    """Surface backed by an RGBA :class:`PIL.Image.Image`."""

    def __init__(self, image: Image.Image) -> None:
        self.image = image if image.mode == "RGBA" else image.convert("RGBA")

    @classmethod
    def from_rgba(cls, width: int, height: int, data: bytes) -> "PillowSurface":
        return cls(Image.frombytes("RGBA", (width, height), bytes(data)))

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    def get_region(self, x: int, y: int, width: int, height: int) -> ImageData:
        # Pillow pads crops outside the image with transparent black, like a canvas.
        region = self.image.crop((x, y, x + width, y + height))
        return ImageData(width, height, bytearray(region.tobytes()))

    def put_region(self, region: ImageData, x: int, y: int) -> None:
        patch = Image.frombytes("RGBA", (region.width, region.height), bytes(region.data))
        self.image.paste(patch, (x, y))

    def to_image(self) -> Image.Image:
        return self.image.copy()


class QImageSurface:
    """Surface backed by a ``QImage`` converted to ``Format_RGBA8888``."""

    def __init__(self, image) -> None:
        from PySide6.QtGui import QImage

        self._format = QImage.Format.Format_RGBA8888
        self.image = image.convertToFormat(self._format)

    @property
    def width(self) -> int:
        return self.image.width()

    @property
    def height(self) -> int:
        return self.image.height()

    def get_region(self, x: int, y: int, width: int, height: int) -> ImageData:
        region = self.image.copy(x, y, width, height).convertToFormat(self._format)
        stride = region.bytesPerLine()
        raw = bytes(region.constBits())
        row_bytes = width * 4
        data = bytearray()
        for row in range(height):
            offset = row * stride
            data += raw[offset:offset + row_bytes]
        return ImageData(width, height, data)

    def put_region(self, region: ImageData, x: int, y: int) -> None:
        from PySide6.QtGui import QImage, QPainter

        patch = QImage(
            bytes(region.data),
            region.width,
            region.height,
            region.width * 4,
            self._format,
        ).copy()
        painter = QPainter(self.image)
        try:
            painter.setCompositionMode(QPainter.CompositionMode.CompositionMode_Source)
            painter.drawImage(x, y, patch)
        finally:
            painter.end()


def surface_to_image(surface: RenderSurface) -> Image.Image:
    """Snapshot the full surface as a Pillow image."""

    if isinstance(surface, PillowSurface):
        return surface.to_image()
    region = surface.get_region(0, 0, surface.width, surface.height)
    return Image.frombytes("RGBA", (region.width, region.height), bytes(region.data))


def load_surface(path: Union[str, Path]) -> PillowSurface:
    """Open an image file as a :class:`PillowSurface`.

    EXIF orientation is applied and oversize images are scaled down to
    ``config.MAX_IMAGE_DIMENSION`` on their longest side.
    """

    safe_path = validate_image_path(path, config.SUPPORTED_IMAGE_FORMATS)
    try:
        with Image.open(safe_path) as img:
            img = ImageOps.exif_transpose(img)
            image = img.convert("RGBA")
    except (UnidentifiedImageError, OSError) as exc:
        raise ValueError(f"Cannot read image {safe_path}: {exc}") from exc

    limit = config.MAX_IMAGE_DIMENSION
    if max(image.size) > limit:
        LOGGER.info("Downscaling %s from %sx%s", safe_path.name, *image.size)
        image.thumbnail((limit, limit), Image.Resampling.LANCZOS)
    return PillowSurface(image)


__all__ = [
    "ImageData",
    "RenderSurface",
    "PillowSurface",
    "QImageSurface",
    "surface_to_image",
    "load_surface",
]
