# managers/export.py
"""Export manager with structured logging and metrics.

:class:`ExportManager` turns the composited canvas into PNG or animated GIF
files.  GIF frames come from repeated reset → regenerate → capture cycles
on the one shared surface, so capture always runs on the caller's thread
and each cycle finishes before the next starts; only encoding and writing
may move to a :class:`~glitchbox.workers.Worker`.

Failures surface as :class:`ExportError`.  Writes are retried with
exponential backoff and every attempt logs through a ``LoggerAdapter``
carrying a correlation identifier (``cid``).  Counters and durations are
recorded on the module-level ``export_metrics`` collector.
"""

from __future__ import annotations

import io
import logging
import time
import uuid
from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

from PIL import Image

from imaging.validation import validate_export_path

from .. import config
from ..surface import RenderSurface, surface_to_image
from ..workers import Worker, start_worker


class ExportError(RuntimeError):
    """Raised when capturing, encoding or writing an export fails."""


class _ExportMetrics:
    """Simple in-memory metrics collector."""

    def __init__(self) -> None:
        self.counters: Counter[str] = Counter()
        self.durations: list[float] = []

    def record(self, name: str, duration: float | None = None) -> None:
        self.counters[name] += 1
        if duration is not None:
            self.durations.append(duration)


export_metrics = _ExportMetrics()


@dataclass(frozen=True)
class GifOptions:
    """Encoder settings for animated exports."""

    framerate: int = config.GIF_FRAMERATE
    color_range: int = config.GIF_COLOR_RANGE
    compression_quality: int = config.GIF_COMPRESSION_QUALITY

    def __post_init__(self) -> None:
        low, high = config.GIF_FRAMERATE_LIMITS
        if not low <= self.framerate <= high:
            raise ValueError(f"framerate must be between {low} and {high}")
        low, high = config.GIF_COLOR_RANGE_LIMITS
        if not low <= self.color_range <= high:
            raise ValueError(f"color_range must be between {low} and {high}")
        if self.compression_quality < 0:
            raise ValueError("compression_quality must not be negative")

    @property
    def frame_duration_ms(self) -> int:
        return max(int(round(1000 / self.framerate)), 1)


@dataclass(slots=True)
class _ExportContext:
    """Holds state shared across export attempts."""

    cid: str
    path: Path
    log: logging.LoggerAdapter


def default_export_name(extension: str, now: Optional[datetime] = None) -> str:
    """Return a timestamped file name such as ``glitch_20260101_120000.gif``."""

    stamp = (now or datetime.now()).strftime(config.EXPORT_FILENAME_TIMESTAMP_FORMAT)
    return f"glitch_{stamp}.{extension.lstrip('.')}"


def capture_frame(surface: Optional[RenderSurface]) -> Image.Image:
    """Snapshot ``surface`` as an RGBA Pillow image."""

    if surface is None:
        raise ExportError("No image loaded; nothing to capture")
    try:
        return surface_to_image(surface)
    except (OSError, ValueError) as exc:
        raise ExportError(f"Failed to capture frame: {exc}") from exc


def capture_frames(controller, count: int = config.GIF_FRAME_COUNT) -> List[Image.Image]:
    """Capture ``count`` frames from ``controller``'s surface.

    The first frame is the canvas as currently drawn; each following frame
    re-renders the whole stack from the pristine image, so the random
    filters give every frame its own look.
    """

    if count < 1:
        raise ValueError("count must be at least 1")
    frames = [capture_frame(controller.state.surface)]
    for _ in range(count - 1):
        controller.refresh()
        frames.append(capture_frame(controller.state.surface))
    return frames


def encode_png(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    try:
        image.save(buffer, format="PNG")
    except (OSError, ValueError) as exc:
        raise ExportError(f"PNG encoding failed: {exc}") from exc
    return buffer.getvalue()


def encode_gif(frames: Sequence[Image.Image], options: Optional[GifOptions] = None) -> bytes:
    """Encode ``frames`` as a looping GIF.

    Frames are quantized to ``color_range`` colours; a positive
    ``compression_quality`` turns on Pillow's GIF optimizer.
    """

    if not frames:
        raise ExportError("No frames to encode")
    options = options or GifOptions()
    try:
        palette_frames = [
            frame.convert("RGB").quantize(colors=options.color_range) for frame in frames
        ]
        buffer = io.BytesIO()
        palette_frames[0].save(
            buffer,
            format="GIF",
            save_all=True,
            append_images=palette_frames[1:],
            duration=options.frame_duration_ms,
            loop=0,
            optimize=options.compression_quality > 0,
        )
    except (OSError, ValueError) as exc:
        raise ExportError(f"GIF encoding failed: {exc}") from exc
    return buffer.getvalue()


class ExportManager:
    """Writes PNG and GIF exports of a :class:`LayerStackController` canvas."""

    def __init__(
        self,
        controller,
        *,
        max_retries: int = config.EXPORT_MAX_RETRIES,
        initial_backoff_ms: int = config.EXPORT_INITIAL_BACKOFF_MS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self.controller = controller
        self._max_retries = max_retries
        self._initial_backoff_ms = initial_backoff_ms
        self._sleep = sleep

    def _context(self, path: Union[str, Path], expected: str) -> _ExportContext:
        safe_path, fmt = validate_export_path(path, config.EXPORT_FORMATS)
        if fmt != expected:
            raise ValueError(f"Expected a .{expected} path, got .{fmt}")
        cid = uuid.uuid4().hex
        log = logging.LoggerAdapter(logging.getLogger(__name__), {"cid": cid})
        return _ExportContext(cid=cid, path=safe_path, log=log)

    def export_png(self, path: Union[str, Path]) -> Path:
        """Write the canvas as currently drawn to ``path``."""

        context = self._context(path, "png")
        start = time.perf_counter()
        payload = encode_png(capture_frame(self.controller.state.surface))
        return self._write(context, payload, start)

    def export_gif(self, path: Union[str, Path], options: Optional[GifOptions] = None) -> Path:
        """Capture frames, encode them and write the GIF to ``path``."""

        context = self._context(path, "gif")
        start = time.perf_counter()
        frames = capture_frames(self.controller)
        context.log.info("frames captured", extra={"frames": len(frames)})
        payload = encode_gif(frames, options)
        return self._write(context, payload, start)

    def export_gif_async(
        self,
        path: Union[str, Path],
        options: Optional[GifOptions] = None,
        *,
        on_result: Optional[Callable[[object], None]] = None,
        on_error: Optional[Callable[[str], None]] = None,
        pool=None,
    ) -> Worker:
        """Capture frames now, then encode and write on the thread pool."""

        context = self._context(path, "gif")
        start = time.perf_counter()
        frames = capture_frames(self.controller)

        def _encode_and_write() -> Path:
            return self._write(context, encode_gif(frames, options), start)

        worker = Worker(_encode_and_write)
        if on_result is not None:
            worker.signals.result.connect(on_result)
        if on_error is not None:
            worker.signals.error.connect(on_error)
        start_worker(worker, pool)
        return worker

    def _write(self, context: _ExportContext, payload: bytes, start: float) -> Path:
        backoff_ms = self._initial_backoff_ms
        attempt = 0
        while True:
            attempt += 1
            try:
                context.path.write_bytes(payload)
            except OSError as exc:
                context.log.warning(
                    "export attempt failed",
                    extra={"attempt": attempt, "path": str(context.path), "error": str(exc)},
                )
                if attempt >= self._max_retries:
                    export_metrics.record("failure")
                    context.log.error(
                        "export failed after retries",
                        extra={"attempt": attempt, "path": str(context.path), "error": str(exc)},
                    )
                    raise ExportError(f"Failed to export to {context.path}: {exc}") from exc
                export_metrics.record("retry", (time.perf_counter() - start) * 1000)
                self._sleep(backoff_ms / 1000)
                backoff_ms = int(min(backoff_ms * 2, 2000))
            else:
                duration = (time.perf_counter() - start) * 1000
                export_metrics.record("success", duration)
                context.log.info(
                    "export complete",
                    extra={"path": str(context.path), "bytes": len(payload), "duration_ms": duration},
                )
                return context.path


__all__ = [
    "ExportError",
    "ExportManager",
    "GifOptions",
    "capture_frame",
    "capture_frames",
    "default_export_name",
    "encode_gif",
    "encode_png",
    "export_metrics",
]
