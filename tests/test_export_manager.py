import logging
import random
from datetime import datetime
from pathlib import Path

import pytest

pytest.importorskip("PySide6.QtCore", reason="PySide6 is required for export workers")

from PIL import Image  # noqa: E402

from glitchbox.controllers import LayerStackController  # noqa: E402
from glitchbox.managers import export as export_module  # noqa: E402
from glitchbox.managers.export import (  # noqa: E402
    ExportError,
    ExportManager,
    GifOptions,
    capture_frame,
    capture_frames,
    default_export_name,
    encode_gif,
    export_metrics,
)
from glitchbox.models import FilterKind  # noqa: E402
from glitchbox.workers import Worker  # noqa: E402


@pytest.fixture(autouse=True)
def _clear_metrics():
    export_metrics.counters.clear()
    export_metrics.durations.clear()


@pytest.fixture
def loaded_controller(make_surface):
    pixels = [((x * 40) % 256, (x * 90) % 256, 120, 255) for x in range(16)]
    controller = LayerStackController(rng=random.Random(5))
    controller.load_image(make_surface(pixels, 4))
    controller.create_layer()
    controller.update_selection(0, filter=FilterKind.FRACTAL_PIXEL_SORT)
    controller.refresh()
    return controller


def test_gif_options_validation():
    assert GifOptions().frame_duration_ms == 67
    with pytest.raises(ValueError):
        GifOptions(framerate=0)
    with pytest.raises(ValueError):
        GifOptions(color_range=1)
    with pytest.raises(ValueError):
        GifOptions(compression_quality=-1)


def test_default_export_name():
    stamp = datetime(2026, 1, 2, 3, 4, 5)
    assert default_export_name("gif", stamp) == "glitch_20260102_030405.gif"
    assert default_export_name(".png", stamp) == "glitch_20260102_030405.png"


def test_capture_requires_surface():
    with pytest.raises(ExportError):
        capture_frame(None)


def test_capture_frames_count(loaded_controller):
    frames = capture_frames(loaded_controller, 3)
    assert len(frames) == 3
    assert all(frame.size == (4, 4) for frame in frames)
    with pytest.raises(ValueError):
        capture_frames(loaded_controller, 0)


def test_encode_gif_requires_frames():
    with pytest.raises(ExportError):
        encode_gif([])


def test_export_png_writes_current_canvas(tmp_path, loaded_controller):
    manager = ExportManager(loaded_controller)
    expected = loaded_controller.state.surface.image.tobytes()
    written = manager.export_png(tmp_path / "out.png")
    with Image.open(written) as img:
        assert img.format == "PNG"
        assert img.convert("RGBA").tobytes() == expected
    assert export_metrics.counters["success"] == 1


def test_export_gif_writes_animation(tmp_path, loaded_controller):
    manager = ExportManager(loaded_controller)
    written = manager.export_gif(tmp_path / "out.gif", GifOptions(framerate=10, color_range=16))
    with Image.open(written) as img:
        assert img.format == "GIF"
        assert img.size == (4, 4)


def test_export_rejects_mismatched_extension(tmp_path, loaded_controller):
    manager = ExportManager(loaded_controller)
    with pytest.raises(ValueError):
        manager.export_png(tmp_path / "out.gif")
    with pytest.raises(ValueError):
        manager.export_gif(tmp_path / "out.bmp")


def test_export_without_image_raises(tmp_path):
    manager = ExportManager(LayerStackController())
    with pytest.raises(ExportError):
        manager.export_png(tmp_path / "out.png")


def test_export_retries_and_logs(tmp_path, caplog, monkeypatch, loaded_controller):
    caplog.set_level(logging.INFO)
    sleeps = []
    manager = ExportManager(loaded_controller, sleep=sleeps.append)

    original = Path.write_bytes
    attempts = {"count": 0}

    def flaky_write(self, data):
        if attempts["count"] < 2:
            attempts["count"] += 1
            raise OSError("disk busy")
        return original(self, data)

    monkeypatch.setattr(Path, "write_bytes", flaky_write)
    written = manager.export_png(tmp_path / "out.png")

    assert written.exists()
    assert sleeps == [0.1, 0.2]
    assert export_metrics.counters["retry"] == 2
    assert export_metrics.counters["success"] == 1
    records = [r for r in caplog.records if r.name == export_module.__name__]
    assert any(r.getMessage() == "export attempt failed" for r in records)
    assert all(getattr(r, "cid", None) for r in records)


def test_export_gives_up_after_max_retries(tmp_path, monkeypatch, loaded_controller):
    manager = ExportManager(loaded_controller, max_retries=2, sleep=lambda _: None)

    def broken_write(self, data):
        raise OSError("read-only")

    monkeypatch.setattr(Path, "write_bytes", broken_write)
    with pytest.raises(ExportError):
        manager.export_png(tmp_path / "out.png")
    assert export_metrics.counters["failure"] == 1
    assert export_metrics.counters["retry"] == 1


def test_export_manager_rejects_bad_retry_count(loaded_controller):
    with pytest.raises(ValueError):
        ExportManager(loaded_controller, max_retries=0)


def test_export_gif_async_reports_result(tmp_path, monkeypatch, loaded_controller):
    monkeypatch.setattr(export_module, "start_worker", lambda worker, pool=None: worker.run())
    results, errors = [], []
    manager = ExportManager(loaded_controller)

    worker = manager.export_gif_async(
        tmp_path / "async.gif", on_result=lambda value: results.append(value),
        on_error=lambda message: errors.append(message),
    )

    assert isinstance(worker, Worker)
    assert errors == []
    assert results == [(tmp_path / "async.gif").resolve()]


def test_worker_reports_errors():
    errors, finished = [], []

    def boom():
        raise RuntimeError("nope")

    worker = Worker(boom)
    worker.signals.error.connect(lambda message: errors.append(message))
    worker.signals.finished.connect(lambda: finished.append(True))
    worker.run()
    assert errors == ["nope"]
    assert finished == [True]
