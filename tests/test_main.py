import json

import pytest

pytest.importorskip("PySide6.QtCore", reason="PySide6 is required by the export layer")

from PIL import Image  # noqa: E402

from glitchbox import config  # noqa: E402
from glitchbox.main import LOGGER_NAME, configure_logging, main  # noqa: E402


@pytest.fixture
def inputs(tmp_path):
    image_path = tmp_path / "input.png"
    Image.new("RGB", (6, 4), (30, 60, 90)).save(image_path)
    recipe_path = tmp_path / "recipe.json"
    recipe_path.write_text(
        json.dumps(
            {
                "seed": 3,
                "layers": [
                    {"filter": "Grayscale", "area": {"rect": [0, 0, 3, 4]}},
                    {"filter": "FractalPixelSort", "area": {"rect": [3, 0, 3, 4]}},
                ],
            }
        ),
        encoding="utf-8",
    )
    return image_path, recipe_path


def test_configure_logging_is_idempotent(tmp_path):
    logger = configure_logging(tmp_path)
    handlers = list(logger.handlers)
    assert logger.name == LOGGER_NAME
    assert len(handlers) == 2
    assert configure_logging(tmp_path).handlers == handlers
    assert (tmp_path / config.LOG_FILENAME).exists()


def test_main_exports_png(tmp_path, inputs):
    image_path, recipe_path = inputs
    out = tmp_path / "result.png"
    code = main([str(image_path), str(recipe_path), "-o", str(out), "--log-dir", str(tmp_path)])
    assert code == 0
    with Image.open(out) as img:
        assert img.size == (6, 4)
        assert img.convert("RGBA").getpixel((0, 0)) == (60, 60, 60, 255)


def test_main_exports_gif(tmp_path, inputs):
    image_path, recipe_path = inputs
    out = tmp_path / "result.gif"
    code = main(
        [str(image_path), str(recipe_path), "-o", str(out), "--framerate", "5", "--log-dir", str(tmp_path)]
    )
    assert code == 0
    with Image.open(out) as img:
        assert img.format == "GIF"


def test_main_reports_bad_recipe(tmp_path, inputs):
    image_path, _ = inputs
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"layers": [{"filter": "Sepia"}]}), encoding="utf-8")
    code = main([str(image_path), str(bad), "-o", str(tmp_path / "x.png"), "--log-dir", str(tmp_path)])
    assert code == 1
    log_text = (tmp_path / config.LOG_FILENAME).read_text(encoding="utf-8")
    assert "unknown filter 'Sepia'" in log_text


def test_main_reports_bad_gif_options(tmp_path, inputs):
    image_path, recipe_path = inputs
    code = main(
        [str(image_path), str(recipe_path), "-o", str(tmp_path / "x.gif"), "--colors", "1", "--log-dir", str(tmp_path)]
    )
    assert code == 1
    assert not (tmp_path / "x.gif").exists()
