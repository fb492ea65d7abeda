import pytest

from imaging.validation import validate_export_path, validate_image_path
from glitchbox import config


def test_validate_image_path_rejects_urls():
    with pytest.raises(ValueError):
        validate_image_path("http://example.com/a.png", config.SUPPORTED_IMAGE_FORMATS)


def test_validate_image_path_rejects_bad_extension(tmp_path):
    f = tmp_path / "evil.txt"
    f.write_text("not an image")
    with pytest.raises(ValueError):
        validate_image_path(f, config.SUPPORTED_IMAGE_FORMATS)


def test_validate_image_path_rejects_missing_and_directories(tmp_path):
    with pytest.raises(ValueError):
        validate_image_path(tmp_path / "nope.png", config.SUPPORTED_IMAGE_FORMATS)
    folder = tmp_path / "dir.png"
    folder.mkdir()
    with pytest.raises(ValueError):
        validate_image_path(folder, config.SUPPORTED_IMAGE_FORMATS)


def test_validate_image_path_accepts_uppercase_suffix(tmp_path):
    f = tmp_path / "PHOTO.PNG"
    f.write_bytes(b"x")
    assert validate_image_path(str(f), [".png"]) == f.resolve()


def test_validate_export_path_checks_directory(tmp_path):
    with pytest.raises(ValueError):
        validate_export_path(tmp_path / "missing" / "out.png", config.EXPORT_FORMATS)


def test_validate_export_path_checks_format(tmp_path):
    with pytest.raises(ValueError):
        validate_export_path(tmp_path / "out.jpg", config.EXPORT_FORMATS)
    with pytest.raises(ValueError):
        validate_export_path("ftp://host/out.gif", config.EXPORT_FORMATS)


def test_validate_export_path_returns_format(tmp_path):
    path, fmt = validate_export_path(tmp_path / "Out.GIF", config.EXPORT_FORMATS)
    assert fmt == "gif"
    assert path.parent == tmp_path.resolve()
