"""Path checks for images read into the editor and files written by exports."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, Tuple, Union
from urllib.parse import urlparse


def _is_remote(path_str: str) -> bool:
    """Return True if *path_str* carries a URL scheme.

    One-letter schemes are Windows drive letters, not URLs.
    """
    scheme = urlparse(path_str).scheme
    return len(scheme) > 1


def _normalise_exts(exts: Iterable[str]) -> set[str]:
    return {("." + ext.lower().lstrip(".")) for ext in exts}


def validate_image_path(path: Union[str, Path], allowed_exts: Iterable[str]) -> Path:
    """Return the resolved *path* of an existing, supported image file."""
    path_str = str(path)
    if _is_remote(path_str):
        raise ValueError(f"Remote images are not supported: {path_str}")

    try:
        resolved = Path(path_str).expanduser().resolve(strict=True)
    except FileNotFoundError as exc:
        raise ValueError(f"Image not found: {path_str}") from exc

    if not resolved.is_file():
        raise ValueError(f"Not a file: {path_str}")
    if resolved.suffix.lower() not in _normalise_exts(allowed_exts):
        raise ValueError(f"Unsupported image type: {resolved.suffix or '<none>'}")
    return resolved


def validate_export_path(path: Union[str, Path], allowed_formats: Iterable[str]) -> Tuple[Path, str]:
    """Validate an export destination and return it with its format name.

    The parent directory has to exist already; exports never create
    directories on their own.
    """
    path_str = str(path)
    if _is_remote(path_str):
        raise ValueError(f"Cannot export to a URL: {path_str}")

    resolved = Path(path_str).expanduser().resolve()
    if not resolved.parent.is_dir():
        raise ValueError(f"Directory does not exist: {resolved.parent}")

    suffix = resolved.suffix.lower()
    if suffix not in _normalise_exts(allowed_formats):
        raise ValueError(f"Unsupported export format: {suffix or '<none>'}")
    return resolved, suffix.lstrip(".")


__all__ = ["validate_image_path", "validate_export_path"]
