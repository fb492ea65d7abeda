"""Pure pixel, geometry and audio helpers for glitchbox."""

from . import geometry, pixels, sound, validation

__all__ = ["geometry", "pixels", "sound", "validation"]
