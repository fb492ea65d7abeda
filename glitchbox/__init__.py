"""Glitchbox: layered selection/filter compositing for glitch art."""

__version__ = "0.1.0"
