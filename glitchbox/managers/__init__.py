"""Collaborators that consume the rendered canvas."""

from .export import ExportError, ExportManager, GifOptions, export_metrics

__all__ = ["ExportError", "ExportManager", "GifOptions", "export_metrics"]
