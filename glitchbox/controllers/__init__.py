"""Controller layer mediating between UI widgets and the layer stack."""

from .layers import DOWN, UP, LayerStackController

__all__ = [
    "LayerStackController",
    "UP",
    "DOWN",
]
