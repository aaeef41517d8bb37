"""Map overlay layer system - features, layers and the overlay registry."""

from yfmap.layers.layer import Layer, LayerFeature
from yfmap.layers.registry import OverlayRegistry

__all__ = ["Layer", "LayerFeature", "OverlayRegistry"]
