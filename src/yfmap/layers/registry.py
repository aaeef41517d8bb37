"""OverlayRegistry - display name to layer mapping for the layer control.

Insertion order is the order overlays are drawn and listed in the control.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone

from yfmap.layers.layer import Layer


class OverlayRegistry:
    """Insertion-ordered registry of map overlays keyed by display name."""

    def __init__(self) -> None:
        self._layers: dict[str, Layer] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._layers

    def __len__(self) -> int:
        return len(self._layers)

    def __iter__(self):
        return iter(self._layers.values())

    def register(self, layer: Layer) -> str:
        """Register a layer under its display name.

        Args:
            layer: The Layer to register. Its z_index is set to its
                position in the registry.

        Returns:
            The display name of the registered layer.

        Raises:
            ValueError: If a layer with the same name is already registered.
        """
        if layer.name in self._layers:
            raise ValueError(f"Overlay '{layer.name}' already registered")
        now = datetime.now(timezone.utc).isoformat()
        layer.created_at = layer.created_at or now
        layer.updated_at = now
        layer.z_index = len(self._layers)
        self._layers[layer.name] = layer
        return layer.name

    def get(self, name: str) -> Layer | None:
        return self._layers.get(name)

    def names(self) -> list[str]:
        return list(self._layers)

    def list_layers(self) -> list[Layer]:
        return list(self._layers.values())

    def export_layer(self, name: str) -> str:
        """Export an overlay as a GeoJSON FeatureCollection string.

        Raises:
            KeyError: If the overlay is not registered.
        """
        layer = self._layers.get(name)
        if layer is None:
            raise KeyError(f"Overlay not found: {name}")
        return json.dumps(layer.to_geojson())

    def summary(self) -> list[dict]:
        """One row per overlay, in registry order."""
        return [
            {
                "name": layer.name,
                "features": len(layer.features),
                "z_index": layer.z_index,
                "visible": layer.visible,
                "loaded": layer.metadata.get("loaded", True),
                "filtered": layer.metadata.get("filtered", False),
            }
            for layer in self._layers.values()
        ]
