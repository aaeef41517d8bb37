"""Layer and LayerFeature dataclasses for the overlay system.

All coordinates are stored in GeoJSON convention: [lng, lat].
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property

from shapely.errors import ShapelyError
from shapely.geometry import shape
from shapely.geometry.base import BaseGeometry

GEOMETRY_TYPES = (
    "Point",
    "MultiPoint",
    "LineString",
    "MultiLineString",
    "Polygon",
    "MultiPolygon",
)

# Raised by shapely when coordinates cannot form the declared geometry
GEOMETRY_ERRORS = (ShapelyError, ValueError, TypeError, IndexError, KeyError, AttributeError)


@dataclass
class LayerFeature:
    """A single feature (point, line, polygon) within a layer.

    Attributes:
        feature_id: Unique identifier for this feature.
        geometry_type: One of GEOMETRY_TYPES.
        coordinates: GeoJSON-style coordinate arrays.
            Point: [lng, lat]
            LineString: [[lng, lat], [lng, lat], ...]
            Polygon: [[[lng, lat], [lng, lat], ...]]  (list of rings)
        properties: Arbitrary key-value metadata. Absent keys mean default.
    """

    feature_id: str
    geometry_type: str
    coordinates: list
    properties: dict = field(default_factory=dict)

    @cached_property
    def geometry(self) -> BaseGeometry:
        """Shapely geometry built from the GeoJSON coordinates."""
        return shape({"type": self.geometry_type, "coordinates": self.coordinates})

    @property
    def centroid(self) -> tuple[float, float]:
        """Geometric centroid as (lng, lat). Not necessarily a vertex."""
        c = self.geometry.centroid
        return (c.x, c.y)

    def prop(self, key: str, default=None):
        """Property lookup where a missing, None or empty value means default."""
        value = self.properties.get(key)
        if value is None or value == "":
            return default
        return value

    def to_geojson(self) -> dict:
        """GeoJSON Feature dict. Properties are copied."""
        return {
            "type": "Feature",
            "id": self.feature_id,
            "geometry": {"type": self.geometry_type, "coordinates": self.coordinates},
            "properties": dict(self.properties),
        }


@dataclass
class Layer:
    """A named collection of geographic features.

    Attributes:
        layer_id: Unique identifier for this layer.
        name: Display name, also the key in the overlay registry.
        source_format: Original format ("geojson").
        features: List of LayerFeature instances.
        style: Leaflet path options applied to area/line features.
        visible: Whether the layer is shown when the map opens.
        opacity: Rendering opacity (0.0 to 1.0).
        z_index: Draw order (higher = on top).
        metadata: Arbitrary key-value metadata about the layer.
        created_at: ISO8601 creation timestamp.
        updated_at: ISO8601 last-update timestamp.
    """

    layer_id: str
    name: str
    source_format: str
    features: list[LayerFeature]
    style: dict = field(default_factory=dict)
    visible: bool = True
    opacity: float = 1.0
    z_index: int = 0
    metadata: dict = field(default_factory=dict)
    created_at: str = ""
    updated_at: str = ""

    def __len__(self) -> int:
        return len(self.features)

    @property
    def is_empty(self) -> bool:
        return not self.features

    def to_geojson(self) -> dict:
        """The layer as a FeatureCollection, as served by the API and handed to folium."""
        return {"type": "FeatureCollection", "features": [f.to_geojson() for f in self.features]}
