"""Study-area boundary: the spatial predicate, viewport and mask source.

The boundary file's first feature is the canonical boundary; any further
features are ignored. It must be a single polygon (optionally with holes).
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property

from loguru import logger
from shapely.geometry.base import BaseGeometry
from shapely.prepared import PreparedGeometry, prep

from yfmap.errors import BoundaryError, DatasetLoadError
from yfmap.fetch import GeoJSONFetcher
from yfmap.layers.layer import GEOMETRY_ERRORS, Layer, LayerFeature
from yfmap.spatial import build_mask, filter_features


@dataclass
class Boundary:
    """The resolved boundary polygon and everything derived from it.

    Attributes:
        feature: The boundary feature, always a Polygon.
        layer: The parsed boundary file, for drawing.
    """

    feature: LayerFeature
    layer: Layer

    @property
    def geometry(self) -> BaseGeometry:
        return self.feature.geometry

    @property
    def rings(self) -> list:
        return self.feature.coordinates

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        """(west, south, east, north)."""
        return self.geometry.bounds

    @property
    def fit_bounds(self) -> list[list[float]]:
        """[[south, west], [north, east]] for the initial viewport."""
        west, south, east, north = self.bounds
        return [[south, west], [north, east]]

    @cached_property
    def prepared(self) -> PreparedGeometry:
        return prep(self.geometry)

    def filter(self, features: list[LayerFeature]) -> list[LayerFeature]:
        """Features intersecting the boundary, reusing one prepared geometry."""
        return filter_features(features, self.prepared)

    @cached_property
    def mask(self) -> dict:
        """Mask feature: the world with this boundary cut out."""
        return build_mask(self.rings)


def boundary_from_layer(layer: Layer) -> Boundary:
    """Take the first feature of a parsed boundary file as the boundary.

    The first feature of the source document counts, even when the
    parser had to skip it; a later feature never stands in for it.

    Raises:
        BoundaryError: If there are no features or the first one is not a
            usable single polygon.
    """
    raw_count = layer.metadata.get("raw_features", len(layer.features))
    if raw_count == 0:
        raise BoundaryError("Boundary resource contains no features")
    if 0 in layer.metadata.get("skipped", ()) or not layer.features:
        raise BoundaryError("First boundary feature has no usable geometry")
    if raw_count > 1:
        logger.warning(f"Boundary resource has {raw_count} features; using the first only")

    first = layer.features[0]
    if first.geometry_type == "MultiPolygon":
        if len(first.coordinates) != 1:
            raise BoundaryError(
                f"Boundary must be a single polygon, got a MultiPolygon with "
                f"{len(first.coordinates)} parts"
            )
        first = LayerFeature(
            feature_id=first.feature_id,
            geometry_type="Polygon",
            coordinates=first.coordinates[0],
            properties=first.properties,
        )
    elif first.geometry_type != "Polygon":
        raise BoundaryError(f"Boundary must be a Polygon, got {first.geometry_type}")

    try:
        if first.geometry.is_empty:
            raise BoundaryError("Boundary polygon is empty")
    except GEOMETRY_ERRORS as e:
        raise BoundaryError(f"Boundary polygon is malformed: {e}") from e

    return Boundary(feature=first, layer=layer)


async def load_boundary(fetcher: GeoJSONFetcher, filename: str, name: str) -> Boundary:
    """Fetch and resolve the boundary.

    Raises:
        BoundaryError: On any fetch, parse or geometry failure.
    """
    try:
        layer = await fetcher.fetch(filename, name=name)
    except DatasetLoadError as e:
        raise BoundaryError(str(e)) from e

    boundary = boundary_from_layer(layer)
    west, south, east, north = boundary.bounds
    logger.info(
        f"Boundary loaded from {filename}: "
        f"bounds W{west:.5f} S{south:.5f} E{east:.5f} N{north:.5f}"
    )
    return boundary
