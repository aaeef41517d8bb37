"""Boundary predicate, feature filtering and mask construction.

Features are kept or dropped whole: a feature that intersects the boundary
at all is kept with its full, unclipped geometry.

Coordinate convention: everything here is GeoJSON [lng, lat]. The mask is
handed to folium as GeoJSON, which swaps to Leaflet's [lat, lng] itself,
so no manual swap is applied anywhere.
"""

from __future__ import annotations

from typing import Iterable

from loguru import logger
from shapely.geometry.base import BaseGeometry
from shapely.prepared import PreparedGeometry, prep

from yfmap.layers.layer import GEOMETRY_ERRORS, LayerFeature

# Full valid coordinate extent, closed, [lng, lat]
WORLD_RING = [[-180.0, -90.0], [-180.0, 90.0], [180.0, 90.0], [180.0, -90.0], [-180.0, -90.0]]


def keep_if_inside(feature: LayerFeature, boundary: BaseGeometry | PreparedGeometry) -> bool:
    """True iff the feature shares at least one point with the boundary."""
    try:
        return boundary.intersects(feature.geometry)
    except GEOMETRY_ERRORS as e:
        logger.debug(f"Feature {feature.feature_id} has unusable geometry: {e}")
        return False


def filter_features(
    features: Iterable[LayerFeature], boundary: BaseGeometry | PreparedGeometry
) -> list[LayerFeature]:
    """Return the features intersecting the boundary as a new list."""
    prepared = boundary if isinstance(boundary, PreparedGeometry) else prep(boundary)
    return [f for f in features if keep_if_inside(f, prepared)]


def build_mask(boundary_rings: list) -> dict:
    """Build the mask feature for a boundary polygon.

    Args:
        boundary_rings: The boundary Polygon's coordinates (outer ring
            first, then its own holes), [lng, lat].

    Returns:
        GeoJSON Feature: a Polygon whose outer ring is WORLD_RING and whose
        holes are the boundary rings, copied in their original order.
    """
    if not boundary_rings:
        raise ValueError("Boundary polygon has no rings")
    holes = [[[c[0], c[1]] for c in ring] for ring in boundary_rings]
    return {
        "type": "Feature",
        "properties": {"role": "mask"},
        "geometry": {
            "type": "Polygon",
            "coordinates": [list(WORLD_RING)] + holes,
        },
    }


def top_center(geometry: BaseGeometry) -> tuple[float, float]:
    """Top-center of the bounding box as (lat, lng)."""
    west, _south, east, north = geometry.bounds
    return (north, (west + east) / 2)
