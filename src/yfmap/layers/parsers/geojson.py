"""Parse GeoJSON (RFC 7946) to Layer using stdlib json.

Handles FeatureCollection and bare Feature documents with Point, LineString,
Polygon and their Multi* geometries. Passes through properties dict.
Coordinates are already in [lng, lat] order.
"""

from __future__ import annotations

import json
import uuid

from loguru import logger

from yfmap.errors import GeoJSONError
from yfmap.layers.layer import GEOMETRY_ERRORS, GEOMETRY_TYPES, Layer, LayerFeature


def parse_geojson(geojson_string: str | bytes, name: str = "") -> Layer:
    """Parse a GeoJSON string into a Layer.

    Args:
        geojson_string: Raw GeoJSON content.
        name: Display name for the layer. Falls back to the document's
            "name" member.

    Returns:
        Layer with parsed features. Features whose geometry is missing,
        unsupported or cannot be built are skipped; their positions in the
        source document are listed in metadata["skipped"].

    Raises:
        GeoJSONError: If the content is not JSON, or not a Feature or
            FeatureCollection.
    """
    try:
        data = json.loads(geojson_string)
    except (json.JSONDecodeError, TypeError, UnicodeDecodeError) as e:
        raise GeoJSONError(f"Malformed JSON: {e}") from e

    if not isinstance(data, dict):
        raise GeoJSONError("GeoJSON root must be an object")

    doc_type = data.get("type")
    if doc_type == "FeatureCollection":
        raw_features = data.get("features") or []
        if not isinstance(raw_features, list):
            raise GeoJSONError("FeatureCollection.features must be a list")
    elif doc_type == "Feature":
        raw_features = [data]
    else:
        raise GeoJSONError(f"Unsupported GeoJSON type: {doc_type!r}")

    features: list[LayerFeature] = []
    skipped: list[int] = []
    for idx, raw in enumerate(raw_features):
        feature = _parse_feature(raw, idx)
        if feature is None:
            skipped.append(idx)
        else:
            features.append(feature)

    if skipped:
        logger.debug(f"GeoJSON '{name or data.get('name', '')}': skipped {len(skipped)} feature(s)")

    return Layer(
        layer_id=f"layer-{uuid.uuid4().hex[:8]}",
        name=name or data.get("name", ""),
        source_format="geojson",
        features=features,
        metadata={"raw_features": len(raw_features), "skipped": skipped},
    )


def _parse_feature(raw: dict, idx: int) -> LayerFeature | None:
    """Parse a single GeoJSON Feature dict into a LayerFeature."""
    if not isinstance(raw, dict):
        return None

    geometry = raw.get("geometry")
    if not isinstance(geometry, dict):
        return None

    geom_type = geometry.get("type", "")
    coordinates = geometry.get("coordinates")

    if geom_type not in GEOMETRY_TYPES or not coordinates:
        return None

    properties = raw.get("properties") or {}
    if not isinstance(properties, dict):
        properties = {}

    feature_id = raw.get("id", f"geojson-{idx}")
    if not isinstance(feature_id, str):
        feature_id = str(feature_id)

    feature = LayerFeature(
        feature_id=feature_id,
        geometry_type=geom_type,
        coordinates=coordinates,
        properties=properties,
    )
    try:
        if feature.geometry.is_empty:
            return None
    except GEOMETRY_ERRORS as e:
        logger.debug(f"Feature {feature_id}: unusable {geom_type} geometry: {e}")
        return None
    return feature
