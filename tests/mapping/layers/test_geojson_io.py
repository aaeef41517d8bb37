"""Tests for GeoJSON parsing and layer serialisation."""

import json

import pytest
from yfmap.errors import GeoJSONError
from yfmap.layers import Layer, LayerFeature
from yfmap.layers.parsers.geojson import parse_geojson


FEATURE_COLLECTION = json.dumps({
    "type": "FeatureCollection",
    "name": "nodes",
    "features": [
        {
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": [32.53, 15.59]},
            "properties": {"Name": "Gate", "status": "open"},
        },
        {
            "type": "Feature",
            "geometry": {
                "type": "MultiLineString",
                "coordinates": [[[32.5, 15.5], [32.6, 15.6]], [[32.7, 15.7], [32.8, 15.8]]],
            },
            "properties": None,
        },
        {
            "type": "Feature",
            "id": 7,
            "geometry": {
                "type": "Polygon",
                "coordinates": [[[32.5, 15.5], [32.6, 15.5], [32.6, 15.6], [32.5, 15.5]]],
            },
            "properties": {},
        },
        {"type": "Feature", "geometry": None, "properties": {"Name": "no geometry"}},
        {"type": "Feature", "geometry": {"type": "GeometryCollection", "geometries": []}},
        {"type": "Feature", "geometry": {"type": "Polygon", "coordinates": {"a": 1}}},
        {"type": "Feature", "geometry": {"type": "LineString", "coordinates": [[1.0, 2.0]]}},
    ],
})


@pytest.mark.unit
class TestGeoJSONParser:
    """Parse GeoJSON to Layer."""

    def test_parse_feature_collection_skips_unusable_features(self):
        layer = parse_geojson(FEATURE_COLLECTION)
        assert layer.source_format == "geojson"
        assert [f.geometry_type for f in layer.features] == ["Point", "MultiLineString", "Polygon"]

    def test_skipped_positions_recorded(self):
        layer = parse_geojson(FEATURE_COLLECTION)
        assert layer.metadata["raw_features"] == 7
        assert layer.metadata["skipped"] == [3, 4, 5, 6]

    def test_parsed_geometry_is_built(self):
        polygon = parse_geojson(FEATURE_COLLECTION).features[2]
        assert polygon.geometry.geom_type == "Polygon"

    def test_document_name_used_when_none_given(self):
        assert parse_geojson(FEATURE_COLLECTION).name == "nodes"
        assert parse_geojson(FEATURE_COLLECTION, name="Nodes").name == "Nodes"

    def test_point_keeps_lng_lat_order(self):
        point = parse_geojson(FEATURE_COLLECTION).features[0]
        assert point.coordinates == [32.53, 15.59]

    def test_properties_passthrough(self):
        layer = parse_geojson(FEATURE_COLLECTION)
        assert layer.features[0].properties == {"Name": "Gate", "status": "open"}
        assert layer.features[1].properties == {}

    def test_feature_ids(self):
        layer = parse_geojson(FEATURE_COLLECTION)
        assert layer.features[0].feature_id == "geojson-0"
        assert layer.features[2].feature_id == "7"

    def test_bare_feature(self):
        doc = json.dumps({
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": [1, 2]},
            "properties": {},
        })
        assert len(parse_geojson(doc).features) == 1

    def test_bytes_input(self):
        assert len(parse_geojson(FEATURE_COLLECTION.encode("utf-8")).features) == 3

    def test_empty_collection(self):
        layer = parse_geojson('{"type": "FeatureCollection", "features": []}')
        assert layer.features == []

    def test_malformed_json_raises(self):
        with pytest.raises(GeoJSONError):
            parse_geojson("not valid json {{{")

    def test_non_geojson_document_raises(self):
        with pytest.raises(GeoJSONError):
            parse_geojson('{"hello": "world"}')
        with pytest.raises(GeoJSONError):
            parse_geojson("[1, 2, 3]")


@pytest.mark.unit
class TestLayerToGeoJSON:
    """Serialise a Layer as a FeatureCollection."""

    def test_export_feature_collection(self):
        layer = Layer(
            layer_id="x",
            name="Parks",
            source_format="geojson",
            features=[LayerFeature("p1", "Point", [1.0, 2.0], {"Name": "A"})],
        )
        data = layer.to_geojson()
        assert data["type"] == "FeatureCollection"
        assert data["features"] == [{
            "type": "Feature",
            "id": "p1",
            "geometry": {"type": "Point", "coordinates": [1.0, 2.0]},
            "properties": {"Name": "A"},
        }]

    def test_export_copies_properties(self):
        props = {"Name": "A"}
        layer = Layer("x", "Parks", "geojson", [LayerFeature("p1", "Point", [1.0, 2.0], props)])
        layer.to_geojson()["features"][0]["properties"]["Name"] = "changed"
        assert props["Name"] == "A"
