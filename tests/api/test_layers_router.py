"""Test the overlay inspection endpoints."""

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from yfmap.catalog import BOUNDARY_NAME


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as c:
        yield c


@pytest.mark.unit
class TestListLayers:

    def test_summary_in_draw_order(self, client):
        response = client.get("/api/layers")
        assert response.status_code == 200
        data = response.json()
        names = [row["name"] for row in data["layers"]]
        assert names[0] == BOUNDARY_NAME
        assert names[-1] == "Detailed Features"
        assert data["failed"] == []
        assert [row["z_index"] for row in data["layers"]] == list(range(len(names)))

    def test_feature_counts_after_filtering(self, client):
        rows = {row["name"]: row for row in client.get("/api/layers").json()["layers"]}
        assert rows["Buildings"]["features"] == 2
        assert rows["Buildings"]["filtered"] is True
        assert rows["Nodes"]["features"] == 2
        assert rows["Nodes"]["filtered"] is False
        assert rows["Sports"]["features"] == 1

    def test_failed_dataset_reported(self, client, data_dir):
        (data_dir / "parks.geojson").unlink()
        client.post("/api/layers/reload")
        data = client.get("/api/layers").json()
        assert data["failed"] == ["Parks"]
        parks = next(row for row in data["layers"] if row["name"] == "Parks")
        assert parks["features"] == 0
        assert parks["loaded"] is False


@pytest.mark.unit
class TestGetLayer:

    def test_layer_as_geojson(self, client):
        response = client.get("/api/layers/Buildings")
        assert response.status_code == 200
        data = response.json()
        assert data["type"] == "FeatureCollection"
        assert [f["id"] for f in data["features"]] == ["inside", "straddling"]

    def test_unknown_layer(self, client):
        assert client.get("/api/layers/Nope").status_code == 404


@pytest.mark.unit
class TestReload:

    def test_reload_rebuilds(self, client):
        before = client.get("/health").json()["built_at"]
        response = client.post("/api/layers/reload")
        assert response.status_code == 200
        data = response.json()
        assert data["layers"] == 10
        assert data["failed"] == []
        assert data["built_at"] >= before

    def test_reload_without_boundary(self, client, data_dir):
        (data_dir / "YF.geojson").unlink()
        response = client.post("/api/layers/reload")
        assert response.status_code == 503
        assert client.get("/api/layers").status_code == 503
        assert client.get("/").status_code == 503
