"""Test the YF Map application endpoints."""

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from geo_fixtures import default_datasets, write_datasets


@pytest.fixture
def client(settings):
    """Test client with the lifespan run, so the map is built."""
    with TestClient(create_app(settings)) as c:
        yield c


@pytest.fixture
def broken_client(tmp_path, settings):
    """Client over a data directory with no boundary file."""
    datasets = default_datasets()
    del datasets["YF.geojson"]
    data = write_datasets(tmp_path / "no-boundary", datasets)
    cfg = settings.model_copy(update={"data_path": str(data)})
    with TestClient(create_app(cfg)) as c:
        yield c


@pytest.mark.unit
class TestRoot:
    """Test the map page."""

    def test_serves_map(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "L.control.layers(" in response.text

    def test_missing_boundary_is_503(self, broken_client):
        response = broken_client.get("/")
        assert response.status_code == 503
        assert "boundary could not be loaded" in response.text
        assert "YF.geojson" in response.text


@pytest.mark.unit
class TestHealth:
    """Test health endpoint."""

    def test_health(self, client):
        data = client.get("/health").json()
        assert data["status"] == "operational"
        assert data["system"] == "YF Map"
        assert data["error"] is None
        assert data["built_at"]

    def test_health_degraded(self, broken_client):
        data = broken_client.get("/health").json()
        assert data["status"] == "degraded"
        assert "YF.geojson" in data["error"]


@pytest.mark.unit
class TestStaticMounts:
    """Icons and local data files are served next to the page."""

    def test_data_files_served(self, client):
        response = client.get("/data/parks.geojson")
        assert response.status_code == 200
        assert response.json()["type"] == "FeatureCollection"

    def test_icons_served(self, tmp_path, settings):
        icons = tmp_path / "icons"
        icons.mkdir()
        (icons / "loz.svg").write_text('<svg xmlns="http://www.w3.org/2000/svg"/>')
        with TestClient(create_app(settings)) as c:
            assert c.get("/icons/loz.svg").status_code == 200

    def test_icons_not_mounted_when_missing(self, client):
        assert client.get("/icons/loz.svg").status_code == 404
