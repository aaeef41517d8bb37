"""GeoJSON builders shared by the map tests.

The study area is the square 0..10 x 0..10 (lng, lat). Every dataset the
default catalogue names has a small document here.
"""

from __future__ import annotations

import json
from pathlib import Path


BOUNDARY_RING = [[0.0, 0.0], [10.0, 0.0], [10.0, 10.0], [0.0, 10.0], [0.0, 0.0]]


def square(x0: float, y0: float, size: float) -> list:
    return [[[x0, y0], [x0 + size, y0], [x0 + size, y0 + size], [x0, y0 + size], [x0, y0]]]


def feature(geom_type: str, coordinates, properties: dict | None = None, fid=None) -> dict:
    f = {
        "type": "Feature",
        "geometry": {"type": geom_type, "coordinates": coordinates},
        "properties": properties or {},
    }
    if fid is not None:
        f["id"] = fid
    return f


def collection(*features: dict) -> dict:
    return {"type": "FeatureCollection", "features": list(features)}


INSIDE = feature("Polygon", square(2, 2, 1), {"kind": "inside"}, fid="inside")
OUTSIDE = feature("Polygon", square(20, 20, 1), {"kind": "outside"}, fid="outside")
STRADDLING = feature("Polygon", square(9, 9, 2), {"kind": "straddling"}, fid="straddling")


def default_datasets() -> dict[str, dict]:
    """One document per file in the default catalogue."""
    return {
        "YF.geojson": collection(feature("Polygon", [BOUNDARY_RING], {"name": "YF"})),
        "bhbldg.geojson": collection(INSIDE, OUTSIDE, STRADDLING),
        "maj_b.geojson": collection(feature("Polygon", square(4, 4, 1))),
        "parks.geojson": collection(feature("Polygon", square(6, 1, 2)), OUTSIDE),
        "sima.geojson": collection(feature("Polygon", square(1, 6, 2))),
        "surv.geojson": collection(
            feature("LineString", [[-5.0, 5.0], [5.0, 5.0]]),
            feature("LineString", [[30.0, 30.0], [31.0, 31.0]]),
        ),
        "nodes.geojson": collection(
            feature("Point", [3.0, 3.0], {"Name": "Gate"}),
            feature("Point", [50.0, 50.0], {}),
        ),
        "pho.geojson": collection(
            feature("Point", [5.0, 5.0], {"direction": 45}),
            feature("Point", [6.0, 6.0], {"direction": 90, "uri": "photos/p2.jpg"}),
        ),
        "cult_spo.geojson": collection(
            feature("Polygon", square(7, 7, 2), {"Name": "Pool"}),
            feature("Point", [40.0, 40.0], {"Name": "Far Field"}),
        ),
        "det.geojson": collection(
            feature("Polygon", square(2, 6, 2), {"url": "https://example.org/plan.pdf", "name": "Zone A"}),
            feature("Polygon", square(6, 6, 1), {}),
        ),
    }


def write_datasets(root: Path, datasets: dict[str, dict]) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    for name, doc in datasets.items():
        (root / name).write_text(json.dumps(doc), encoding="utf-8")
    return root


