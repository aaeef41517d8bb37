"""YF map builder - boundary-filtered thematic overlays rendered with folium.

Loads the study-area boundary, filters each thematic GeoJSON dataset
against it and renders everything as one interactive Leaflet page.
"""

from yfmap.boundary import Boundary, load_boundary
from yfmap.catalog import DEFAULT_CATALOGUE, DatasetDescriptor
from yfmap.errors import BoundaryError, DatasetLoadError, GeoJSONError, YFMapError
from yfmap.pipeline import Pipeline, PipelineContext, PipelineResult, StageResult, run_pipeline
from yfmap.render import build_map, render_html, save_map

__all__ = [
    "Boundary",
    "BoundaryError",
    "DEFAULT_CATALOGUE",
    "DatasetDescriptor",
    "DatasetLoadError",
    "GeoJSONError",
    "Pipeline",
    "PipelineContext",
    "PipelineResult",
    "StageResult",
    "YFMapError",
    "build_map",
    "load_boundary",
    "render_html",
    "run_pipeline",
    "save_map",
]
