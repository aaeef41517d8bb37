"""Dataset catalogue - which thematic GeoJSON files make up the map.

Each entry declares how its features are drawn and whether they are
filtered against the study-area boundary. Catalogue order is the default
overlay order; entries with render_last are moved to the end.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# Renderers
GEOJSON = "geojson"   # styled area/line features
MARKER = "marker"     # one icon marker per feature at its centroid, name popup
PHOTO = "photo"       # rotated photo icon at the centroid, image popup
ZONES = "zones"       # clickable areas with permanent labels, drawn on top

RENDERERS = (GEOJSON, MARKER, PHOTO, ZONES)

UNNAMED = "Unnamed"

BOUNDARY_NAME = "YF Boundary"

LAYER_STYLES: dict[str, dict] = {
    "boundary": {"color": "#000", "weight": 2, "fillColor": "#FFF", "fillOpacity": 0.0},
    "buildings": {"color": "#A9A9A9", "weight": 1, "fillColor": "#D3D3D3", "fillOpacity": 0.5},
    "major_buildings": {"color": "#000", "weight": 0.5, "fillColor": "#3f3f3f", "fillOpacity": 0.9},
    "parks": {"color": "#006400", "weight": 1, "fillColor": "#90EE90", "fillOpacity": 0.5},
    "projects": {"color": "#00bfff", "weight": 2, "fillColor": "#FFFFFF", "fillOpacity": 0},
    "survey": {"color": "#000000", "weight": 0.25},
    "zones": {"color": "#FF4500", "weight": 3, "fillColor": "#FFA07A", "fillOpacity": 0.05},
    "mask": {"color": "#FFF", "weight": 0, "fillColor": "#FFF", "fillOpacity": 1.0},
}

# Fill opacity while hovering a zone that carries a link
ZONE_HOVER_FILL_OPACITY = 0.3


@dataclass(frozen=True)
class DatasetDescriptor:
    """One thematic dataset in the catalogue.

    Attributes:
        name: Display name, also the overlay registry key.
        source: File name relative to the data directory.
        style: Leaflet path options for area/line features.
        filtered: Keep only features intersecting the boundary.
        renderer: One of RENDERERS.
        icon: Icon file name for MARKER datasets.
        name_property: Property holding the popup/label text.
        render_last: Draw above every other overlay.
        legend_color: Swatch colour for the legend; None leaves it out.
    """

    name: str
    source: str
    style: dict = field(default_factory=dict)
    filtered: bool = True
    renderer: str = GEOJSON
    icon: str | None = None
    name_property: str = "Name"
    render_last: bool = False
    legend_color: str | None = None

    def __post_init__(self) -> None:
        if self.renderer not in RENDERERS:
            raise ValueError(f"Unknown renderer '{self.renderer}' for dataset {self.name}")
        if self.renderer == MARKER and not self.icon:
            raise ValueError(f"Marker dataset {self.name} needs an icon")


DEFAULT_CATALOGUE: tuple[DatasetDescriptor, ...] = (
    DatasetDescriptor("Buildings", "bhbldg.geojson", LAYER_STYLES["buildings"],
                      legend_color="#D3D3D3"),
    DatasetDescriptor("Major Buildings", "maj_b.geojson", LAYER_STYLES["major_buildings"],
                      legend_color="#3f3f3f"),
    DatasetDescriptor("Parks", "parks.geojson", LAYER_STYLES["parks"],
                      legend_color="#90EE90"),
    DatasetDescriptor("SIMA Projects", "sima.geojson", LAYER_STYLES["projects"],
                      legend_color="#00bfff"),
    DatasetDescriptor("Survey", "surv.geojson", LAYER_STYLES["survey"],
                      legend_color="#000000"),
    DatasetDescriptor("Nodes", "nodes.geojson", filtered=False, renderer=MARKER,
                      icon="loz.svg"),
    DatasetDescriptor("Photos", "pho.geojson", filtered=False, renderer=PHOTO),
    DatasetDescriptor("Sports", "cult_spo.geojson", renderer=MARKER, icon="sports.svg"),
    DatasetDescriptor("Detailed Features", "det.geojson", LAYER_STYLES["zones"],
                      filtered=False, renderer=ZONES, name_property="name",
                      render_last=True, legend_color="#FF4500"),
)
