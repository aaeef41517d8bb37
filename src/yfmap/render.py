"""Render a pipeline result as an interactive Leaflet map with folium.

Draw order: basemaps, boundary, mask, then the registered overlays in
registry order (the pipeline has already put render_last datasets at the
end). The layer control is added once, after every overlay.
"""

from __future__ import annotations

import html
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import folium
from folium.utilities import JsCode
from loguru import logger

from yfmap.catalog import (
    GEOJSON,
    LAYER_STYLES,
    MARKER,
    PHOTO,
    UNNAMED,
    ZONE_HOVER_FILL_OPACITY,
    ZONES,
    DatasetDescriptor,
)
from yfmap.layers.layer import GEOMETRY_ERRORS, Layer, LayerFeature
from yfmap.spatial import top_center

if TYPE_CHECKING:
    from app.config import Settings
    from yfmap.pipeline import PipelineResult

BASEMAPS: dict[str, dict] = {
    "OSM": {
        "tiles": "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png",
        "attr": '&copy; <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> contributors',
    },
    "Basemap": {
        "tiles": "https://{s}.basemaps.cartocdn.com/light_nolabels/{z}/{x}/{y}{r}.png",
        "attr": '&copy; <a href="https://carto.com/attributions">CARTO</a>',
        "subdomains": "abcd",
    },
    "Satellite": {
        "tiles": "https://server.arcgisonline.com/ArcGIS/rest/services/World_Imagery/MapServer/tile/{z}/{y}/{x}",
        "attr": '&copy; <a href="https://www.esri.com/">Esri</a>',
    },
}
WHITE_BACKGROUND = "White Background"
MAX_ZOOM = 19

# Opens the zone's link in a new browsing context when clicked
_ZONE_CLICK_JS = JsCode("""
function(feature, layer) {
    var props = feature.properties || {};
    if (props.url) {
        layer.on('click', function() { window.open(props.url, '_blank'); });
    }
}
""")

_PAGE_CSS = """
<style>
  .leaflet-container { background: #fff; }
  .yf-mask { pointer-events: none; }
  .polygon-label { background: transparent; border: none; box-shadow: none; }
  .feature-label { font: 600 12px sans-serif; color: #FF4500; white-space: nowrap;
                   text-shadow: 0 0 3px #fff, 0 0 3px #fff; }
  .photo-icon, .marker-icon { background: transparent; border: none; }
  .photo-icon img { width: 24px; height: 24px; }
  .photo-popup img { max-width: 280px; display: block; }
  .photo-caption { font: 11px sans-serif; color: #555; margin-top: 4px; }
  .north-arrow { position: fixed; bottom: 90px; right: 12px; z-index: 1000; }
  .north-arrow img { width: 36px; }
  .map-legend { position: fixed; top: 12px; right: 12px; z-index: 1000; background: #fff;
                padding: 6px 10px; border-radius: 4px; font: 12px sans-serif;
                box-shadow: 0 1px 4px rgba(0,0,0,0.3); }
  .legend-header { cursor: pointer; font-weight: 600; }
  .legend-swatch { display: inline-block; width: 12px; height: 12px; margin-right: 6px;
                   border: 1px solid #666; vertical-align: middle; }
</style>
"""


# ---------------------------------------------------------------------------
# Per-feature presentation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PhotoMarker:
    location: tuple[float, float]  # (lat, lng)
    direction: float
    uri: str


@dataclass(frozen=True)
class ZoneAnnotation:
    url: str | None
    label: str | None
    label_location: tuple[float, float] | None  # (lat, lng), top-center of bbox


def marker_location(feature: LayerFeature) -> tuple[float, float]:
    """Centroid of any geometry as (lat, lng)."""
    lng, lat = feature.centroid
    return (lat, lng)


def feature_popup_text(feature: LayerFeature, name_property: str = "Name") -> str:
    return str(feature.prop(name_property, UNNAMED))


def photo_marker_spec(feature: LayerFeature, placeholder: str) -> PhotoMarker:
    """Rotation and image for a photo feature; defaults are 0 degrees and the placeholder."""
    try:
        direction = float(feature.prop("direction", 0))
    except (TypeError, ValueError):
        direction = 0.0
    return PhotoMarker(
        location=marker_location(feature),
        direction=direction,
        uri=str(feature.prop("uri", placeholder)),
    )


def zone_annotations(feature: LayerFeature, name_property: str = "name") -> ZoneAnnotation:
    label = feature.prop(name_property)
    return ZoneAnnotation(
        url=feature.prop("url"),
        label=str(label) if label is not None else None,
        label_location=top_center(feature.geometry) if label is not None else None,
    )


def _icon_url(settings: Settings, filename: str) -> str:
    return f"{settings.icons_path.rstrip('/')}/{filename}"


# ---------------------------------------------------------------------------
# Overlay builders
# ---------------------------------------------------------------------------

def _geojson(layer: Layer, **kwargs) -> folium.GeoJson:
    style = dict(layer.style)
    data = layer.to_geojson()
    # folium keys its style mapping on feature ids, which must be unique
    ids = [f["id"] for f in data["features"]]
    if len(set(ids)) != len(ids):
        for idx, f in enumerate(data["features"]):
            f["id"] = f"{layer.layer_id}-{idx}"
    return folium.GeoJson(
        data,
        style_function=lambda _feature: style,
        control=False,
        **kwargs,
    )


def _add_markers(group: folium.FeatureGroup, layer: Layer, descriptor: DatasetDescriptor,
                 settings: Settings) -> int:
    icon_url = _icon_url(settings, descriptor.icon)
    added = 0
    for feature in layer.features:
        try:
            location = marker_location(feature)
        except GEOMETRY_ERRORS as e:
            logger.debug(f"{layer.name}: no centroid for {feature.feature_id}: {e}")
            continue
        folium.Marker(
            location=location,
            icon=folium.DivIcon(
                html=f'<img src="{icon_url}" width="20" height="20">',
                icon_size=(20, 20),
                icon_anchor=(10, 10),
                popup_anchor=(0, -10),
                class_name="marker-icon",
            ),
            popup=folium.Popup(html.escape(feature_popup_text(feature, descriptor.name_property))),
        ).add_to(group)
        added += 1
    return added


def _add_photos(group: folium.FeatureGroup, layer: Layer, settings: Settings) -> int:
    icon_url = _icon_url(settings, "photo.svg")
    added = 0
    for feature in layer.features:
        try:
            spec = photo_marker_spec(feature, settings.photo_placeholder)
        except GEOMETRY_ERRORS as e:
            logger.debug(f"{layer.name}: no centroid for {feature.feature_id}: {e}")
            continue
        uri = html.escape(spec.uri, quote=True)
        icon = folium.DivIcon(
            html=f'<img src="{icon_url}" style="transform: rotate({spec.direction:g}deg);">',
            icon_size=(24, 24),
            icon_anchor=(12, 12),
            popup_anchor=(0, -12),
            class_name="photo-icon",
        )
        popup = folium.Popup(
            f'<div class="photo-popup"><img src="{uri}" alt="Site photo">'
            f'<div class="photo-caption">{uri}</div></div>',
            max_width=300,
        )
        folium.Marker(location=spec.location, icon=icon, popup=popup).add_to(group)
        added += 1
    return added


def _add_zones(group: folium.FeatureGroup, layer: Layer, descriptor: DatasetDescriptor) -> int:
    _geojson(
        layer,
        highlight_function=lambda f: (
            {"fillOpacity": ZONE_HOVER_FILL_OPACITY}
            if (f.get("properties") or {}).get("url") else {}
        ),
        on_each_feature=_ZONE_CLICK_JS,
    ).add_to(group)

    labels = 0
    for feature in layer.features:
        try:
            note = zone_annotations(feature, descriptor.name_property)
        except GEOMETRY_ERRORS as e:
            logger.debug(f"{layer.name}: no label position for {feature.feature_id}: {e}")
            continue
        if note.label is None:
            continue
        folium.Marker(
            location=note.label_location,
            icon=folium.DivIcon(
                html=f'<span class="feature-label">{html.escape(note.label)}</span>',
                icon_size=(160, 20),
                icon_anchor=(80, 40),
                class_name="polygon-label",
            ),
        ).add_to(group)
        labels += 1
    return labels


def build_overlay(layer: Layer, descriptor: DatasetDescriptor | None,
                  settings: Settings) -> folium.FeatureGroup:
    """One toggleable group per registered layer; empty layers give an empty group."""
    group = folium.FeatureGroup(name=layer.name, show=layer.visible)
    if layer.is_empty:
        return group

    renderer = descriptor.renderer if descriptor else GEOJSON
    if renderer == MARKER:
        _add_markers(group, layer, descriptor, settings)
    elif renderer == PHOTO:
        _add_photos(group, layer, settings)
    elif renderer == ZONES:
        _add_zones(group, layer, descriptor)
    else:
        _geojson(layer).add_to(group)
    return group


# ---------------------------------------------------------------------------
# Map chrome
# ---------------------------------------------------------------------------

def _add_basemaps(m: folium.Map, default: str) -> None:
    if default not in BASEMAPS and default != WHITE_BACKGROUND:
        logger.warning(f"Unknown default basemap '{default}', using 'Basemap'")
        default = "Basemap"
    for name, options in BASEMAPS.items():
        folium.TileLayer(
            name=name,
            max_zoom=MAX_ZOOM,
            overlay=False,
            control=True,
            show=(name == default),
            **options,
        ).add_to(m)
    folium.FeatureGroup(
        name=WHITE_BACKGROUND, overlay=False, control=True, show=(default == WHITE_BACKGROUND),
    ).add_to(m)


def _add_mask(m: folium.Map, mask: dict) -> None:
    style = dict(LAYER_STYLES["mask"], className="yf-mask", interactive=False)
    folium.GeoJson(mask, style_function=lambda _feature: style, control=False).add_to(m)


def _add_north_arrow(m: folium.Map, settings: Settings) -> None:
    m.get_root().html.add_child(folium.Element(
        f'<div class="north-arrow"><img src="{_icon_url(settings, "north-arrow.svg")}" '
        f'alt="North Arrow"></div>'
    ))


def legend_entries(result: PipelineResult) -> list[tuple[str, str]]:
    """(name, colour) for every registered overlay that declares a legend swatch."""
    entries = []
    for layer in result.registry:
        descriptor = result.descriptors.get(layer.name)
        if descriptor is not None and descriptor.legend_color:
            entries.append((layer.name, descriptor.legend_color))
    return entries


def _add_legend(m: folium.Map, entries: list[tuple[str, str]]) -> None:
    items = "".join(
        f'<div><span class="legend-swatch" style="background:{color}"></span>'
        f"{html.escape(name)}</div>"
        for name, color in entries
    )
    m.get_root().html.add_child(folium.Element(f"""
<div class="map-legend">
  <div class="legend-header">+ Legend</div>
  <div class="legend-items" style="display:none">{items}</div>
</div>
<script>
  (function() {{
    var header = document.querySelector('.map-legend .legend-header');
    var items = document.querySelector('.map-legend .legend-items');
    header.addEventListener('click', function() {{
      var hidden = items.style.display === 'none' || !items.style.display;
      items.style.display = hidden ? 'block' : 'none';
      header.innerHTML = hidden ? '- Legend' : '+ Legend';
    }});
  }})();
</script>
"""))


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def build_map(result: PipelineResult, settings: Settings) -> folium.Map:
    """Build the folium map for a pipeline result."""
    boundary = result.boundary
    west, south, east, north = boundary.bounds

    m = folium.Map(
        location=[(south + north) / 2, (west + east) / 2],
        tiles=None,
        control_scale=True,
        max_zoom=MAX_ZOOM,
    )
    m.fit_bounds(boundary.fit_bounds)
    m.get_root().header.add_child(folium.Element(_PAGE_CSS))
    m.get_root().title = settings.map_title

    _add_basemaps(m, settings.default_basemap)

    layers = result.registry.list_layers()
    # The boundary is always the first registered layer; the mask sits right above it
    build_overlay(layers[0], None, settings).add_to(m)
    _add_mask(m, boundary.mask)
    for layer in layers[1:]:
        build_overlay(layer, result.descriptors.get(layer.name), settings).add_to(m)

    folium.LayerControl(position="bottomright", collapsed=True).add_to(m)
    _add_north_arrow(m, settings)
    _add_legend(m, legend_entries(result))

    logger.info(f"Map built with {len(layers)} overlay(s)")
    return m


def render_html(result: PipelineResult, settings: Settings) -> str:
    return build_map(result, settings).get_root().render()


def save_map(result: PipelineResult, settings: Settings, path: str | Path | None = None) -> Path:
    out = Path(path or settings.output_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    build_map(result, settings).save(str(out))
    logger.info(f"Map written to {out}")
    return out
