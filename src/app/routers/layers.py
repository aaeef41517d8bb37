"""Overlay inspection endpoints - what loaded, what came back empty."""

from __future__ import annotations

import json

from fastapi import APIRouter, HTTPException, Request
from loguru import logger

from app.map_state import MapState, build_map_state

router = APIRouter(prefix="/api/layers", tags=["layers"])


def _state(request: Request) -> MapState:
    state: MapState | None = getattr(request.app.state, "map", None)
    if state is not None and state.error:
        raise HTTPException(status_code=503, detail=f"Boundary unavailable: {state.error}")
    if state is None or state.result is None:
        raise HTTPException(status_code=503, detail="Map not built yet")
    return state


@router.get("")
async def list_layers(request: Request):
    """List registered overlays in draw order with feature counts and load status."""
    state = _state(request)
    return {
        "built_at": state.built_at,
        "layers": state.result.registry.summary(),
        "failed": state.result.failed,
    }


@router.get("/{name}")
async def get_layer(name: str, request: Request):
    """Return one overlay as a GeoJSON FeatureCollection (after filtering)."""
    state = _state(request)
    try:
        return json.loads(state.result.registry.export_layer(name))
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Layer not found: {name}")


@router.post("/reload")
async def reload_layers(request: Request):
    """Re-run the pipeline and re-render the map."""
    settings = request.app.state.settings
    state = await build_map_state(settings)
    request.app.state.map = state
    if state.error:
        logger.error(f"Reload failed: {state.error}")
        raise HTTPException(status_code=503, detail=f"Boundary unavailable: {state.error}")
    return {
        "built_at": state.built_at,
        "layers": len(state.result.registry),
        "failed": state.result.failed,
    }
