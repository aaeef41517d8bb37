"""Rendered map held by the running app.

Built at startup and on reload. A boundary failure is kept as the state's
error so every request can report it instead of serving an empty map.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from loguru import logger

from app.config import Settings
from yfmap.errors import BoundaryError
from yfmap.pipeline import PipelineResult, run_pipeline
from yfmap.render import render_html


@dataclass
class MapState:
    html: str | None = None
    result: PipelineResult | None = None
    error: str | None = None
    built_at: str = ""

    @property
    def ready(self) -> bool:
        return self.html is not None and self.error is None


async def build_map_state(settings: Settings) -> MapState:
    """Run the pipeline and render the page."""
    built_at = datetime.now(timezone.utc).isoformat()
    try:
        result = await run_pipeline(settings)
    except BoundaryError as e:
        return MapState(error=str(e), built_at=built_at)

    html = render_html(result, settings)
    logger.info(f"Map rendered ({len(html) // 1024} KiB)")
    return MapState(html=html, result=result, built_at=built_at)
