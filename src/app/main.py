"""YF Map - interactive study-area map.

Main FastAPI application.
"""

import html
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger

from app.config import Settings, settings as default_settings
from app.map_state import MapState, build_map_state
from app.routers.layers import router as layers_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the map once at startup."""
    cfg: Settings = app.state.settings
    logger.info("=" * 60)
    logger.info(f"  {cfg.app_name} starting (data: {cfg.data_path})")
    logger.info("=" * 60)

    app.state.map = await build_map_state(cfg)
    if app.state.map.error:
        logger.critical(f"Map unavailable: {app.state.map.error}")
    else:
        logger.info(f"{cfg.app_name} ONLINE")

    yield

    logger.info(f"{cfg.app_name} shutting down...")


def create_app(settings: Settings | None = None) -> FastAPI:
    cfg = settings or default_settings

    app = FastAPI(
        title=cfg.app_name,
        description="Interactive map of the YF study area",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = cfg
    app.state.map = MapState()

    app.include_router(layers_router)

    # Display assets referenced by the rendered page
    icons_dir = Path(cfg.icons_dir)
    if icons_dir.is_dir():
        app.mount(f"/{cfg.icons_path.strip('/')}", StaticFiles(directory=icons_dir), name="icons")
    if not cfg.data_path.startswith(("http://", "https://")) and Path(cfg.data_path).is_dir():
        app.mount("/data", StaticFiles(directory=cfg.data_path), name="data")

    @app.get("/", response_class=HTMLResponse)
    async def root(request: Request):
        """Serve the rendered map."""
        state: MapState = request.app.state.map
        if state.ready:
            return HTMLResponse(content=state.html)
        reason = html.escape(state.error or "Map has not been built yet.")
        return HTMLResponse(
            status_code=503,
            content=f"""
            <html>
                <head><title>{cfg.app_name}</title></head>
                <body style="font-family: sans-serif;">
                    <h1>{cfg.app_name}</h1>
                    <p>The study-area boundary could not be loaded, so the map cannot be shown.</p>
                    <pre>{reason}</pre>
                </body>
            </html>
            """,
        )

    @app.get("/health")
    async def health(request: Request):
        """Health check endpoint."""
        state: MapState = request.app.state.map
        return {
            "status": "operational" if state.ready else "degraded",
            "version": "0.1.0",
            "system": cfg.app_name,
            "built_at": state.built_at,
            "error": state.error,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.debug,
    )
