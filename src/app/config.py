"""Configuration management using Pydantic settings."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "YF Map"
    debug: bool = False

    # Data sources. data_path is a local directory or an http(s) base URL.
    data_path: str = "data"
    boundary_file: str = "YF.geojson"
    fetch_timeout: float = 30.0
    concurrent_fetch: bool = True   # fire sibling dataset fetches together once the boundary is in

    # Display assets, as referenced from the rendered page
    icons_path: str = "icons"
    icons_dir: Path = Path("static/icons")
    photo_placeholder: str = "photos/default.jpg"

    # Map
    default_basemap: str = "Basemap"
    map_title: str = "YF"
    output_path: Path = Path("yf_map.html")

    # Server
    host: str = "0.0.0.0"
    port: int = 8000


settings = Settings()
