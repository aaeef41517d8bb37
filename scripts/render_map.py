#!/usr/bin/env python3
"""Render the YF map to a standalone HTML file.

Loads the boundary and every catalogue dataset from the data directory,
filters them, and writes the folium page.

Usage:
    python scripts/render_map.py [--data DIR_OR_URL] [--output FILE]

Options:
    --data PATH          Data directory or http(s) base URL (default: settings.data_path)
    --output FILE        Output HTML file (default: settings.output_path)
    --icons PATH         Icon path as referenced from the page (default: settings.icons_path)
    --basemap NAME       Basemap shown first: OSM, Basemap, Satellite, White Background
    --sequential         Fetch datasets one at a time instead of concurrently
"""
from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

# Ensure src/ is on the path
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(_PROJECT_ROOT / "src"))

from loguru import logger

from app.config import Settings
from yfmap.errors import BoundaryError
from yfmap.pipeline import run_pipeline
from yfmap.render import save_map


def main() -> int:
    parser = argparse.ArgumentParser(description="Render the YF study-area map to HTML")
    parser.add_argument("--data", default=None, help="Data directory or http(s) base URL")
    parser.add_argument("--output", type=Path, default=None, help="Output HTML file")
    parser.add_argument("--icons", default=None, help="Icon path as referenced from the page")
    parser.add_argument("--basemap", default=None, help="Basemap shown first")
    parser.add_argument("--sequential", action="store_true", help="Fetch datasets one at a time")
    args = parser.parse_args()

    overrides = {
        "data_path": args.data,
        "output_path": args.output,
        "icons_path": args.icons,
        "default_basemap": args.basemap,
    }
    settings = Settings(**{k: v for k, v in overrides.items() if v is not None})
    if args.sequential:
        settings.concurrent_fetch = False

    try:
        result = asyncio.run(run_pipeline(settings))
    except BoundaryError as e:
        logger.critical(f"Cannot render map: {e}")
        return 1

    out = save_map(result, settings)
    print(f"Map: {out}")
    for row in result.registry.summary():
        status = "ok" if row["loaded"] else "EMPTY (load failed)"
        print(f"  {row['name']:<20} {row['features']:>6} feature(s)  {status}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
