"""Fetch GeoJSON documents from the data directory.

The data directory is either a local path or an http(s) base URL. Both
sources return raw bytes; GeoJSONFetcher parses them into Layers and turns
every failure into a DatasetLoadError.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Protocol

import httpx
from loguru import logger

from yfmap.errors import DatasetLoadError, GeoJSONError
from yfmap.layers.layer import Layer
from yfmap.layers.parsers.geojson import parse_geojson
from yfmap.progress import LoadingProgress

_USER_AGENT = "YF-Map/0.1.0"


class Source(Protocol):
    async def read(self, filename: str) -> bytes: ...

    async def aclose(self) -> None: ...


class DirectorySource:
    """Reads files from a local data directory."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    async def read(self, filename: str) -> bytes:
        path = self.root / filename
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            raise DatasetLoadError(filename, str(e)) from e

    async def aclose(self) -> None:
        pass

    def __repr__(self) -> str:
        return f"DirectorySource({str(self.root)!r})"


class HttpSource:
    """Reads files relative to an http(s) base URL."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/") + "/"
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            headers={"User-Agent": _USER_AGENT},
        )

    async def read(self, filename: str) -> bytes:
        url = self.base_url + filename
        try:
            resp = await self._client.get(url)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise DatasetLoadError(filename, str(e) or type(e).__name__) from e
        return resp.content

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def __repr__(self) -> str:
        return f"HttpSource({self.base_url!r})"


def make_source(data_path: str, timeout: float = 30.0) -> Source:
    """Pick the source for a data path: http(s) URL or local directory."""
    if data_path.startswith(("http://", "https://")):
        return HttpSource(data_path, timeout=timeout)
    return DirectorySource(data_path)


class GeoJSONFetcher:
    """Fetches and parses GeoJSON files, counting each as a progress task."""

    def __init__(self, source: Source, progress: LoadingProgress | None = None) -> None:
        self.source = source
        self.progress = progress or LoadingProgress()

    async def fetch(self, filename: str, name: str = "") -> Layer:
        """Fetch one file and parse it into a Layer.

        Raises:
            DatasetLoadError: If the file cannot be read or is not GeoJSON.
        """
        self.progress.add_task()
        try:
            raw = await self.source.read(filename)
            try:
                layer = parse_geojson(raw, name=name)
            except GeoJSONError as e:
                raise DatasetLoadError(filename, str(e)) from e
        finally:
            self.progress.complete_task(filename)
        logger.debug(f"Fetched {filename}: {len(layer.features)} feature(s)")
        return layer

    async def aclose(self) -> None:
        await self.source.aclose()
