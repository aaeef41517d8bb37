"""Layer pipeline - boundary first, then every catalogue dataset.

Stages declare what they need instead of relying on call order:

  boundary  -> must resolve before anything else runs (fatal on failure)
  filtered  -> needs the boundary predicate
  render_last -> registered after every other overlay so it draws on top

Once the boundary is in, dataset fetches may run concurrently. Results are
then built and registered one at a time in declared order, so the overlay
registry is only ever written by the orchestrator.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable

from loguru import logger

from yfmap.boundary import Boundary, load_boundary
from yfmap.catalog import BOUNDARY_NAME, DEFAULT_CATALOGUE, LAYER_STYLES, DatasetDescriptor
from yfmap.errors import BoundaryError, DatasetLoadError
from yfmap.fetch import GeoJSONFetcher, Source, make_source
from yfmap.layers.layer import Layer
from yfmap.layers.registry import OverlayRegistry
from yfmap.progress import LoadingProgress

if TYPE_CHECKING:
    from app.config import Settings


@dataclass
class PipelineContext:
    """State shared by the stages of one pipeline run."""

    fetcher: GeoJSONFetcher
    concurrent_fetch: bool = True
    registry: OverlayRegistry = field(default_factory=OverlayRegistry)
    boundary: Boundary | None = None

    @property
    def progress(self) -> LoadingProgress:
        return self.fetcher.progress


@dataclass
class StageResult:
    """Outcome of one dataset stage. A failed stage still carries an empty layer."""

    name: str
    layer: Layer
    ok: bool = True
    error: str | None = None
    dropped: int = 0

    @property
    def feature_count(self) -> int:
        return len(self.layer.features)


@dataclass
class PipelineResult:
    boundary: Boundary
    registry: OverlayRegistry
    results: list[StageResult]
    descriptors: dict[str, DatasetDescriptor]

    @property
    def failed(self) -> list[str]:
        return [r.name for r in self.results if not r.ok]


class Stage:
    """Fetch, filter and wrap one catalogue dataset."""

    def __init__(self, descriptor: DatasetDescriptor) -> None:
        self.descriptor = descriptor

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def needs_boundary(self) -> bool:
        return self.descriptor.filtered

    @property
    def render_last(self) -> bool:
        return self.descriptor.render_last

    async def fetch(self, ctx: PipelineContext) -> Layer | DatasetLoadError:
        """Fetch the dataset. Load failures are returned, not raised."""
        try:
            return await ctx.fetcher.fetch(self.descriptor.source, name=self.name)
        except DatasetLoadError as e:
            return e

    def build(self, ctx: PipelineContext, fetched: Layer | DatasetLoadError) -> StageResult:
        """Turn a fetch outcome into the layer to register."""
        d = self.descriptor
        if isinstance(fetched, DatasetLoadError):
            logger.warning(f"{d.name}: {fetched} (registering empty layer)")
            return self.failed(fetched)

        features = fetched.features
        dropped = 0
        if self.needs_boundary:
            if ctx.boundary is None:
                raise BoundaryError(f"Dataset '{d.name}' is filtered but no boundary is loaded")
            kept = ctx.boundary.filter(features)
            dropped = len(features) - len(kept)
            features = kept

        logger.info(
            f"{d.name}: {len(features)} feature(s)"
            + (f", {dropped} outside boundary" if dropped else "")
        )
        metadata = self._metadata(loaded=True, dropped=dropped)
        return StageResult(name=d.name, layer=self._layer(features, metadata), dropped=dropped)

    def failed(self, error: Exception) -> StageResult:
        """Empty stand-in layer for a dataset that could not be loaded or built."""
        metadata = self._metadata(loaded=False, dropped=0)
        return StageResult(name=self.name, layer=self._layer([], metadata), ok=False, error=str(error))

    def _metadata(self, loaded: bool, dropped: int) -> dict:
        d = self.descriptor
        return {
            "source": d.source,
            "renderer": d.renderer,
            "filtered": d.filtered,
            "loaded": loaded,
            "dropped": dropped,
        }

    def _layer(self, features: list, metadata: dict) -> Layer:
        return Layer(
            layer_id=f"layer-{uuid.uuid4().hex[:8]}",
            name=self.name,
            source_format="geojson",
            features=features,
            style=dict(self.descriptor.style),
            metadata=metadata,
        )


class Pipeline:
    """Ordered dataset stages behind a boundary stage."""

    def __init__(
        self,
        catalogue: Iterable[DatasetDescriptor] = DEFAULT_CATALOGUE,
        boundary_file: str = "YF.geojson",
        boundary_name: str = BOUNDARY_NAME,
    ) -> None:
        self.stages = [Stage(d) for d in catalogue]
        self.boundary_file = boundary_file
        self.boundary_name = boundary_name

        seen = {boundary_name}
        for stage in self.stages:
            if stage.name in seen:
                raise ValueError(f"Duplicate dataset name in catalogue: {stage.name}")
            seen.add(stage.name)

    @property
    def descriptors(self) -> dict[str, DatasetDescriptor]:
        return {s.name: s.descriptor for s in self.stages}

    def order(self) -> list[Stage]:
        """Catalogue order with render_last stages moved to the end (stable)."""
        return (
            [s for s in self.stages if not s.render_last]
            + [s for s in self.stages if s.render_last]
        )

    async def run(self, ctx: PipelineContext) -> PipelineResult:
        """Run the boundary stage, then every dataset stage.

        Raises:
            BoundaryError: If the boundary cannot be loaded. No dataset is
                fetched in that case.
        """
        try:
            ctx.boundary = await load_boundary(ctx.fetcher, self.boundary_file, self.boundary_name)
        except BoundaryError as e:
            logger.critical(f"Boundary unavailable, map cannot be built: {e}")
            raise

        boundary_layer = ctx.boundary.layer
        boundary_layer.style = dict(LAYER_STYLES["boundary"])
        boundary_layer.metadata.update(
            {"source": self.boundary_file, "renderer": "boundary", "filtered": False, "loaded": True}
        )
        ctx.registry.register(boundary_layer)

        stages = self.order()
        if ctx.concurrent_fetch:
            fetched = await asyncio.gather(*(s.fetch(ctx) for s in stages))
        else:
            fetched = [await s.fetch(ctx) for s in stages]

        results: list[StageResult] = []
        for stage, outcome in zip(stages, fetched):
            try:
                result = stage.build(ctx, outcome)
            except BoundaryError:
                raise
            except Exception as e:
                logger.error(f"{stage.name}: failed to build layer: {e} (registering empty layer)")
                result = stage.failed(e)
            ctx.registry.register(result.layer)
            results.append(result)

        failed = [r.name for r in results if not r.ok]
        logger.info(
            f"Pipeline finished: {len(ctx.registry)} overlay(s) registered"
            + (f", {len(failed)} empty after load failure: {', '.join(failed)}" if failed else "")
        )
        return PipelineResult(
            boundary=ctx.boundary,
            registry=ctx.registry,
            results=results,
            descriptors=self.descriptors,
        )


def build_default_pipeline(settings: Settings) -> Pipeline:
    return Pipeline(DEFAULT_CATALOGUE, boundary_file=settings.boundary_file)


async def run_pipeline(
    settings: Settings,
    pipeline: Pipeline | None = None,
    source: Source | None = None,
) -> PipelineResult:
    """Build the overlays for a map from settings.

    Args:
        settings: Application settings (data path, boundary file, ...).
        pipeline: Pipeline to run; defaults to the full catalogue.
        source: Data source override; defaults to one built from
            settings.data_path.

    Raises:
        BoundaryError: If the boundary cannot be loaded.
    """
    pipeline = pipeline or build_default_pipeline(settings)
    source = source or make_source(settings.data_path, timeout=settings.fetch_timeout)
    fetcher = GeoJSONFetcher(source)
    ctx = PipelineContext(fetcher=fetcher, concurrent_fetch=settings.concurrent_fetch)
    logger.info(f"Loading map data from {source!r}")
    try:
        return await pipeline.run(ctx)
    finally:
        await fetcher.aclose()
