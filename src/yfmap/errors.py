"""Exception types for map building.

Two tiers: a boundary failure is fatal for the whole build, a dataset
failure only empties that one overlay.
"""


class YFMapError(Exception):
    """Base class for map build errors."""


class GeoJSONError(YFMapError):
    """Raised when a document is not a usable GeoJSON feature collection."""


class BoundaryError(YFMapError):
    """Raised when the study-area boundary cannot be loaded.

    No viewport or spatial predicate exists without it, so the build stops.
    """


class DatasetLoadError(YFMapError):
    """Raised when a thematic dataset cannot be fetched or parsed."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"Failed to load {source}: {reason}")
        self.source = source
        self.reason = reason
