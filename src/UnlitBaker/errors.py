"""Exception types shared by the bake stages.

Per-material problems derive from `BakeError` and are isolated to the
material that raised them. `AssetDescriptionError` is fatal for a run.
"""


class BakeError(RuntimeError):
    """Base class for failures that only affect a single material."""


class DimensionMismatchError(BakeError):
    """Raised when loaded channel maps for one material differ in size."""


class NoInputMapsError(BakeError):
    """Raised when no channel map was loaded to size the composite."""


class SinkWriteError(BakeError):
    """Raised when a composite could not be encoded or written."""


class AssetDescriptionError(ValueError):
    """Raised when the asset file cannot be opened, parsed, or validated."""
