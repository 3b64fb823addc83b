"""Error kinds raised or reported during a build."""

from __future__ import annotations


class AssetPipeError(Exception):
    """Base class for all assetpipe errors."""


class ManifestDecodeError(AssetPipeError):
    """
    A manifest could not be fetched or decoded.

    Reported through the batch error callback; only the offending manifest
    is skipped.
    """

    def __init__(self, location: str, cause: BaseException | None = None) -> None:
        self.location = location
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Failed to decode manifest {location}{detail}")


class UnsupportedPipelineKind(AssetPipeError):
    """A declared pipeline kind has no processing strategy yet. Always fatal."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"Pipeline kind {kind!r} is not implemented yet")


class FileTransformError(AssetPipeError):
    """A per-file download or transform failed inside a fan-out."""

    def __init__(self, location: str, cause: BaseException | None = None) -> None:
        self.location = location
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Failed to process {location}{detail}")
