"""
Batch and per-pipeline execution contexts, and the fan-out primitive.

``BatchContext`` is shared read-only by every task of a build.
``RunContext`` is created once per pipeline declaration and owns the
``process_files`` fan-out: filter the input list, then transform every match
concurrently with per-file failures isolated.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
import logging
from pathlib import PurePosixPath

from assetpipe.assets.access import AssetSource
from assetpipe.assets.sink import ContentSink
from assetpipe.assets.urls import is_within, relative_path
from assetpipe.errors import AssetPipeError, FileTransformError

from .models import OutputArtifact, PipelineDeclaration


logger = logging.getLogger(__name__)

StatusCallback = Callable[[str], Awaitable[None]]
ErrorCallback = Callable[[Exception], Awaitable[None]]
FilePredicate = Callable[[str], bool]
FileTransform = Callable[["RunContext", str], Awaitable[Iterable[OutputArtifact]]]


async def log_status(message: str) -> None:
    logger.info(message, extra={"event": "status"})


async def log_error(error: Exception) -> None:
    logger.error(str(error), extra={"event": "error", "error_type": type(error).__name__})


@dataclass(frozen=True)
class BatchContext:
    """
    Collaborators and inputs shared by a whole build.

    Attributes:
        assets: Asset access handle for reading inputs
        files: Every input location visible to the batch
        sink: Content sink for produced bytes
        input_file_filter: Optional substring narrowing participating inputs
        on_status: Best-effort progress reporting
        on_error: Receives each isolated failure
    """

    assets: AssetSource
    files: Sequence[str]
    sink: ContentSink
    input_file_filter: str | None = None
    on_status: StatusCallback = field(default=log_status)
    on_error: ErrorCallback = field(default=log_error)

    def __post_init__(self) -> None:
        object.__setattr__(self, "files", tuple(self.files))

    def accepts(self, location: str) -> bool:
        """Return True if location passes the input filter."""
        return self.input_file_filter is None or self.input_file_filter in location

    async def write_file(self, logical_path: str, data: bytes) -> str:
        return await self.sink.write_file(logical_path, data)


@dataclass(frozen=True)
class RunContext:
    """
    Execution context for one pipeline declaration.

    Attributes:
        batch: The shared batch context
        root: Location of the manifest declaring the pipeline
        declaration: The declaration being processed
    """

    batch: BatchContext
    root: str
    declaration: PipelineDeclaration

    @property
    def assets(self) -> AssetSource:
        return self.batch.assets

    def relative_path(self, location: str) -> PurePosixPath:
        """Return location relative to the manifest's directory."""
        return relative_path(self.root, location)

    def matches_sources(self, location: str) -> bool:
        """
        Return True if location matches the declaration's source patterns.

        An empty pattern list matches everything.
        """
        patterns = self.declaration.sources
        if not patterns:
            return True
        rel = str(self.relative_path(location))
        return any(fnmatchcase(rel, pattern) for pattern in patterns)

    def candidate_files(self, predicate: FilePredicate) -> list[str]:
        """Return the input files this pipeline may process, in input order."""
        return [
            location
            for location in self.batch.files
            if self.batch.accepts(location)
            and is_within(self.root, location)
            and self.matches_sources(location)
            and predicate(location)
        ]

    async def write_file(self, path: PurePosixPath | str, data: bytes) -> str:
        return await self.batch.write_file(str(path), data)

    async def process_files(
        self, predicate: FilePredicate, transform: FileTransform
    ) -> list[OutputArtifact]:
        """
        Transform every matching input file concurrently.

        Files are filtered by the batch input filter, the manifest directory,
        the declaration's source patterns and ``predicate``. Each match gets
        one ``transform`` call; all calls run at once. Results are
        concatenated in completion order.

        A failing transform is reported to ``on_error`` as a
        ``FileTransformError`` and contributes no artifacts. Fatal
        ``AssetPipeError`` subclasses other than ``FileTransformError`` still
        propagate, cancelling the remaining transforms.

        Parameters:
            predicate: Selects the files this pipeline owns
            transform: Produces the artifacts for one file

        Returns:
            Artifacts from every successful transform
        """
        files = self.candidate_files(predicate)
        if not files:
            return []

        tasks = [asyncio.ensure_future(self._run_isolated(transform, location)) for location in files]
        artifacts: list[OutputArtifact] = []
        try:
            for finished in asyncio.as_completed(tasks):
                artifacts.extend(await finished)
        finally:
            pending = [task for task in tasks if not task.done()]
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)
        return artifacts

    async def _run_isolated(self, transform: FileTransform, location: str) -> list[OutputArtifact]:
        try:
            return list(await transform(self, location))
        except FileTransformError as error:
            await self._report(error)
        except AssetPipeError:
            raise
        except Exception as exc:
            error = FileTransformError(location, exc)
            error.__cause__ = exc
            await self._report(error)
        return []

    async def _report(self, error: FileTransformError) -> None:
        logger.warning(
            "file_transform_failed",
            extra={"location": error.location, "manifest": self.root, "error": str(error.cause)},
        )
        await self.batch.on_error(error)
