"""
Manifest discovery and batch coordination.

Discovery fetches every manifest concurrently; the declared pipelines are
then dispatched one at a time, each running its own file fan-out to
completion before the next starts. This bounds in-flight work to a single
pipeline's fan-out.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging

from assetpipe.errors import ManifestDecodeError

from .context import BatchContext
from .dispatch import process_pipeline
from .loaders import is_manifest, load_declarations
from .models import OutputArtifact, PipelineDeclaration


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ManifestEntry:
    """
    One declared pipeline together with the manifest it came from.

    Attributes:
        manifest: Manifest location
        declaration: The parsed declaration
    """

    manifest: str
    declaration: PipelineDeclaration


async def _load_manifest(batch: BatchContext, location: str) -> list[ManifestEntry]:
    try:
        declarations = await load_declarations(location, batch.assets)
    except Exception as exc:
        error = ManifestDecodeError(location, exc)
        error.__cause__ = exc
        logger.warning("manifest_decode_failed", extra={"manifest": location, "error": str(exc)})
        await batch.on_error(error)
        return []
    return [ManifestEntry(manifest=location, declaration=d) for d in declarations]


async def discover_manifests(batch: BatchContext) -> list[ManifestEntry]:
    """
    Find and parse every manifest among the batch's input files.

    Manifests are fetched concurrently; entries are grouped per manifest in
    the order their fetches complete. A manifest that fails to fetch or
    decode is reported to ``on_error`` and skipped.

    Parameters:
        batch: Batch context

    Returns:
        One entry per declaration in every decodable manifest
    """
    candidates = [location for location in batch.files if is_manifest(location)]
    entries: list[ManifestEntry] = []
    for finished in asyncio.as_completed([_load_manifest(batch, c) for c in candidates]):
        entries.extend(await finished)
    return entries


async def process_batch(batch: BatchContext) -> list[OutputArtifact]:
    """
    Build every pipeline declared by every manifest in the batch.

    Parameters:
        batch: Batch context

    Returns:
        All produced artifacts, grouped by pipeline in dispatch order

    Raises:
        UnsupportedPipelineKind: If a declared kind has no processing strategy

    Example:
        >>> async with AssetAccess() as assets:
        ...     batch = BatchContext(assets=assets, files=files, sink=DirectorySink(out_dir))
        ...     artifacts = await process_batch(batch)
    """
    entries = await discover_manifests(batch)
    await batch.on_status(f"Found {len(entries)} pipeline(s)")

    artifacts: list[OutputArtifact] = []
    for i, entry in enumerate(entries, start=1):
        await batch.on_status(
            f"[{i}/{len(entries)}] Processing {entry.declaration.kind} pipeline from {entry.manifest}"
        )
        artifacts.extend(await process_pipeline(batch, entry.manifest, entry.declaration))

    await batch.on_status(f"Produced {len(artifacts)} artifact(s)")
    return artifacts
