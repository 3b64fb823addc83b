"""
Pipeline dispatch: run the strategy for a declaration's kind, then merge
the declaration's tags and categories into everything it produced.

Every member of the ``PipelineKind`` union needs an entry in the handler
table; the table is checked against the union when this module is imported.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
import logging

from pydantic import BaseModel

from assetpipe.assets.urls import extension, file_name, with_extension
from assetpipe.errors import UnsupportedPipelineKind

from .context import BatchContext, RunContext
from .models import (
    PIPELINE_KINDS,
    AssetType,
    AudioPipeline,
    ContentAt,
    MaterialsPipeline,
    ModelsPipeline,
    NoPreview,
    OutputArtifact,
    PipelineDeclaration,
    ScriptBundlesPipeline,
)


logger = logging.getLogger(__name__)

SCRIPT_BUNDLE_EXTENSION = "script_bundle"

Strategy = Callable[[RunContext, BaseModel], Awaitable[list[OutputArtifact]]]


def is_script_bundle(location: str) -> bool:
    return extension(location) == SCRIPT_BUNDLE_EXTENSION


async def _copy_script_bundle(ctx: RunContext, location: str) -> list[OutputArtifact]:
    bundle = await ctx.assets.download_bytes(location)
    out_path = with_extension(ctx.relative_path(location), SCRIPT_BUNDLE_EXTENSION)
    content = await ctx.write_file(out_path, bundle)
    return [
        OutputArtifact(
            asset_type=AssetType.SCRIPT_BUNDLE,
            hidden=False,
            name=file_name(location),
            tags=[],
            categories=[],
            preview=NoPreview(),
            content=ContentAt(location=content),
            source=location,
        )
    ]


async def script_bundles(ctx: RunContext, config: BaseModel) -> list[OutputArtifact]:
    return await ctx.process_files(is_script_bundle, _copy_script_bundle)


async def not_implemented(ctx: RunContext, config: BaseModel) -> list[OutputArtifact]:
    raise UnsupportedPipelineKind(getattr(config, "type", type(config).__name__))


STRATEGIES: dict[type[BaseModel], Strategy] = {
    ScriptBundlesPipeline: script_bundles,
    ModelsPipeline: not_implemented,
    MaterialsPipeline: not_implemented,
    AudioPipeline: not_implemented,
}

_missing = [kind.__name__ for kind in PIPELINE_KINDS if kind not in STRATEGIES]
if _missing:
    raise RuntimeError(f"Pipeline kinds without a dispatch arm: {', '.join(_missing)}")


def is_implemented(config: BaseModel) -> bool:
    """Return True if the config's kind has a real processing strategy."""
    return STRATEGIES.get(type(config), not_implemented) is not not_implemented


def merge_metadata(artifact: OutputArtifact, declaration: PipelineDeclaration) -> None:
    """
    Merge a declaration's tags and categories into an artifact in place.

    Tags are appended (duplicates kept). Each existing category slot ``i`` of
    the artifact becomes the union of itself and ``declaration.categories[i]``;
    declaration slots beyond the artifact's own slot count are ignored.

    Example:
        artifact categories [{"y", "z"}] merged with declared [{"x", "y"}]
        gives [{"x", "y", "z"}].
    """
    artifact.tags.extend(declaration.tags)
    for i in range(len(artifact.categories)):
        if i < len(declaration.categories):
            artifact.categories[i] = set(artifact.categories[i]) | declaration.categories[i]


async def process_pipeline(
    batch: BatchContext, root: str, declaration: PipelineDeclaration
) -> list[OutputArtifact]:
    """
    Run one pipeline declaration to completion.

    Parameters:
        batch: Shared batch context
        root: Location of the manifest declaring the pipeline
        declaration: Declaration to process

    Returns:
        Artifacts produced by the pipeline, with metadata merged

    Raises:
        UnsupportedPipelineKind: If the kind has no processing strategy
    """
    ctx = RunContext(batch=batch, root=root, declaration=declaration)
    strategy = STRATEGIES.get(type(declaration.pipeline), not_implemented)
    artifacts = await strategy(ctx, declaration.pipeline)

    for artifact in artifacts:
        merge_metadata(artifact, declaration)

    logger.debug(
        "pipeline_processed",
        extra={"manifest": root, "kind": declaration.kind, "artifacts": len(artifacts)},
    )
    return artifacts
