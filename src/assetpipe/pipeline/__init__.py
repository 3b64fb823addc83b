"""
Pipeline orchestration for assetpipe.

Provides manifest discovery, pipeline dispatch, the per-file fan-out and
batch coordination, plus artifact output helpers used by the CLI.
"""

from .context import BatchContext, RunContext, log_error, log_status
from .coordinator import ManifestEntry, discover_manifests, process_batch
from .dispatch import STRATEGIES, is_implemented, merge_metadata, process_pipeline
from .loaders import is_manifest, load_declarations, manifest_format, parse_declarations
from .models import (
    PIPELINE_KINDS,
    AssetType,
    AudioPipeline,
    ContentAt,
    ImagePreview,
    MaterialsPipeline,
    ModelsPipeline,
    NoPreview,
    OutputArtifact,
    PipelineDeclaration,
    PipelineKind,
    ScriptBundlesPipeline,
)
from .output import artifact_record, load_artifacts, write_artifacts
from .validation import ValidationIssue, validate_declaration, validate_declarations

__all__ = [
    # Contexts
    "BatchContext",
    "RunContext",
    "log_error",
    "log_status",
    # Coordination
    "ManifestEntry",
    "discover_manifests",
    "process_batch",
    # Dispatch
    "STRATEGIES",
    "is_implemented",
    "merge_metadata",
    "process_pipeline",
    # Loaders
    "is_manifest",
    "load_declarations",
    "manifest_format",
    "parse_declarations",
    # Models
    "PIPELINE_KINDS",
    "AssetType",
    "AudioPipeline",
    "ContentAt",
    "ImagePreview",
    "MaterialsPipeline",
    "ModelsPipeline",
    "NoPreview",
    "OutputArtifact",
    "PipelineDeclaration",
    "PipelineKind",
    "ScriptBundlesPipeline",
    # Output
    "artifact_record",
    "load_artifacts",
    "write_artifacts",
    # Validation
    "ValidationIssue",
    "validate_declaration",
    "validate_declarations",
]
