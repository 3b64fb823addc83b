"""
Loading and parsing pipeline manifests.

A manifest is recognized purely by file name: ``pipeline.toml`` or
``pipeline.json``. Both decode to the same ordered list of declarations.
"""

from __future__ import annotations

from typing import Any

from pydantic import TypeAdapter

from assetpipe.assets.access import AssetSource, StructuredFormat
from assetpipe.assets.urls import location_path

from .models import PipelineDeclaration


MANIFEST_FORMATS: dict[str, StructuredFormat] = {
    "pipeline.toml": "toml",
    "pipeline.json": "json",
}

_DECLARATIONS = TypeAdapter(list[PipelineDeclaration])


def manifest_format(location: str) -> StructuredFormat | None:
    """
    Return the manifest format for a location, or None if it isn't a manifest.

    Example:
        >>> manifest_format("/proj/pipeline.toml")
        'toml'
        >>> manifest_format("/proj/notes.txt") is None
        True
    """
    path = str(location_path(location))
    for suffix, fmt in MANIFEST_FORMATS.items():
        if path.endswith(suffix):
            return fmt
    return None


def is_manifest(location: str) -> bool:
    return manifest_format(location) is not None


def parse_declarations(data: Any) -> list[PipelineDeclaration]:
    """
    Parse a decoded manifest document into declarations.

    The document may be a bare list of records (JSON only) or a table with a
    ``pipelines`` list (JSON, or TOML ``[[pipelines]]``).

    Parameters:
        data: Decoded JSON or TOML document

    Returns:
        Declarations in manifest order

    Raises:
        ValueError: If the document has no pipeline list
        pydantic.ValidationError: If a record doesn't match the schema
    """
    if isinstance(data, dict):
        if "pipelines" not in data:
            raise ValueError("Manifest has no 'pipelines' list")
        data = data["pipelines"]
    if not isinstance(data, list):
        raise ValueError(f"Manifest pipelines must be a list, got {type(data).__name__}")
    return _DECLARATIONS.validate_python(data)


async def load_declarations(location: str, assets: AssetSource) -> list[PipelineDeclaration]:
    """
    Fetch and parse the manifest at location.

    Parameters:
        location: Manifest location (must be a recognized manifest name)
        assets: Asset access handle used to fetch the manifest

    Returns:
        Declarations in manifest order

    Raises:
        ValueError: If location isn't a manifest or the document is malformed
        httpx.HTTPError: If a remote fetch fails
        pydantic.ValidationError: If a record doesn't match the schema
    """
    fmt = manifest_format(location)
    if fmt is None:
        raise ValueError(f"Not a pipeline manifest: {location}")
    data = await assets.download_structured(location, fmt)
    return parse_declarations(data)
