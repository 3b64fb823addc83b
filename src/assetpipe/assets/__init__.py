"""
Asset access and content sinks.

These are the host-side collaborators the orchestration engine reads inputs
through and writes produced content to.
"""

from .access import AssetAccess, AssetSource, decode_structured
from .sink import ContentSink, DirectorySink, content_output_path
from .urls import (
    extension,
    file_name,
    is_remote,
    is_within,
    location_path,
    relative_path,
    with_extension,
)

__all__ = [
    # Access
    "AssetAccess",
    "AssetSource",
    "decode_structured",
    # Sinks
    "ContentSink",
    "DirectorySink",
    "content_output_path",
    # Locations
    "extension",
    "file_name",
    "is_remote",
    "is_within",
    "location_path",
    "relative_path",
    "with_extension",
]
