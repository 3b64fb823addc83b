"""
Helpers for input locations.

A location is either an ``http(s)://`` URL or a filesystem path. Paths are
compared in POSIX form so manifests and inputs line up regardless of platform.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath
import posixpath

import httpx


def is_remote(location: str) -> bool:
    """Return True if location is an HTTP(S) URL."""
    return location.startswith("http://") or location.startswith("https://")


def location_path(location: str) -> PurePosixPath:
    """
    Return the path component of a location.

    Parameters:
        location: URL or filesystem path

    Returns:
        POSIX path (URL path for remote locations)

    Example:
        >>> location_path("https://example.org/assets/a.script_bundle")
        PurePosixPath('/assets/a.script_bundle')
    """
    if is_remote(location):
        return PurePosixPath(httpx.URL(location).path or "/")
    return PurePosixPath(Path(location).as_posix())


def file_name(location: str) -> str:
    return location_path(location).name


def extension(location: str) -> str | None:
    """
    Return the file extension without the leading dot.

    Example:
        >>> extension("/data/foo.script_bundle")
        'script_bundle'
        >>> extension("/data/README") is None
        True
    """
    suffix = location_path(location).suffix
    return suffix[1:] if suffix else None


def relative_path(manifest_location: str, location: str) -> PurePosixPath:
    """
    Return location relative to the directory holding a manifest.

    Files outside the manifest's directory yield ``..`` segments.

    Parameters:
        manifest_location: Location of the manifest file
        location: Location of an input file

    Returns:
        Relative POSIX path

    Example:
        >>> relative_path("/proj/pipeline.toml", "/proj/scripts/main.script_bundle")
        PurePosixPath('scripts/main.script_bundle')
    """
    base = location_path(manifest_location).parent
    target = location_path(location)
    return PurePosixPath(posixpath.relpath(str(target), str(base)))


def with_extension(path: PurePosixPath, ext: str) -> PurePosixPath:
    """Replace the suffix of path with ``.ext``."""
    return path.with_suffix(f".{ext}")


def is_within(manifest_location: str, location: str) -> bool:
    """
    Return True if location sits in the manifest's directory or below it.

    Remote and local locations never contain each other; remote locations
    must share scheme and host.

    Example:
        >>> is_within("/proj/pipeline.toml", "/proj/a/b.script_bundle")
        True
        >>> is_within("/proj/pipeline.toml", "/other/b.script_bundle")
        False
    """
    if is_remote(manifest_location) != is_remote(location):
        return False
    if is_remote(location):
        base, target = httpx.URL(manifest_location), httpx.URL(location)
        if (base.scheme, base.netloc) != (target.scheme, target.netloc):
            return False
    rel = relative_path(manifest_location, location)
    return bool(rel.parts) and rel.parts[0] != ".."
