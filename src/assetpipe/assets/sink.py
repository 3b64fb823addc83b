"""
Content sinks: where produced bytes are persisted.

The engine never deduplicates writes itself; a sink decides how locations are
kept collision-free.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
import uuid
from pathlib import Path, PurePosixPath
from typing import Protocol


logger = logging.getLogger(__name__)


class ContentSink(Protocol):
    """Write path for produced content. Must tolerate concurrent calls."""

    async def write_file(self, logical_path: str, data: bytes) -> str:
        ...


def content_output_path(logical_path: str, data: bytes, out_dir: Path) -> Path:
    """
    Generate a SHA1-addressed output path for content.

    The directory is the SHA1 of the bytes; the file keeps the logical name,
    so identical content under the same name maps to one file.

    Parameters:
        logical_path: Path the producer asked for (POSIX form)
        data: Content bytes
        out_dir: Base directory for written content

    Returns:
        Path to the content file

    Example:
        >>> content_output_path("scripts/main.script_bundle", b"abc", Path("out"))
        PosixPath('out/a9993e364706816aba3e25717850c26c9cd0d89d/main.script_bundle')
    """
    sha1_hash = hashlib.sha1(data).hexdigest()
    name = PurePosixPath(logical_path).name or "content"
    return out_dir / sha1_hash / name


def _write_bytes(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists():
        return
    tmp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
    tmp_path.write_bytes(data)
    tmp_path.replace(path)


class DirectorySink:
    """Content-addressed sink writing under a local directory."""

    def __init__(self, out_dir: Path) -> None:
        self.out_dir = out_dir

    async def write_file(self, logical_path: str, data: bytes) -> str:
        path = content_output_path(logical_path, data, self.out_dir)
        await asyncio.to_thread(_write_bytes, path, data)
        logger.debug(
            "content_written",
            extra={"logical_path": logical_path, "location": str(path), "size": len(data)},
        )
        return str(path.resolve())
