"""
Asset access: fetching raw and structured content for input locations.

Remote locations are fetched with a shared ``httpx.AsyncClient``; local paths
are read in a worker thread. One instance is shared by every concurrent task
of a batch.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Literal, Protocol

import httpx
import toml

from assetpipe.config import DEFAULT_HTTP_TIMEOUT

from .urls import is_remote


logger = logging.getLogger(__name__)

StructuredFormat = Literal["json", "toml"]


class AssetSource(Protocol):
    """Minimal interface the orchestration engine needs for reading inputs."""

    async def download_bytes(self, location: str) -> bytes:
        ...

    async def download_structured(self, location: str, fmt: StructuredFormat) -> Any:
        ...


def decode_structured(data: bytes, fmt: StructuredFormat) -> Any:
    """
    Decode bytes as JSON or TOML.

    Parameters:
        data: Raw document bytes (UTF-8)
        fmt: "json" or "toml"

    Returns:
        Decoded document

    Raises:
        ValueError: If fmt is unknown
        json.JSONDecodeError: If JSON is invalid
        toml.TomlDecodeError: If TOML is invalid
        UnicodeDecodeError: If bytes are not UTF-8
    """
    text = data.decode("utf-8")
    if fmt == "json":
        return json.loads(text)
    if fmt == "toml":
        return toml.loads(text)
    raise ValueError(f"Unsupported structured format: {fmt}")


class AssetAccess:
    """
    Shared read handle for the batch's input locations.

    Use as an async context manager so the HTTP client is closed:

        >>> async with AssetAccess() as assets:
        ...     data = await assets.download_bytes("https://example.org/a.bin")
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    async def __aenter__(self) -> AssetAccess:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def download_bytes(self, location: str) -> bytes:
        """
        Fetch the full content of a location.

        Raises:
            httpx.HTTPError: If a remote fetch fails
            FileNotFoundError: If a local path doesn't exist
        """
        logger.debug("download", extra={"location": location})
        if is_remote(location):
            resp = await self._client.get(location)
            resp.raise_for_status()
            return resp.content

        path = Path(location).expanduser()
        return await asyncio.to_thread(path.read_bytes)

    async def download_structured(self, location: str, fmt: StructuredFormat) -> Any:
        data = await self.download_bytes(location)
        return decode_structured(data, fmt)
