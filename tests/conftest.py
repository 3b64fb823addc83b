"""Shared fixtures: in-memory asset access and a recording content sink."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

import pytest

from assetpipe.assets import decode_structured


FIXTURES_DIR = Path(__file__).parent / "fixtures"


class FakeAssets:
    """In-memory asset access keyed by location."""

    def __init__(self, files: dict[str, bytes] | None = None) -> None:
        self.files: dict[str, bytes] = dict(files or {})
        self.fail: set[str] = set()
        self.downloads: list[str] = []

    async def download_bytes(self, location: str) -> bytes:
        await asyncio.sleep(0)
        self.downloads.append(location)
        if location in self.fail:
            raise OSError(f"download failed: {location}")
        return self.files[location]

    async def download_structured(self, location: str, fmt: Any) -> Any:
        return decode_structured(await self.download_bytes(location), fmt)


class RecordingSink:
    """Content sink returning ``mem://`` locations and keeping every write."""

    def __init__(self) -> None:
        self.writes: dict[str, bytes] = {}

    async def write_file(self, logical_path: str, data: bytes) -> str:
        await asyncio.sleep(0)
        location = f"mem://{len(self.writes)}/{logical_path}"
        self.writes[location] = data
        return location


class ErrorLog:
    """Error callback collecting reported errors."""

    def __init__(self) -> None:
        self.errors: list[Exception] = []

    async def __call__(self, error: Exception) -> None:
        self.errors.append(error)


class StatusLog:
    def __init__(self) -> None:
        self.messages: list[str] = []

    async def __call__(self, message: str) -> None:
        self.messages.append(message)


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo handlers installed by CLI runs."""
    logger = logging.getLogger("assetpipe")
    handlers, level, propagate = logger.handlers[:], logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


@pytest.fixture
def fake_assets() -> FakeAssets:
    return FakeAssets()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def errors() -> ErrorLog:
    return ErrorLog()


@pytest.fixture
def statuses() -> StatusLog:
    return StatusLog()
