"""Build configuration defaults."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


DEFAULT_OUT_DIR = Path("build")
DEFAULT_ARTIFACTS_NAME = "artifacts.jsonl"
DEFAULT_HTTP_TIMEOUT = 30.0
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class BuildConfig:
    """
    Settings for one build invocation.

    Attributes:
        out_dir: Directory receiving written content and the artifact list
        artifacts_name: File name of the JSONL artifact list inside out_dir
        http_timeout: Timeout in seconds for remote downloads
        input_file_filter: Optional substring narrowing participating inputs
        log_level: Logging verbosity
    """

    out_dir: Path = field(default=DEFAULT_OUT_DIR)
    artifacts_name: str = DEFAULT_ARTIFACTS_NAME
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    input_file_filter: str | None = None
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def artifacts_path(self) -> Path:
        return self.out_dir / self.artifacts_name
