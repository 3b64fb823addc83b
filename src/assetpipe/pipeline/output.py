"""
Artifact list output.

Writes produced artifacts as JSONL, one record per line, and reads such
files back.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
import json
from typing import Any

from .models import OutputArtifact


def artifact_record(artifact: OutputArtifact) -> dict[str, Any]:
    """
    Convert an artifact to a JSON-ready dictionary.

    Category sets are emitted as sorted lists.

    Example:
        >>> artifact_record(artifact)["content"]
        {'type': 'Content', 'location': '/build/ab12.../main.script_bundle'}
    """
    return artifact.model_dump(mode="json")


def write_artifacts(output_path: Path, artifacts: Iterable[OutputArtifact]) -> int:
    """
    Write artifacts to a JSONL file, replacing any previous content.

    Parameters:
        output_path: Path to JSONL output file
        artifacts: Artifacts to write

    Returns:
        Number of records written
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with output_path.open("w", encoding="utf-8") as f:
        for artifact in artifacts:
            f.write(json.dumps(artifact_record(artifact), ensure_ascii=False) + "\n")
            count += 1
    return count


def load_artifacts(output_path: Path) -> list[OutputArtifact]:
    """
    Load artifacts from a JSONL file.

    Blank and truncated lines (e.g., a partial last line) are skipped.

    Parameters:
        output_path: Path to JSONL output file

    Returns:
        Artifacts in file order (empty if the file doesn't exist)
    """
    artifacts: list[OutputArtifact] = []
    if not output_path.exists():
        return artifacts

    with output_path.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                rec = json.loads(line)
            except json.JSONDecodeError:
                continue
            artifacts.append(OutputArtifact.model_validate(rec))

    return artifacts
