"""
assetpipe CLI

Commands:
- build: Discover manifests among the inputs and build every pipeline
- validate: Decode and validate manifests without building
- list-manifests: Show discovered manifests and their pipeline counts
- inspect: Summarize an artifact list written by build
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import typer
import logging

from assetpipe.assets import AssetAccess, DirectorySink, is_remote
from assetpipe.config import (
    DEFAULT_ARTIFACTS_NAME,
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_LOG_LEVEL,
    DEFAULT_OUT_DIR,
    BuildConfig,
)
from assetpipe.errors import AssetPipeError
from assetpipe.logging_setup import setup_logging
from assetpipe.pipeline import (
    BatchContext,
    OutputArtifact,
    is_manifest,
    load_artifacts,
    load_declarations,
    process_batch,
    validate_declarations,
    write_artifacts,
)

app = typer.Typer(add_completion=False, help="Manifest-driven asset builds")

LOGGER = logging.getLogger("assetpipe")


def _under(path: Path, root: Path | None) -> bool:
    return root is not None and path.resolve().is_relative_to(root)


def expand_inputs(inputs: list[str], *, exclude: Path | None = None) -> list[str]:
    """
    Expand CLI inputs into a flat list of locations.

    Each input may be a URL, a file, a directory (walked recursively), or
    ``@list.txt`` naming a file with one location per line (``#`` comments).
    Local files under ``exclude`` (the build output directory) are skipped.

    Raises:
        typer.BadParameter: If a local input doesn't exist
    """
    root = exclude.expanduser().resolve() if exclude is not None else None
    locations: list[str] = []
    for item in inputs:
        if item.startswith("@"):
            list_path = Path(item[1:]).expanduser()
            if not list_path.exists():
                raise typer.BadParameter(f"Input list not found: {list_path}")
            with list_path.open("r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if not line or line.startswith("#"):
                        continue
                    if is_remote(line) or not _under(Path(line).expanduser(), root):
                        locations.append(line)
            continue

        if is_remote(item):
            locations.append(item)
            continue

        path = Path(item).expanduser()
        if path.is_dir():
            locations.extend(
                str(p) for p in sorted(path.rglob("*")) if p.is_file() and not _under(p, root)
            )
        elif path.exists():
            if not _under(path, root):
                locations.append(str(path))
        else:
            raise typer.BadParameter(f"Input not found: {item}")
    return locations


class ErrorCounter:
    """Error callback that logs and keeps every reported error."""

    def __init__(self) -> None:
        self.errors: list[Exception] = []

    async def __call__(self, error: Exception) -> None:
        self.errors.append(error)
        LOGGER.error(str(error), extra={"event": "error", "error_type": type(error).__name__})


async def run_build(config: BuildConfig, files: list[str], on_error: ErrorCounter) -> list[OutputArtifact]:
    async def on_status(message: str) -> None:
        LOGGER.info(message, extra={"event": "status"})

    async with AssetAccess(timeout=config.http_timeout) as assets:
        batch = BatchContext(
            assets=assets,
            files=files,
            sink=DirectorySink(config.out_dir),
            input_file_filter=config.input_file_filter,
            on_status=on_status,
            on_error=on_error,
        )
        return await process_batch(batch)


@app.command("build")
def build_cmd(
    inputs: list[str] = typer.Argument(..., help="Input files, directories, URLs, or @list.txt"),
    out_dir: Path = typer.Option(DEFAULT_OUT_DIR, "--out", help="Output directory for content and artifacts"),
    input_filter: str | None = typer.Option(
        None, "--filter", help="Only inputs whose location contains this text participate"
    ),
    artifacts_name: str = typer.Option(
        DEFAULT_ARTIFACTS_NAME, "--artifacts-name", help="File name of the JSONL artifact list"
    ),
    http_timeout: float = typer.Option(DEFAULT_HTTP_TIMEOUT, "--timeout", help="Download timeout in seconds"),
    log_level: str = typer.Option(DEFAULT_LOG_LEVEL, "--log-level", help="Log level"),
) -> None:
    """
    Build every pipeline declared by manifests among the inputs.

    Writes produced content under OUT and the artifact list to
    OUT/artifacts.jsonl (one JSON record per artifact).

    Example:
        assetpipe build assets/ --out build/
    """
    global LOGGER
    LOGGER = setup_logging(log_level)

    config = BuildConfig(
        out_dir=out_dir.expanduser(),
        artifacts_name=artifacts_name,
        http_timeout=http_timeout,
        input_file_filter=input_filter,
        log_level=log_level,
    )
    files = expand_inputs(inputs, exclude=config.out_dir)
    typer.echo(f"Found {len(files)} input(s)")

    errors = ErrorCounter()
    try:
        artifacts = asyncio.run(run_build(config, files, errors))
    except AssetPipeError as e:
        typer.echo(f"❌ Build aborted: {e}", err=True)
        raise typer.Exit(code=2)

    count = write_artifacts(config.artifacts_path, artifacts)

    typer.echo(f"\n{'='*60}")
    typer.echo("📊 Summary:")
    typer.echo(f"  Artifacts: {count}")
    typer.echo(f"  Errors: {len(errors.errors)}")
    typer.echo(f"  Artifact list: {config.artifacts_path}")

    if errors.errors:
        typer.echo(f"\n❌ Errors ({len(errors.errors)}):")
        for error in errors.errors:
            typer.echo(f"  - {error}")
        raise typer.Exit(code=1)


async def _load_all(manifests: list[str], http_timeout: float) -> list[tuple[str, Any]]:
    results: list[tuple[str, Any]] = []
    async with AssetAccess(timeout=http_timeout) as assets:
        for location in manifests:
            try:
                results.append((location, await load_declarations(location, assets)))
            except Exception as e:
                results.append((location, e))
    return results


@app.command("validate")
def validate_cmd(
    inputs: list[str] = typer.Argument(..., help="Input files, directories, URLs, or @list.txt"),
    http_timeout: float = typer.Option(DEFAULT_HTTP_TIMEOUT, "--timeout", help="Download timeout in seconds"),
) -> None:
    """Decode every manifest among the inputs and report problems."""
    manifests = [location for location in expand_inputs(inputs) if is_manifest(location)]
    if not manifests:
        typer.echo("No pipeline manifests found.", err=True)
        raise typer.Exit(code=1)

    failed = False
    for location, result in asyncio.run(_load_all(manifests, http_timeout)):
        if isinstance(result, Exception):
            failed = True
            typer.echo(f"❌ {location}: could not decode manifest: {result}")
            continue

        issues = validate_declarations(result)
        if issues:
            failed = True
            typer.echo(f"❌ {location}: Validation failed ({len(issues)} issue(s))")
            for i, issue in enumerate(issues, start=1):
                typer.echo(f"  {i:>3}. {issue.path}: {issue.message}")
        else:
            typer.echo(f"✅ {location}: {len(result)} pipeline(s)")

    if failed:
        raise typer.Exit(code=2)


@app.command("list-manifests")
def list_manifests_cmd(
    inputs: list[str] = typer.Argument(..., help="Input files, directories, URLs, or @list.txt"),
    http_timeout: float = typer.Option(DEFAULT_HTTP_TIMEOUT, "--timeout", help="Download timeout in seconds"),
) -> None:
    """Print each discovered manifest and how many pipelines it declares."""
    manifests = [location for location in expand_inputs(inputs) if is_manifest(location)]
    for location, result in asyncio.run(_load_all(manifests, http_timeout)):
        if isinstance(result, Exception):
            typer.echo(f"{location}\terror: {result}")
        else:
            kinds = ", ".join(d.kind for d in result)
            typer.echo(f"{location}\t{len(result)}\t{kinds}")


@app.command("inspect")
def inspect_cmd(
    artifacts_path: Path = typer.Argument(..., help="Artifact list (artifacts.jsonl) written by build"),
) -> None:
    """Summarize a built artifact list by asset type and tag."""
    artifacts_path = artifacts_path.expanduser()
    if not artifacts_path.exists():
        typer.echo(f"Error: Artifact list not found: {artifacts_path}", err=True)
        raise typer.Exit(code=1)

    artifacts = load_artifacts(artifacts_path)
    by_type: dict[str, int] = {}
    by_tag: dict[str, int] = {}
    for artifact in artifacts:
        by_type[artifact.asset_type.value] = by_type.get(artifact.asset_type.value, 0) + 1
        for tag in artifact.tags:
            by_tag[tag] = by_tag.get(tag, 0) + 1

    typer.echo(f"Artifacts: {len(artifacts)}")
    for asset_type, count in sorted(by_type.items()):
        typer.echo(f"  {asset_type}: {count}")
    if by_tag:
        typer.echo("Tags:")
        for tag, count in sorted(by_tag.items()):
            typer.echo(f"  {tag}: {count}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
