"""
assetpipe: manifest-driven asset build orchestration.

Discovers ``pipeline.toml`` / ``pipeline.json`` manifests among a flat list of
input locations, dispatches each declared pipeline to its processing strategy,
and returns the resulting output artifacts with declared tags and categories
merged in.

Basic usage:
    >>> import asyncio
    >>> from assetpipe.assets import AssetAccess, DirectorySink
    >>> from assetpipe.pipeline import BatchContext, process_batch
    >>>
    >>> async def build(files):
    ...     async with AssetAccess() as assets:
    ...         ctx = BatchContext(assets=assets, files=files, sink=DirectorySink(Path("out")))
    ...         return await process_batch(ctx)
"""

__version__ = "0.1.0"
