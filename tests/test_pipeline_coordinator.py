"""Tests for manifest discovery and batch coordination."""

import asyncio
import json

import pytest

from assetpipe.errors import ManifestDecodeError, UnsupportedPipelineKind
from assetpipe.pipeline import (
    STRATEGIES,
    AssetType,
    BatchContext,
    ContentAt,
    OutputArtifact,
    ScriptBundlesPipeline,
    discover_manifests,
    process_batch,
)


def manifest(*records):
    return json.dumps(list(records)).encode()


class TestDiscoverManifests:
    """Tests for discover_manifests()."""

    def test_finds_toml_and_json(self, fake_assets, sink):
        fake_assets.files.update(
            {
                "/a/pipeline.json": manifest({"type": "ScriptBundles"}, {"type": "Models"}),
                "/b/pipeline.toml": b'[[pipelines]]\ntype = "ScriptBundles"\n',
                "/c/readme.txt": b"ignored",
            }
        )
        batch = BatchContext(assets=fake_assets, files=list(fake_assets.files), sink=sink)

        entries = asyncio.run(discover_manifests(batch))

        assert sorted((e.manifest, e.declaration.kind) for e in entries) == [
            ("/a/pipeline.json", "Models"),
            ("/a/pipeline.json", "ScriptBundles"),
            ("/b/pipeline.toml", "ScriptBundles"),
        ]
        assert "/c/readme.txt" not in fake_assets.downloads

    def test_declaration_order_kept_within_manifest(self, fake_assets, sink):
        fake_assets.files["/a/pipeline.json"] = manifest(
            *({"type": "ScriptBundles", "tags": [str(i)]} for i in range(3))
        )
        batch = BatchContext(assets=fake_assets, files=["/a/pipeline.json"], sink=sink)

        entries = asyncio.run(discover_manifests(batch))

        assert [e.declaration.tags for e in entries] == [("0",), ("1",), ("2",)]

    def test_decode_failure_is_isolated(self, fake_assets, sink, errors):
        """Test a malformed manifest is reported and skipped."""
        fake_assets.files.update(
            {
                "/good/pipeline.json": manifest({"type": "ScriptBundles"}),
                "/bad/pipeline.json": b"[{not json",
                "/bad2/pipeline.toml": b'[[pipelines]]\ntype = "Textures"\n',
            }
        )
        batch = BatchContext(assets=fake_assets, files=list(fake_assets.files), sink=sink, on_error=errors)

        entries = asyncio.run(discover_manifests(batch))

        assert [e.manifest for e in entries] == ["/good/pipeline.json"]
        assert len(errors.errors) == 2
        assert all(isinstance(e, ManifestDecodeError) for e in errors.errors)
        assert sorted(e.location for e in errors.errors) == ["/bad/pipeline.json", "/bad2/pipeline.toml"]

    def test_fetch_failure_is_isolated(self, fake_assets, sink, errors):
        fake_assets.files["/a/pipeline.json"] = manifest({"type": "ScriptBundles"})
        fake_assets.fail.add("/a/pipeline.json")
        batch = BatchContext(assets=fake_assets, files=["/a/pipeline.json"], sink=sink, on_error=errors)

        assert asyncio.run(discover_manifests(batch)) == []
        assert isinstance(errors.errors[0].__cause__, OSError)

    def test_manifests_ignore_input_filter(self, fake_assets, sink):
        fake_assets.files["/a/pipeline.json"] = manifest({"type": "ScriptBundles"})
        batch = BatchContext(
            assets=fake_assets, files=["/a/pipeline.json"], sink=sink, input_file_filter="nothing"
        )

        assert len(asyncio.run(discover_manifests(batch))) == 1


class TestProcessBatch:
    """End-to-end tests for process_batch()."""

    def test_script_bundle_scenario(self, fake_assets, sink, errors):
        """Test two bundles and a text file produce exactly two tagged artifacts."""
        fake_assets.files.update(
            {
                "/proj/pipeline.json": manifest({"type": "ScriptBundles", "tags": ["env"], "sources": []}),
                "/proj/one.script_bundle": b"one",
                "/proj/two.script_bundle": b"two",
                "/proj/notes.txt": b"notes",
            }
        )
        batch = BatchContext(assets=fake_assets, files=list(fake_assets.files), sink=sink, on_error=errors)

        artifacts = asyncio.run(process_batch(batch))

        assert len(artifacts) == 2
        assert errors.errors == []
        for artifact in artifacts:
            assert artifact.tags == ["env"]
            assert sink.writes[artifact.content.location] == fake_assets.files[artifact.source]
        assert sorted(a.name for a in artifacts) == ["one.script_bundle", "two.script_bundle"]
        assert "/proj/notes.txt" not in fake_assets.downloads

    def test_category_merge_scenario(self, fake_assets, sink, monkeypatch):
        """Test declared categories union into a strategy's existing slot."""

        async def with_categories(ctx, config):
            return [
                OutputArtifact(
                    asset_type=AssetType.SCRIPT_BUNDLE,
                    name="x",
                    categories=[{"y", "z"}],
                    content=ContentAt(location="mem://x"),
                )
            ]

        monkeypatch.setitem(STRATEGIES, ScriptBundlesPipeline, with_categories)
        fake_assets.files["/proj/pipeline.json"] = manifest(
            {"type": "ScriptBundles", "categories": [["x", "y"]]}
        )
        batch = BatchContext(assets=fake_assets, files=list(fake_assets.files), sink=sink)

        artifacts = asyncio.run(process_batch(batch))

        assert len(artifacts) == 1
        assert artifacts[0].categories[0] == {"x", "y", "z"}

    def test_two_manifests_scenario(self, fake_assets, sink):
        """Test two manifests yield the union of their artifacts exactly once."""
        fake_assets.files.update(
            {
                "/a/pipeline.json": manifest({"type": "ScriptBundles", "tags": ["a"]}),
                "/a/x.script_bundle": b"ax",
                "/b/pipeline.toml": b'[[pipelines]]\ntype = "ScriptBundles"\ntags = ["b"]\n',
                "/b/y.script_bundle": b"by",
                "/b/z.script_bundle": b"bz",
            }
        )
        batch = BatchContext(assets=fake_assets, files=list(fake_assets.files), sink=sink)

        artifacts = asyncio.run(process_batch(batch))

        assert sorted((a.source, tuple(a.tags)) for a in artifacts) == [
            ("/a/x.script_bundle", ("a",)),
            ("/b/y.script_bundle", ("b",)),
            ("/b/z.script_bundle", ("b",)),
        ]

    def test_pipelines_dispatched_one_at_a_time(self, fake_assets, sink, monkeypatch):
        """Test a pipeline's fan-out finishes before the next pipeline starts."""
        events = []
        active = 0

        async def tracked(ctx, config):
            nonlocal active
            active += 1
            assert active == 1
            events.append(("start", ctx.root))
            await asyncio.sleep(0.01)
            events.append(("end", ctx.root))
            active -= 1
            return []

        monkeypatch.setitem(STRATEGIES, ScriptBundlesPipeline, tracked)
        fake_assets.files.update(
            {
                "/a/pipeline.json": manifest({"type": "ScriptBundles"}, {"type": "ScriptBundles"}),
                "/b/pipeline.json": manifest({"type": "ScriptBundles"}),
            }
        )
        batch = BatchContext(assets=fake_assets, files=list(fake_assets.files), sink=sink)

        asyncio.run(process_batch(batch))

        assert len(events) == 6
        assert [kind for kind, _ in events] == ["start", "end"] * 3

    def test_isolated_file_failure(self, fake_assets, sink, errors):
        fake_assets.files.update(
            {
                "/p/pipeline.json": manifest({"type": "ScriptBundles"}),
                "/p/ok.script_bundle": b"ok",
                "/p/bad.script_bundle": b"bad",
            }
        )
        fake_assets.fail.add("/p/bad.script_bundle")
        batch = BatchContext(assets=fake_assets, files=list(fake_assets.files), sink=sink, on_error=errors)

        artifacts = asyncio.run(process_batch(batch))

        assert [a.source for a in artifacts] == ["/p/ok.script_bundle"]
        assert len(errors.errors) == 1

    def test_unimplemented_kind_aborts_batch(self, fake_assets, sink):
        fake_assets.files.update(
            {
                "/p/pipeline.json": manifest({"type": "Materials"}),
                "/p/a.script_bundle": b"a",
            }
        )
        batch = BatchContext(assets=fake_assets, files=list(fake_assets.files), sink=sink)

        with pytest.raises(UnsupportedPipelineKind):
            asyncio.run(process_batch(batch))

    def test_status_reported(self, fake_assets, sink, statuses):
        fake_assets.files["/p/pipeline.json"] = manifest({"type": "ScriptBundles"})
        batch = BatchContext(assets=fake_assets, files=["/p/pipeline.json"], sink=sink, on_status=statuses)

        asyncio.run(process_batch(batch))

        assert statuses.messages[0] == "Found 1 pipeline(s)"
        assert statuses.messages[-1] == "Produced 0 artifact(s)"

    def test_no_manifests(self, fake_assets, sink):
        fake_assets.files["/p/a.script_bundle"] = b"a"
        batch = BatchContext(assets=fake_assets, files=["/p/a.script_bundle"], sink=sink)

        assert asyncio.run(process_batch(batch)) == []
        assert fake_assets.downloads == []
