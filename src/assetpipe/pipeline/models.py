"""
Pydantic models for pipeline manifests and output artifacts.

A manifest holds an ordered list of pipeline declarations. Each declaration
carries a ``PipelineKind`` (a closed union discriminated by ``type``), the
source filters, tags and categories to apply to everything it produces.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union, get_args

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator


class ScriptBundlesPipeline(BaseModel):
    """Passes ``.script_bundle`` files through unchanged."""

    model_config = ConfigDict(frozen=True)

    type: Literal["ScriptBundles"] = "ScriptBundles"


class ModelsPipeline(BaseModel):
    """Model import. Declared extension point, no strategy yet."""

    model_config = ConfigDict(frozen=True, extra="allow")

    type: Literal["Models"] = "Models"


class MaterialsPipeline(BaseModel):
    """Material baking. Declared extension point, no strategy yet."""

    model_config = ConfigDict(frozen=True, extra="allow")

    type: Literal["Materials"] = "Materials"


class AudioPipeline(BaseModel):
    """Audio transcoding. Declared extension point, no strategy yet."""

    model_config = ConfigDict(frozen=True, extra="allow")

    type: Literal["Audio"] = "Audio"


PipelineKind = Annotated[
    Union[ScriptBundlesPipeline, ModelsPipeline, MaterialsPipeline, AudioPipeline],
    Field(discriminator="type"),
]

PIPELINE_KINDS: tuple[type[BaseModel], ...] = get_args(get_args(PipelineKind)[0])

_DECLARATION_FIELDS = ("sources", "tags", "categories")


class PipelineDeclaration(BaseModel):
    """
    One pipeline entry from a manifest.

    Accepts both the flat record shape, where ``type`` and kind options sit
    beside ``tags``, and the nested shape with a ``pipeline`` sub-table:

        {"type": "ScriptBundles", "tags": ["env"]}
        {"pipeline": {"type": "ScriptBundles"}, "tags": ["env"]}
    """

    model_config = ConfigDict(frozen=True)

    pipeline: PipelineKind
    sources: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    categories: tuple[frozenset[str], ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _hoist_flat_record(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "pipeline" in data or "type" not in data:
            return data
        kind = {k: v for k, v in data.items() if k not in _DECLARATION_FIELDS}
        rest = {k: v for k, v in data.items() if k in _DECLARATION_FIELDS}
        return {"pipeline": kind, **rest}

    @property
    def kind(self) -> str:
        return self.pipeline.type


class AssetType(str, Enum):
    """Semantic type of a produced asset."""

    SCRIPT_BUNDLE = "ScriptBundle"
    MODEL = "Model"
    MATERIAL = "Material"
    AUDIO = "Audio"
    IMAGE = "Image"


class NoPreview(BaseModel):
    type: Literal["None"] = "None"


class ImagePreview(BaseModel):
    type: Literal["Image"] = "Image"
    location: str


ArtifactPreview = Annotated[Union[NoPreview, ImagePreview], Field(discriminator="type")]


class ContentAt(BaseModel):
    """Artifact content stored at a sink-returned location."""

    type: Literal["Content"] = "Content"
    location: str


class OutputArtifact(BaseModel):
    """
    One unit of work product.

    Produced by a processing strategy, then merged exactly once with the
    owning pipeline's tags and categories by the dispatcher.

    Attributes:
        asset_type: Semantic type of the asset
        sub_asset: Optional identifier within a multi-asset source
        hidden: Whether the asset is hidden from listings
        name: Display name
        tags: Ordered tags (duplicates allowed)
        categories: Ordered category slots, each a set of labels
        preview: Preview descriptor
        content: Where the produced content lives
        source: Input location the artifact came from
    """

    asset_type: AssetType
    sub_asset: str | None = None
    hidden: bool = False
    name: str
    tags: list[str] = Field(default_factory=list)
    categories: list[set[str]] = Field(default_factory=list)
    preview: ArtifactPreview = Field(default_factory=NoPreview)
    content: ContentAt
    source: str | None = None

    @field_serializer("categories")
    def _serialize_categories(self, categories: list[set[str]]) -> list[list[str]]:
        return [sorted(slot) for slot in categories]
