"""Pydantic models for built-in prompts and resources.

Records are serialized with ``by_alias=True, exclude_unset=True`` so that an
optional field the caller never supplied stays absent in storage rather than
being written as ``null``. Resource ``mime_type`` travels as ``mimeType``.
"""

from typing import Any, Mapping, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field


class PromptArgument(BaseModel):
    """A named placeholder accepted by a prompt template."""

    name: str
    title: Optional[str] = None
    description: Optional[str] = None
    required: Optional[bool] = None


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

class BuiltinPromptCreate(BaseModel):
    """Payload for creating a prompt (everything except ``id``)."""

    name: str = Field(min_length=1, description="Unique external-facing key")
    title: Optional[str] = None
    description: Optional[str] = None
    template: str = Field(description="Body, may contain {{placeholder}} names")
    arguments: Optional[list[PromptArgument]] = None
    enabled: bool = True


class BuiltinPrompt(BuiltinPromptCreate):
    """A stored prompt record."""

    id: str


class BuiltinPromptUpdate(BaseModel):
    """Partial patch for a prompt. Only explicitly supplied fields apply."""

    name: Optional[str] = Field(default=None, min_length=1)
    title: Optional[str] = None
    description: Optional[str] = None
    template: Optional[str] = None
    arguments: Optional[list[PromptArgument]] = None
    enabled: Optional[bool] = None


# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------

class BuiltinResourceCreate(BaseModel):
    """Payload for creating a resource (everything except ``id``)."""

    model_config = ConfigDict(populate_by_name=True)

    uri: str = Field(min_length=1, description="Unique external-facing key")
    name: Optional[str] = None
    description: Optional[str] = None
    mime_type: Optional[str] = Field(default=None, alias="mimeType")
    content: str
    enabled: bool = True


class BuiltinResource(BuiltinResourceCreate):
    """A stored resource record."""

    id: str


class BuiltinResourceUpdate(BaseModel):
    """Partial patch for a resource. Only explicitly supplied fields apply."""

    model_config = ConfigDict(populate_by_name=True)

    uri: Optional[str] = Field(default=None, min_length=1)
    name: Optional[str] = None
    description: Optional[str] = None
    mime_type: Optional[str] = Field(default=None, alias="mimeType")
    content: Optional[str] = None
    enabled: Optional[bool] = None


# ---------------------------------------------------------------------------
# Helpers shared by both backends
# ---------------------------------------------------------------------------

ModelT = TypeVar("ModelT", bound=BaseModel)


def coerce_payload(model: type[ModelT], data: Union[ModelT, Mapping[str, Any]]) -> ModelT:
    """Accept either a payload model or a plain mapping."""
    if isinstance(data, model):
        return data
    return model.model_validate(dict(data))


def to_document(record: BaseModel) -> dict[str, Any]:
    """Serialize a record the way it is persisted in the settings document."""
    return record.model_dump(by_alias=True, exclude_unset=True)


def patch_fields(patch: BaseModel) -> dict[str, Any]:
    """Fields the caller actually supplied, keyed by attribute name."""
    return patch.model_dump(exclude_unset=True)


def apply_patch(record: ModelT, changes: Mapping[str, Any]) -> ModelT:
    """Return a new, re-validated record with ``changes`` merged in.

    Validation runs before anything is written, so a patch that would blank
    a required field fails without touching storage.
    """
    merged = record.model_dump(exclude_unset=True)
    merged.update(changes)
    merged["id"] = record.id
    return type(record).model_validate(merged)
