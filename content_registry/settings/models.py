"""Pydantic model for the shared settings document."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SettingsDocument(BaseModel):
    """The on-disk settings document.

    Only the two registry arrays are modelled. Every other top-level key
    belongs to some other part of the application and is carried through
    untouched as an extra field.
    """

    model_config = ConfigDict(extra="allow")

    prompts: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Built-in prompt records, in creation order",
    )
    resources: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Built-in resource records, in creation order",
    )
