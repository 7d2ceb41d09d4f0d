"""
Data contracts for suggested follow-up actions.
- Action: one immutable suggestion rendered next to a chat response
- ContextOptions: per-turn context bundle handed to every provider
"""
# @file purpose: Define action data contracts.

from __future__ import annotations

from typing import Annotated, Any, Literal
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, model_validator

ActionKind = Literal["link", "button", "custom-action"]
Emphasis = Literal["primary", "secondary", "danger", "neutral"]
Layout = Literal["card", "pill"]

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


def is_navigable(target: str) -> bool:
    """True for absolute http(s) URLs and root-relative app paths."""
    if target.startswith("/") and not target.startswith("//"):
        return True
    parsed = urlparse(target)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class Action(BaseModel):
    """
    A single suggested follow-up. Equality is structural, instances are frozen.

    `target` is a URL for `link` (and navigable `button`) and an opaque
    identifier for `custom-action`.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: ActionKind
    label: NonEmptyStr
    target: NonEmptyStr
    icon: str | None = None
    thumbnail: str | None = None
    emphasis: Emphasis | None = None
    layout: Layout | None = None

    @model_validator(mode="after")
    def _check_target(self) -> "Action":
        if self.kind in ("link", "button") and not is_navigable(self.target):
            raise ValueError(f"{self.kind} action requires a navigable URL, got {self.target!r}")
        if self.thumbnail is not None and not is_navigable(self.thumbnail):
            raise ValueError(f"thumbnail must be a URL, got {self.thumbnail!r}")
        return self

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class ContextOptions(BaseModel):
    """Context bundle for one turn; unknown keys are kept as routing metadata."""

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    conversation_id: str | None = Field(default=None, alias="conversationId")
    model_options: dict[str, Any] = Field(default_factory=dict, alias="modelOptions")
