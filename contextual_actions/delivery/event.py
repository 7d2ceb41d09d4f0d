"""
Wire payload of the contextual actions event: {messageId, actions, count}.
"""
# @file purpose: Define the ActionsEvent wire contract.

from __future__ import annotations

from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..core.action import Action


class ActionsEvent(BaseModel):
    """
    `count` duplicates len(actions) on purpose: clients check it without
    deserializing the list. It is derived when omitted and must agree otherwise.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    message_id: str = Field(..., min_length=1, alias="messageId")
    actions: tuple[Action, ...] = ()
    count: int = Field(default=0, ge=0)

    @model_validator(mode="before")
    @classmethod
    def _derive_count(cls, data: Any) -> Any:
        if isinstance(data, dict) and "count" not in data:
            data = {**data, "count": len(data.get("actions") or ())}
        return data

    @model_validator(mode="after")
    def _check_count(self) -> "ActionsEvent":
        if self.count != len(self.actions):
            raise ValueError(f"count={self.count} does not match {len(self.actions)} actions")
        return self

    @classmethod
    def for_message(cls, message_id: str, actions: Iterable[Action]) -> "ActionsEvent":
        actions = tuple(actions)
        return cls(message_id=message_id, actions=actions, count=len(actions))

    def to_wire(self) -> dict[str, Any]:
        return {
            "messageId": self.message_id,
            "actions": [a.to_wire() for a in self.actions],
            "count": self.count,
        }
