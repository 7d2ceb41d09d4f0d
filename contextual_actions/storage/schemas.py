"""
Stored response message record, carrying the turn's contextual actions.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..core.action import Action


class StoredMessage(BaseModel):
    """Minimal persisted response message; actions live in `contextual_actions`."""

    model_config = ConfigDict(populate_by_name=True)

    message_id: str = Field(..., alias="messageId")
    conversation_id: Optional[str] = Field(default=None, alias="conversationId")
    text: str = ""
    sender: Optional[str] = None
    contextual_actions: List[Action] = Field(default_factory=list, alias="contextualActions")
    extras: Dict[str, Any] = Field(default_factory=dict)
