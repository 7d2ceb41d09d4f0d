# contextual_actions/storage/store.py
"""
Message stores: the persistence collaborator the delivery channel hands
actions to, so reloading a conversation shows the same actions.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Dict, Optional, Protocol

from ..core.action import Action
from .schemas import StoredMessage


class MessageStore(Protocol):
    async def save(self, message: StoredMessage) -> None: ...
    async def get(self, message_id: str) -> Optional[StoredMessage]: ...
    async def attach_actions(self, message_id: str, actions: list[Action]) -> StoredMessage: ...


class InMemoryMessageStore:
    def __init__(self) -> None:
        self._messages: Dict[str, StoredMessage] = {}

    async def save(self, message: StoredMessage) -> None:
        self._messages[message.message_id] = message

    async def get(self, message_id: str) -> Optional[StoredMessage]:
        return self._messages.get(message_id)

    async def attach_actions(self, message_id: str, actions: list[Action]) -> StoredMessage:
        """Merge actions into the stored record (upsert when the message is not saved yet)."""
        current = self._messages.get(message_id) or StoredMessage(message_id=message_id)
        updated = current.model_copy(update={"contextual_actions": list(actions)})
        self._messages[message_id] = updated
        return updated


class JsonMessageStore:
    """
    One JSON document per message under `root`:
      <root>/<message_id>.json
    File writes run in a worker thread to keep the event loop free.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, message_id: str) -> Path:
        safe = "".join(ch for ch in message_id if ch.isalnum() or ch in "-_")
        if not safe:
            raise ValueError(f"invalid message id: {message_id!r}")
        return self.root / f"{safe}.json"

    async def save(self, message: StoredMessage) -> None:
        path = self._path(message.message_id)
        payload = message.model_dump_json(indent=2, by_alias=True, exclude_none=True)
        await asyncio.to_thread(path.write_text, payload, encoding="utf-8")

    async def get(self, message_id: str) -> Optional[StoredMessage]:
        path = self._path(message_id)
        if not path.exists():
            return None
        raw = await asyncio.to_thread(path.read_text, encoding="utf-8")
        return StoredMessage.model_validate_json(raw)

    async def attach_actions(self, message_id: str, actions: list[Action]) -> StoredMessage:
        current = await self.get(message_id) or StoredMessage(message_id=message_id)
        updated = current.model_copy(update={"contextual_actions": list(actions)})
        await self.save(updated)
        return updated
