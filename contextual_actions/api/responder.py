"""
Response generator protocol (the chat pipeline collaborator) and a
development responder that streams the query back word by word.
"""

from __future__ import annotations

import asyncio
import uuid
from typing import Awaitable, Callable, Protocol

from pydantic import BaseModel

from ..core.action import ContextOptions

TokenCallback = Callable[[str], Awaitable[None]]


class GeneratedResponse(BaseModel):
    message_id: str
    text: str
    sender: str = "assistant"


class Responder(Protocol):
    async def respond(
        self,
        query: str,
        user_id: str,
        context: ContextOptions,
        on_token: TokenCallback,
    ) -> GeneratedResponse: ...


class EchoResponder:
    """Streams `query` back one word at a time; stands in for a model in dev and tests."""

    def __init__(self, *, delay_seconds: float = 0.0) -> None:
        self.delay_seconds = delay_seconds

    async def respond(
        self,
        query: str,
        user_id: str,
        context: ContextOptions,
        on_token: TokenCallback,
    ) -> GeneratedResponse:
        parts: list[str] = []
        for word in query.split():
            token = f"{word} "
            parts.append(token)
            await on_token(token)
            if self.delay_seconds:
                await asyncio.sleep(self.delay_seconds)
        return GeneratedResponse(message_id=uuid.uuid4().hex, text="".join(parts).strip())
