"""
Server-to-client event sink (abstraction + queue implementation).

The token stream and the contextual actions event share one sink per turn,
so both travel over the same ordered transport.

Notes:
- `send()` raises DeliveryError once the sink is closed (client gone, stream ended).
- QueueEventSink.events() yields dicts in the shape sse-starlette expects:
  {"event": name, "data": json-string}.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, AsyncIterator, Protocol

from ..core.errors import DeliveryError

_CLOSED = object()


class EventSink(Protocol):
    @property
    def closed(self) -> bool: ...

    async def send(self, event: str, data: Any) -> None: ...


class QueueEventSink:
    """asyncio.Queue-backed sink drained by an EventSourceResponse generator."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, event: str, data: Any) -> None:
        if self._closed:
            raise DeliveryError(f"stream closed, dropped event {event!r}")
        await self._queue.put((event, data))

    def close(self) -> None:
        """Idempotent; pending events are still drained before events() stops."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)

    async def events(self) -> AsyncIterator[dict[str, str]]:
        while True:
            item = await self._queue.get()
            if item is _CLOSED:
                return
            event, data = item
            yield {"event": event, "data": json.dumps(data, ensure_ascii=False)}


class ListEventSink:
    """Collects events in memory; handy for scripts and tests."""

    def __init__(self) -> None:
        self.events: list[tuple[str, Any]] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, event: str, data: Any) -> None:
        if self._closed:
            raise DeliveryError(f"stream closed, dropped event {event!r}")
        self.events.append((event, data))

    def close(self) -> None:
        self._closed = True
