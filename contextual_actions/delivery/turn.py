"""
Per-turn coordination between the response pipeline and action generation.

The response task (owned by the caller) and the action task started here are
siblings: cancelling one never cancels the other. The caller reports the
finalised response message id through set_message_id(); delivery runs on its
own task and emits whenever both the id and the aggregate are ready.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

from loguru import logger

from ..core.action import ContextOptions
from ..core.controller.orchestrator import Orchestrator
from ..core.logging_utils import log_event
from ..core.result import AggregatedActions
from ..io.event_sink import EventSink
from .channel import ActionDeliveryChannel
from .event import ActionsEvent


class ChatTurn:
    def __init__(
        self,
        orchestrator: Orchestrator,
        channel: ActionDeliveryChannel,
        sink: EventSink,
    ) -> None:
        self.orchestrator = orchestrator
        self.channel = channel
        self.sink = sink
        self.actions_task: Optional[asyncio.Task[AggregatedActions]] = None
        self.delivery_task: Optional[asyncio.Task[ActionsEvent]] = None
        self._message_id: Optional[asyncio.Future[str]] = None

    def start(
        self,
        query: str,
        user_id: str,
        context: ContextOptions | dict[str, Any] | None = None,
    ) -> "ChatTurn":
        """Fire-and-forget trigger; returns immediately. Must run inside an event loop."""
        if self.actions_task is not None:
            raise RuntimeError("turn already started")
        loop = asyncio.get_running_loop()
        self._message_id = loop.create_future()
        self.actions_task = asyncio.create_task(
            self.orchestrator.generate_actions(query, user_id, context),
            name="contextual-actions",
        )
        self.delivery_task = asyncio.create_task(
            self.channel.deliver(self.actions_task, self._message_id, self.sink),
            name="contextual-actions-delivery",
        )
        return self

    def set_message_id(self, message_id: str) -> None:
        """Hook for the response pipeline once the response message id is final."""
        if self._message_id is None:
            raise RuntimeError("turn not started")
        if not self._message_id.done():
            self._message_id.set_result(message_id)

    def cancel(self) -> None:
        """Abort action generation and delivery; the response task is not touched."""
        for task in (self.delivery_task, self.actions_task):
            if task is not None and not task.done():
                task.cancel()
        if self._message_id is not None and not self._message_id.done():
            self._message_id.cancel()
        logger.debug(log_event("actions.turn.cancelled"))

    async def wait_delivered(self, timeout: float | None = None) -> Optional[ActionsEvent]:
        """
        Wait for the delivery task without cancelling it on timeout.
        Returns None when delivery was cancelled or did not finish in time.
        """
        if self.delivery_task is None:
            return None
        try:
            return await asyncio.wait_for(asyncio.shield(self.delivery_task), timeout=timeout)
        except asyncio.TimeoutError:
            return None
        except asyncio.CancelledError:
            if self.delivery_task.cancelled():
                return None
            raise
