"""
Action delivery channel: pairs a turn's aggregate with the response message id,
emits exactly one event on the live stream, and hands the actions to the
message store.

Join points:
  1) the response message id (known only once the response is finalised)
  2) the aggregate (may settle before or after the id)
Nothing here waits on the response content itself.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Optional

from loguru import logger

from ..core.errors import DeliveryError
from ..core.logging_utils import log_event
from ..core.result import AggregatedActions
from ..io.event_sink import EventSink
from ..storage.store import MessageStore
from .event import ActionsEvent

DEFAULT_EVENT_NAME = "contextual_actions"


class ActionDeliveryChannel:
    def __init__(
        self,
        *,
        event_name: str = DEFAULT_EVENT_NAME,
        store: Optional[MessageStore] = None,
    ) -> None:
        self.event_name = event_name
        self.store = store

    async def deliver(
        self,
        actions: Awaitable[AggregatedActions],
        message_id: Awaitable[str],
        sink: EventSink,
    ) -> ActionsEvent:
        resolved_id = await message_id
        try:
            aggregate = await actions
        except asyncio.CancelledError:
            raise
        except Exception as e:  # noqa: BLE001
            # the orchestrator never raises; this guards custom awaitables
            logger.opt(exception=e).error(
                log_event("actions.delivery.aggregate_failed", message_id=resolved_id, error=repr(e))
            )
            aggregate = AggregatedActions.empty()

        event = ActionsEvent.for_message(resolved_id, aggregate.actions)
        await self.emit(event, sink)
        await self.persist(event)
        return event

    async def emit(self, event: ActionsEvent, sink: EventSink) -> bool:
        """Best effort: a closed stream is expected under client disconnect."""
        if sink.closed:
            logger.debug(log_event("actions.delivery.skipped", message_id=event.message_id, reason="closed"))
            return False
        try:
            await sink.send(self.event_name, event.to_wire())
        except DeliveryError:
            logger.debug(log_event("actions.delivery.skipped", message_id=event.message_id, reason="closed"))
            return False
        logger.debug(log_event("actions.delivery.sent", message_id=event.message_id, count=event.count))
        return True

    async def persist(self, event: ActionsEvent) -> None:
        if self.store is None or not event.actions:
            return
        try:
            await self.store.attach_actions(event.message_id, list(event.actions))
        except Exception as e:  # noqa: BLE001
            logger.opt(exception=e).error(
                log_event("actions.delivery.persist_failed", message_id=event.message_id, error=repr(e))
            )
