"""
FastAPI surface for one chat turn with contextual actions.

POST /api/ask streams Server-Sent Events over a single connection:
  message            token chunks from the responder
  final              the finalised response message (id, text)
  <event_name>       exactly one {messageId, actions, count} per turn
  error              responder failure (no actions event follows)
The stream ends once the actions event is out or the provider budget runs out.
"""

from __future__ import annotations

import asyncio
import uuid
from pathlib import Path
from typing import Any, Optional

from fastapi import APIRouter, FastAPI, HTTPException, Request
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field
from sse_starlette.sse import EventSourceResponse

from ..core.action import ContextOptions
from ..core.controller.orchestrator import Orchestrator
from ..core.logging_utils import log_event
from ..core.settings import Settings, settings as default_settings
from ..delivery.channel import ActionDeliveryChannel
from ..delivery.turn import ChatTurn
from ..io.event_sink import QueueEventSink
from ..providers.bootstrap import build_orchestrator
from ..storage.schemas import StoredMessage
from ..storage.store import InMemoryMessageStore, JsonMessageStore, MessageStore
from .responder import EchoResponder, GeneratedResponse, Responder

router = APIRouter()


class AskRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str
    conversation_id: Optional[str] = Field(default=None, alias="conversationId")
    user_id: str = Field(default="anonymous", alias="userId")
    model_options: dict[str, Any] = Field(default_factory=dict, alias="modelOptions")


def create_app(
    *,
    orchestrator: Orchestrator | None = None,
    responder: Responder | None = None,
    store: MessageStore | None = None,
    cfg: Settings | None = None,
) -> FastAPI:
    cfg = cfg or default_settings
    if store is None:
        store = JsonMessageStore(Path(cfg.store_dir)) if cfg.store_dir else InMemoryMessageStore()

    app = FastAPI(title="contextual-actions")
    app.state.settings = cfg
    app.state.orchestrator = orchestrator or build_orchestrator(cfg)
    app.state.responder = responder or EchoResponder()
    app.state.store = store
    app.state.channel = ActionDeliveryChannel(event_name=cfg.event_name, store=store)
    app.include_router(router)
    return app


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/api/providers")
async def list_providers(request: Request) -> dict[str, list[str]]:
    return {"providers": request.app.state.orchestrator.registry.names()}


@router.get("/api/messages/{message_id}")
async def get_message(message_id: str, request: Request) -> dict[str, Any]:
    try:
        message = await request.app.state.store.get(message_id)
    except ValueError:
        message = None
    if message is None:
        raise HTTPException(status_code=404, detail="message not found")
    return message.model_dump(by_alias=True, exclude_none=True, mode="json")


@router.post("/api/ask")
async def ask(payload: AskRequest, request: Request):
    text = payload.text.strip()
    if not text:
        raise HTTPException(status_code=422, detail="Message cannot be empty")

    state = request.app.state
    conversation_id = payload.conversation_id or uuid.uuid4().hex
    context = ContextOptions(conversation_id=conversation_id, model_options=payload.model_options)
    sink = QueueEventSink()

    # both tasks start together; neither awaits the other
    turn = ChatTurn(state.orchestrator, state.channel, sink).start(text, payload.user_id, context)
    response_task = asyncio.create_task(
        _stream_response(state.responder, state.store, text, payload.user_id, context, sink),
        name="chat-response",
    )
    closer = asyncio.create_task(
        _close_when_done(response_task, turn, sink, state.settings.provider_timeout_seconds)
    )

    async def event_generator():
        try:
            async for item in sink.events():
                yield item
        finally:
            # client disconnect or normal end: the sink stops accepting events
            sink.close()
            if not response_task.done():
                response_task.cancel()
            turn.cancel()
            if not closer.done():
                closer.cancel()
            logger.debug(log_event("api.ask.stream_closed", conversation_id=conversation_id))

    logger.info(log_event("api.ask.started", conversation_id=conversation_id, user_id=payload.user_id))
    return EventSourceResponse(event_generator())


async def _stream_response(
    responder: Responder,
    store: MessageStore,
    text: str,
    user_id: str,
    context: ContextOptions,
    sink: QueueEventSink,
) -> GeneratedResponse:
    async def on_token(token: str) -> None:
        if not sink.closed:
            await sink.send("message", {"text": token})

    response = await responder.respond(text, user_id, context, on_token)
    await store.save(
        StoredMessage(
            message_id=response.message_id,
            conversation_id=context.conversation_id,
            text=response.text,
            sender=response.sender,
        )
    )
    if not sink.closed:
        await sink.send(
            "final",
            {
                "final": True,
                "conversationId": context.conversation_id,
                "responseMessage": {
                    "messageId": response.message_id,
                    "text": response.text,
                    "sender": response.sender,
                },
            },
        )
    return response


async def _close_when_done(
    response_task: "asyncio.Task[GeneratedResponse]",
    turn: ChatTurn,
    sink: QueueEventSink,
    provider_timeout: float | None,
) -> None:
    try:
        try:
            response = await response_task
        except asyncio.CancelledError:
            raise
        except Exception as e:  # noqa: BLE001
            logger.opt(exception=e).error(log_event("api.ask.response_failed", error=repr(e)))
            turn.cancel()
            if not sink.closed:
                await sink.send("error", {"error": "response generation failed"})
            return

        turn.set_message_id(response.message_id)
        # providers are individually bounded; the extra second covers validation and send
        budget = (provider_timeout + 1.0) if provider_timeout else None
        if await turn.wait_delivered(timeout=budget) is None:
            turn.cancel()
    finally:
        sink.close()
