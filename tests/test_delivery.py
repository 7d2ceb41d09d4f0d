import asyncio
import time

import pytest
from pydantic import ValidationError

from contextual_actions.core.action import Action
from contextual_actions.core.controller.orchestrator import Orchestrator
from contextual_actions.core.result import AggregatedActions, ProviderResult
from contextual_actions.delivery.channel import ActionDeliveryChannel
from contextual_actions.delivery.event import ActionsEvent
from contextual_actions.delivery.turn import ChatTurn
from contextual_actions.io.event_sink import ListEventSink, QueueEventSink
from contextual_actions.storage.store import InMemoryMessageStore

DOCS = Action(kind="button", label="Docs", target="/documents")


class StaticProvider:
    def __init__(self, name, actions, delay=0.0):
        self.name = name
        self.actions = actions
        self.delay = delay

    async def get_actions(self, query, user_id, options):
        if self.delay:
            await asyncio.sleep(self.delay)
        return list(self.actions)


class BrokenStore:
    async def attach_actions(self, message_id, actions):
        raise OSError("disk full")


async def done(value):
    return value


def aggregate(*actions: Action) -> AggregatedActions:
    return AggregatedActions.from_results([ProviderResult.success("p", list(actions))])


def test_event_count_is_derived_and_checked() -> None:
    event = ActionsEvent.model_validate({"messageId": "m1", "actions": [DOCS.to_wire()]})
    assert event.count == 1
    assert event.to_wire() == {
        "messageId": "m1",
        "actions": [{"kind": "button", "label": "Docs", "target": "/documents"}],
        "count": 1,
    }
    with pytest.raises(ValidationError):
        ActionsEvent.model_validate({"messageId": "m1", "actions": [], "count": 2})
    with pytest.raises(ValidationError):
        ActionsEvent.for_message("", [])


@pytest.mark.asyncio
async def test_empty_aggregate_still_emits_one_event() -> None:
    sink = ListEventSink()
    channel = ActionDeliveryChannel()

    event = await channel.deliver(done(AggregatedActions.empty()), done("m1"), sink)

    assert sink.events == [("contextual_actions", {"messageId": "m1", "actions": [], "count": 0})]
    assert event.count == 0


@pytest.mark.asyncio
async def test_closed_sink_is_skipped_silently() -> None:
    sink = ListEventSink()
    sink.close()
    store = InMemoryMessageStore()
    channel = ActionDeliveryChannel(store=store)

    event = await channel.deliver(done(aggregate(DOCS)), done("m1"), sink)

    assert sink.events == []
    assert event.count == 1
    stored = await store.get("m1")
    assert stored is not None and stored.contextual_actions == [DOCS]


@pytest.mark.asyncio
async def test_non_empty_actions_are_persisted_empty_are_not() -> None:
    store = InMemoryMessageStore()
    channel = ActionDeliveryChannel(event_name="business_actions", store=store)
    sink = ListEventSink()

    await channel.deliver(done(aggregate(DOCS)), done("m1"), sink)
    await channel.deliver(done(AggregatedActions.empty()), done("m2"), sink)

    assert [name for name, _ in sink.events] == ["business_actions", "business_actions"]
    assert (await store.get("m1")).contextual_actions == [DOCS]
    assert await store.get("m2") is None


@pytest.mark.asyncio
async def test_persistence_failure_does_not_escape() -> None:
    sink = ListEventSink()
    channel = ActionDeliveryChannel(store=BrokenStore())

    event = await channel.deliver(done(aggregate(DOCS)), done("m1"), sink)

    assert event.count == 1
    assert len(sink.events) == 1


@pytest.mark.asyncio
async def test_delivery_waits_for_message_id() -> None:
    sink = ListEventSink()
    message_id: asyncio.Future[str] = asyncio.get_running_loop().create_future()
    task = asyncio.create_task(ActionDeliveryChannel().deliver(done(aggregate(DOCS)), message_id, sink))

    await asyncio.sleep(0.05)
    assert sink.events == []

    message_id.set_result("late-id")
    event = await task
    assert event.message_id == "late-id"
    assert sink.events[0][1]["messageId"] == "late-id"


@pytest.mark.asyncio
async def test_turn_emits_exactly_one_event_after_message_id() -> None:
    orchestrator = Orchestrator()
    orchestrator.register(StaticProvider("docs", [DOCS]))
    sink = ListEventSink()
    turn = ChatTurn(orchestrator, ActionDeliveryChannel(), sink).start("find docs", "u1")

    await asyncio.sleep(0.02)
    assert sink.events == []
    turn.set_message_id("resp-1")
    turn.set_message_id("ignored-second-call")
    event = await turn.wait_delivered(timeout=1.0)

    assert event is not None
    assert sink.events == [("contextual_actions", {"messageId": "resp-1", "actions": [DOCS.to_wire()], "count": 1})]


@pytest.mark.asyncio
async def test_slow_providers_do_not_hold_back_the_response() -> None:
    orchestrator = Orchestrator()
    orchestrator.register(StaticProvider("slow", [DOCS], delay=0.4))
    sink = ListEventSink()
    turn = ChatTurn(orchestrator, ActionDeliveryChannel(), sink).start("q", "u1")

    async def respond() -> str:
        await sink.send("final", {"messageId": "resp-1"})
        return "resp-1"

    started = time.perf_counter()
    message_id = await asyncio.create_task(respond())
    assert time.perf_counter() - started < 0.1
    assert [name for name, _ in sink.events] == ["final"]

    turn.set_message_id(message_id)
    await turn.wait_delivered(timeout=2.0)
    assert [name for name, _ in sink.events] == ["final", "contextual_actions"]


@pytest.mark.asyncio
async def test_cancelling_the_turn_leaves_the_response_running() -> None:
    orchestrator = Orchestrator()
    orchestrator.register(StaticProvider("slow", [DOCS], delay=5.0))
    sink = ListEventSink()
    turn = ChatTurn(orchestrator, ActionDeliveryChannel(), sink).start("q", "u1")

    async def respond() -> str:
        await asyncio.sleep(0.05)
        return "resp-1"

    response = asyncio.create_task(respond())
    turn.cancel()

    assert await response == "resp-1"
    assert await turn.wait_delivered() is None
    assert sink.events == []


@pytest.mark.asyncio
async def test_cancelling_the_response_leaves_actions_running() -> None:
    orchestrator = Orchestrator()
    orchestrator.register(StaticProvider("docs", [DOCS], delay=0.05))
    sink = ListEventSink()
    turn = ChatTurn(orchestrator, ActionDeliveryChannel(), sink).start("q", "u1")

    response = asyncio.create_task(asyncio.sleep(10))
    await asyncio.sleep(0)
    response.cancel()

    aggregate_result = await turn.actions_task
    assert aggregate_result.count == 1
    assert not turn.delivery_task.done()
    turn.cancel()


@pytest.mark.asyncio
async def test_wait_delivered_timeout_does_not_cancel_delivery() -> None:
    orchestrator = Orchestrator()
    sink = ListEventSink()
    turn = ChatTurn(orchestrator, ActionDeliveryChannel(), sink).start("q", "u1")

    assert await turn.wait_delivered(timeout=0.05) is None
    turn.set_message_id("m1")
    event = await turn.wait_delivered(timeout=1.0)
    assert event is not None and event.count == 0


@pytest.mark.asyncio
async def test_queue_sink_drains_then_stops_after_close() -> None:
    sink = QueueEventSink()
    await sink.send("message", {"text": "hi"})
    await sink.send("contextual_actions", {"messageId": "m1", "actions": [], "count": 0})
    sink.close()
    sink.close()

    items = [item async for item in sink.events()]

    assert [i["event"] for i in items] == ["message", "contextual_actions"]
    assert items[1]["data"] == '{"messageId": "m1", "actions": [], "count": 0}'
    assert sink.closed
