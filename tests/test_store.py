import json
from pathlib import Path

import pytest

from contextual_actions.core.action import Action
from contextual_actions.storage.schemas import StoredMessage
from contextual_actions.storage.store import InMemoryMessageStore, JsonMessageStore

CARD = Action(
    kind="link",
    label="Groundhog Day (1993)",
    target="https://www.themoviedb.org/movie/115",
    layout="card",
    thumbnail="https://image.tmdb.org/t/p/w92/groundhog.jpg",
)


@pytest.mark.asyncio
async def test_in_memory_attach_merges_into_saved_message() -> None:
    store = InMemoryMessageStore()
    await store.save(StoredMessage(message_id="m1", conversation_id="c1", text="hello"))

    updated = await store.attach_actions("m1", [CARD])

    assert updated.text == "hello"
    assert updated.conversation_id == "c1"
    assert (await store.get("m1")).contextual_actions == [CARD]


@pytest.mark.asyncio
async def test_json_store_round_trips_with_wire_names(tmp_path: Path) -> None:
    store = JsonMessageStore(tmp_path)
    await store.save(StoredMessage(message_id="m-1", text="hi"))

    await store.attach_actions("m-1", [CARD])

    raw = json.loads((tmp_path / "m-1.json").read_text(encoding="utf-8"))
    assert raw["messageId"] == "m-1"
    assert raw["contextualActions"][0]["label"] == "Groundhog Day (1993)"
    reloaded = await JsonMessageStore(tmp_path).get("m-1")
    assert reloaded is not None and reloaded.contextual_actions == [CARD]


@pytest.mark.asyncio
async def test_json_store_unknown_and_invalid_ids(tmp_path: Path) -> None:
    store = JsonMessageStore(tmp_path)
    assert await store.get("missing") is None
    with pytest.raises(ValueError):
        await store.get("../..")
