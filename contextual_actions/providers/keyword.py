"""
Keyword-triggered provider: literal substring match -> static navigation actions.
"""
# @file purpose: Implement the keyword provider and its knowledge-base preset.

from __future__ import annotations

from typing import Iterable, Sequence

from ..core.action import Action, ContextOptions


class KeywordActionProvider:
    """
    Returns `actions` whenever the query contains any of `triggers`
    (case-insensitive); otherwise no actions.
    """

    def __init__(self, name: str, triggers: Iterable[str], actions: Sequence[Action]) -> None:
        self.name = name
        self.triggers: tuple[str, ...] = tuple(t.lower() for t in triggers if t)
        self.actions: tuple[Action, ...] = tuple(actions)

    def matches(self, query: str) -> bool:
        lowered = (query or "").lower()
        return any(trigger in lowered for trigger in self.triggers)

    async def get_actions(self, query: str, user_id: str, options: ContextOptions) -> list[Action]:
        if not self.matches(query):
            return []
        return list(self.actions)


def knowledge_base_provider() -> KeywordActionProvider:
    return KeywordActionProvider(
        name="knowledge_base",
        triggers=("search for", "find"),
        actions=(
            Action(
                kind="button",
                label="Search in Knowledge Base",
                target="/knowledge-base",
                icon="search",
                emphasis="primary",
            ),
            Action(
                kind="button",
                label="View Related Documents",
                target="/documents",
                icon="document",
                emphasis="secondary",
            ),
        ),
    )
