"""
Client-side reconciliation helpers for the contextual actions event.

A consumer keeps a list of message dicts (camelCase, as sent to the browser);
merge_actions_event() returns a new list where the message with the event's
messageId carries `contextualActions`. Unknown ids leave the list unchanged.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from .core.action import Action


def is_valid_action(candidate: Any) -> bool:
    if isinstance(candidate, Action):
        return True
    if not isinstance(candidate, Mapping):
        return False
    try:
        Action.model_validate(dict(candidate))
    except ValidationError:
        return False
    return True


def filter_valid_actions(candidates: Any) -> list[dict[str, Any]]:
    """Drop anything that is not a well-formed action; non-lists yield []."""
    if not isinstance(candidates, (list, tuple)):
        return []
    valid: list[dict[str, Any]] = []
    for item in candidates:
        if isinstance(item, Action):
            valid.append(item.to_wire())
        elif is_valid_action(item):
            valid.append(dict(item))
    return valid


def merge_actions_event(
    messages: Iterable[Mapping[str, Any]] | None,
    event: Mapping[str, Any],
) -> list[dict[str, Any]] | None:
    if messages is None:
        return None
    message_id = event.get("messageId")
    current = [dict(m) for m in messages]
    if not message_id:
        return current

    actions = filter_valid_actions(event.get("actions"))
    return [
        {**m, "contextualActions": actions} if m.get("messageId") == message_id else m
        for m in current
    ]
