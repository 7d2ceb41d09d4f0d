import pytest
from pydantic import ValidationError

from contextual_actions.core.action import Action, ContextOptions


def test_link_requires_url() -> None:
    with pytest.raises(ValidationError):
        Action(kind="link", label="Docs", target="not a url")


def test_button_accepts_root_relative_path() -> None:
    a = Action(kind="button", label="Docs", target="/documents")
    assert a.target == "/documents"


def test_custom_action_takes_opaque_identifier() -> None:
    a = Action(kind="custom-action", label="Summarize", target="summarize-thread")
    assert a.to_wire() == {"kind": "custom-action", "label": "Summarize", "target": "summarize-thread"}


@pytest.mark.parametrize("label", ["", "   "])
def test_label_must_be_non_empty(label: str) -> None:
    with pytest.raises(ValidationError):
        Action(kind="custom-action", label=label, target="x")


def test_label_and_target_are_stripped() -> None:
    action = Action(kind="custom-action", label="  Go  ", target=" ticket.create ")

    assert action.label == "Go"
    assert action.target == "ticket.create"


def test_custom_action_rejects_blank_identifier() -> None:
    with pytest.raises(ValidationError):
        Action(kind="custom-action", label="Go", target="  ")


def test_unknown_presentation_hint_rejected() -> None:
    with pytest.raises(ValidationError):
        Action(kind="link", label="x", target="https://example.com", emphasis="loud")


def test_actions_are_frozen_with_structural_equality() -> None:
    a = Action(kind="link", label="x", target="https://example.com", layout="pill")
    b = Action(kind="link", label="x", target="https://example.com", layout="pill")
    assert a == b
    with pytest.raises(ValidationError):
        a.label = "y"  # type: ignore[misc]


def test_context_options_accepts_wire_names_and_extras() -> None:
    opts = ContextOptions.model_validate(
        {"conversationId": "c1", "modelOptions": {"model": "m"}, "endpoint": "openai"}
    )
    assert opts.conversation_id == "c1"
    assert opts.model_options == {"model": "m"}
    assert opts.model_extra == {"endpoint": "openai"}
