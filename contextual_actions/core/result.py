"""
Structured per-provider outcome, reported upward to the orchestrator and CLI.
"""
# @file purpose: Define ProviderResult and AggregatedActions.

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .action import Action

FailureKind = Literal["error", "timeout", "malformed"]


class ProviderResult(BaseModel):
    """
    Outcome of one provider invocation:
    - ok: whether the provider produced a well-formed action list
    - actions: the provider's actions in its own order (empty on failure)
    - failure / error: category and reason when ok is False
    - elapsed: wall time of the invocation in seconds
    """

    model_config = ConfigDict(frozen=True)

    provider: str
    ok: bool = True
    actions: tuple[Action, ...] = ()
    failure: Optional[FailureKind] = None
    error: Optional[str] = None
    elapsed: float = 0.0

    @classmethod
    def success(cls, provider: str, actions: list[Action], *, elapsed: float = 0.0) -> "ProviderResult":
        return cls(provider=provider, ok=True, actions=tuple(actions), elapsed=elapsed)

    @classmethod
    def failed(
        cls,
        provider: str,
        error: str,
        *,
        failure: FailureKind = "error",
        elapsed: float = 0.0,
    ) -> "ProviderResult":
        return cls(provider=provider, ok=False, failure=failure, error=error, elapsed=elapsed)


class AggregatedActions(BaseModel):
    """Actions for one turn, ordered by provider registration then provider order."""

    model_config = ConfigDict(frozen=True)

    actions: tuple[Action, ...] = ()
    results: tuple[ProviderResult, ...] = Field(default=(), repr=False)

    @property
    def count(self) -> int:
        return len(self.actions)

    @classmethod
    def empty(cls) -> "AggregatedActions":
        return cls()

    @classmethod
    def from_results(cls, results: list[ProviderResult]) -> "AggregatedActions":
        actions: list[Action] = []
        for result in results:
            if result.ok:
                actions.extend(result.actions)
        return cls(actions=tuple(actions), results=tuple(results))
