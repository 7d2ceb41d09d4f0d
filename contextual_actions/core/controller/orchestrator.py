# contextual_actions/core/controller/orchestrator.py
"""
Concurrent fan-out of one query to every registered provider.

Responsibilities:
- Dispatch get_actions() to all providers at once (not sequentially)
- Bound each invocation with a per-provider timeout
- Settle all invocations; one failure never short-circuits the others
- Validate each output at the aggregation boundary (fail closed)
- Concatenate successes by registration position, never by completion order
- Never raise: an internal failure yields an empty aggregate
"""

from __future__ import annotations

import asyncio
import inspect
import time
from typing import Any, Iterable

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from ..action import Action, ContextOptions
from ..errors import MalformedProviderOutputError, ProviderError, ProviderTimeoutError
from ..logging_utils import log_event
from ..registry import ProviderRegistry, provider_name
from ..result import AggregatedActions, ProviderResult
from ...providers.base import ActionProvider

_ACTION_LIST = TypeAdapter(list[Action])


def coerce_actions(provider: str, output: Any) -> list[Action]:
    """Accept a list of Action (or mappings that validate into Action); anything else is malformed."""
    if not isinstance(output, (list, tuple)):
        raise MalformedProviderOutputError(
            provider,
            "provider output is not a list",
            details={"type": type(output).__name__},
        )
    try:
        return _ACTION_LIST.validate_python(list(output))
    except ValidationError as ve:
        raise MalformedProviderOutputError(
            provider,
            "provider output contains invalid actions",
            details={"errors": ve.error_count()},
            cause=ve,
        ) from ve


class Orchestrator:
    def __init__(
        self,
        registry: ProviderRegistry | None = None,
        *,
        provider_timeout: float | None = 5.0,
    ) -> None:
        self.registry = registry if registry is not None else ProviderRegistry()
        self.provider_timeout = provider_timeout if provider_timeout else None

    def register(self, provider: ActionProvider) -> ActionProvider:
        provider = self.registry.register(provider)
        logger.info(log_event("actions.provider.registered", provider=provider_name(provider)))
        return provider

    def register_all(self, providers: Iterable[ActionProvider]) -> None:
        for provider in providers:
            self.register(provider)

    async def generate_actions(
        self,
        query: str,
        user_id: str,
        options: ContextOptions | dict[str, Any] | None = None,
    ) -> AggregatedActions:
        try:
            if not isinstance(options, ContextOptions):
                options = ContextOptions.model_validate(options or {})
            providers = self.registry.snapshot()
            if not providers:
                return AggregatedActions.empty()

            started = time.perf_counter()
            # gather keeps argument order, so results line up with registration order
            results: list[ProviderResult] = list(
                await asyncio.gather(
                    *(self._invoke(p, query, user_id, options) for p in providers)
                )
            )
            aggregate = AggregatedActions.from_results(results)
            logger.debug(
                log_event(
                    "actions.generate.settled",
                    providers=len(results),
                    failed=sum(1 for r in results if not r.ok),
                    actions=aggregate.count,
                    elapsed=f"{time.perf_counter() - started:.3f}",
                )
            )
            return aggregate
        except asyncio.CancelledError:
            raise
        except Exception as e:  # noqa: BLE001
            logger.opt(exception=e).error(log_event("actions.generate.failed", error=repr(e)))
            return AggregatedActions.empty()

    async def _invoke(
        self,
        provider: ActionProvider,
        query: str,
        user_id: str,
        options: ContextOptions,
    ) -> ProviderResult:
        name = provider_name(provider)
        started = time.perf_counter()
        try:
            pending = self._call(provider, query, user_id, options)
            if self.provider_timeout is None:
                output = await pending
            else:
                try:
                    output = await asyncio.wait_for(pending, timeout=self.provider_timeout)
                except asyncio.TimeoutError as e:
                    raise ProviderTimeoutError(name, self.provider_timeout) from e
            actions = coerce_actions(name, output)
        except asyncio.CancelledError:
            raise
        except ProviderTimeoutError as e:
            return self._failed(name, e, "timeout", started)
        except MalformedProviderOutputError as e:
            return self._failed(name, e, "malformed", started)
        except Exception as e:  # noqa: BLE001
            return self._failed(name, e, "error", started)

        return ProviderResult.success(name, actions, elapsed=time.perf_counter() - started)

    @staticmethod
    async def _call(
        provider: ActionProvider,
        query: str,
        user_id: str,
        options: ContextOptions,
    ) -> Any:
        """
        Run one provider off the critical path. Plain functions go to a worker
        thread so a blocking provider cannot stall the event loop; the thread
        itself is not interruptible and finishes in the background on timeout.
        """
        if inspect.iscoroutinefunction(provider.get_actions):
            return await provider.get_actions(query, user_id, options)
        output = await asyncio.to_thread(provider.get_actions, query, user_id, options)
        if inspect.isawaitable(output):
            output = await output
        return output

    @staticmethod
    def _failed(name: str, error: BaseException, failure: str, started: float) -> ProviderResult:
        elapsed = time.perf_counter() - started
        reason = str(error) if isinstance(error, ProviderError) else f"{type(error).__name__}: {error}"
        logger.warning(
            log_event(
                "actions.provider.failed",
                provider=name,
                failure=failure,
                error=reason,
                elapsed=f"{elapsed:.3f}",
            )
        )
        return ProviderResult.failed(name, reason, failure=failure, elapsed=elapsed)  # type: ignore[arg-type]
