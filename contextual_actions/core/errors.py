"""
Project-level exception types with a single catch boundary.
- ContextualActionsError: base class for all custom errors
- ProviderError: a provider failed (upstream unavailable, bad input, bug)
- ProviderTimeoutError: a provider exceeded its time budget
- MalformedProviderOutputError: a provider returned something other than a list of actions
- ProviderRegistrationError: invalid or duplicate registration
- CatalogError: the movie catalog upstream call failed
- DeliveryError: the response stream is no longer writable
"""
# @file purpose: Define error taxonomy for contextual-actions.

from typing import Any


class ContextualActionsError(Exception):
    """Base class for all custom errors in contextual-actions."""


class ProviderError(ContextualActionsError):
    """
    Raised when an action provider fails.
    Carries the provider name and root cause so the orchestrator logs
    one consistent line per failure.
    """

    def __init__(
        self,
        provider: str,
        message: str,
        *,
        details: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.provider: str = provider
        self.details: dict[str, Any] = details or {}
        self.cause: BaseException | None = cause

    def __str__(self) -> str:
        parts = [f"[{self.provider}] {super().__str__()}"]
        if self.details:
            kv = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            parts.append(f"details={{ {kv} }}")
        if self.cause is not None:
            parts.append(f"cause={type(self.cause).__name__}: {self.cause}")
        return " | ".join(parts)


class ProviderTimeoutError(ProviderError):
    """Raised when a provider invocation exceeds the per-provider timeout."""

    def __init__(self, provider: str, timeout: float) -> None:
        super().__init__(provider, f"timed out after {timeout:g}s", details={"timeout": timeout})
        self.timeout = timeout


class MalformedProviderOutputError(ProviderError):
    """Raised when a provider returns something other than a well-formed action list."""


class ProviderRegistrationError(ContextualActionsError):
    """Raised on invalid or duplicate provider registration."""


class CatalogError(ContextualActionsError):
    """Raised when the movie catalog upstream request fails."""

    def __init__(self, message: str, *, url: str | None = None, status: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status = status

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.url:
            parts.append(f"url={self.url}")
        if self.status is not None:
            parts.append(f"status={self.status}")
        return " | ".join(parts)


class DeliveryError(ContextualActionsError):
    """Raised when an event cannot be written because the stream is closed."""
