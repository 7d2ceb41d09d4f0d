"""
Provider registry:
- ordered, append-only collection of ActionProvider instances
- filled once at startup, read-only while requests fan out
- snapshot() hands fan-out an immutable view, so reads never coordinate with registration
"""
# @file purpose: Provide the ordered provider registry.

from __future__ import annotations

from typing import TYPE_CHECKING, Iterator, Tuple

from .errors import ProviderRegistrationError

if TYPE_CHECKING:
    from ..providers.base import ActionProvider


def provider_name(provider: object) -> str:
    """Stable display name: explicit `name` attribute, else the class name."""
    name = getattr(provider, "name", None)
    if isinstance(name, str) and name:
        return name
    return type(provider).__name__


class ProviderRegistry:
    def __init__(self) -> None:
        self._providers: Tuple["ActionProvider", ...] = ()

    def register(self, provider: "ActionProvider") -> "ActionProvider":
        """Append a provider; names must be unique. Returns the provider for chaining."""
        if not callable(getattr(provider, "get_actions", None)):
            raise ProviderRegistrationError(
                f"{type(provider).__name__} does not implement get_actions()"
            )
        name = provider_name(provider)
        if name in self.names():
            raise ProviderRegistrationError(f"Provider already registered: {name}")
        # rebinding a new tuple keeps earlier snapshots untouched
        self._providers = self._providers + (provider,)
        return provider

    def get(self, name: str) -> "ActionProvider":
        for provider in self._providers:
            if provider_name(provider) == name:
                return provider
        raise KeyError(f"Provider not registered: {name}")

    def names(self) -> list[str]:
        return [provider_name(p) for p in self._providers]

    def snapshot(self) -> Tuple["ActionProvider", ...]:
        return self._providers

    def __len__(self) -> int:
        return len(self._providers)

    def __iter__(self) -> Iterator["ActionProvider"]:
        return iter(self._providers)
