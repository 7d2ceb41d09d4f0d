"""
Action provider protocol (capability interface).

A provider inspects one query and proposes zero or more Actions. Adding a
provider means implementing this protocol and registering an instance on the
orchestrator; the orchestrator itself never changes.

Notes:
- Invocations are independent and may run concurrently, including several
  invocations of the same provider. Keep no per-call state on `self`.
- No match is a normal, empty result. Raise (ideally ProviderError) to fail.
- Outbound I/O is fine; mutating registry or orchestrator state is not.
"""

from __future__ import annotations

from typing import Awaitable, Protocol, Union, runtime_checkable

from ..core.action import Action, ContextOptions

ProviderOutput = Union[list[Action], Awaitable[list[Action]]]


@runtime_checkable
class ActionProvider(Protocol):
    name: str

    def get_actions(self, query: str, user_id: str, options: ContextOptions) -> ProviderOutput: ...
