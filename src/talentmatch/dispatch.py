"""Enum-keyed dispatch tables checked for exhaustiveness on construction."""

from __future__ import annotations

import enum
from typing import Generic, Mapping, TypeVar

K = TypeVar("K", bound=enum.Enum)
V = TypeVar("V")


class DispatchTable(Generic[K, V]):
    """Map every member of an enum to a handler.

    Construction fails when a member has no handler or a key is foreign to
    the enum, so a missing case surfaces at startup instead of at request time.
    """

    def __init__(self, actions: type[K], handlers: Mapping[K, V]) -> None:
        missing = [member.value for member in actions if member not in handlers]
        if missing:
            raise TypeError(f"{actions.__name__} has no handler for: {', '.join(missing)}")
        foreign = [key for key in handlers if not isinstance(key, actions)]
        if foreign:
            raise TypeError(f"Handlers registered for unknown {actions.__name__} keys: {foreign}")
        self._actions = actions
        self._handlers = dict(handlers)

    def __getitem__(self, action: K) -> V:
        return self._handlers[action]

    def resolve(self, value: str) -> K:
        """Parse ``value`` into an enum member; raises ``ValueError`` if unknown."""
        return self._actions(value)

    def actions(self) -> list[K]:
        return list(self._actions)
