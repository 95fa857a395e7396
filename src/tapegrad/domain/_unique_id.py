"""
Process-wide tensor identities.

Every tensor carries a `UniqueId`. Identities are generated from a single
monotonically increasing counter, so two tensors created anywhere in the
process never share an id unless one was explicitly derived from the other
with an identity-preserving call (`clone`, `retaped`, `trace`).

The gradient map is keyed by these ids; the storage buffer plays no part in
identity.
"""

from __future__ import annotations

import itertools
import threading


class UniqueId:
    """
    Opaque, totally ordered tensor identity.

    Notes
    -----
    Ordering follows creation order, which makes identities convenient in
    test assertions and log output. Code should not rely on the numeric value.
    """

    __slots__ = ("_value",)

    def __init__(self, value: int) -> None:
        self._value = value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UniqueId):
            return NotImplemented
        return self._value == other._value

    def __lt__(self, other: "UniqueId") -> bool:
        return self._value < other._value

    def __hash__(self) -> int:
        return hash(self._value)

    def __repr__(self) -> str:
        return f"UniqueId({self._value})"

    def __str__(self) -> str:
        return f"#{self._value}"


_counter = itertools.count()
_lock = threading.Lock()


def unique_id() -> UniqueId:
    """Return a fresh identity. Safe to call from several threads."""
    with _lock:
        return UniqueId(next(_counter))
