# File: src/mstair/litdump/dumper/identity_tracker.py

from __future__ import annotations

from typing import Any


__all__ = ["IdentityTracker"]


class IdentityTracker:
    """
    Identities already expanded during one dump.

    Python objects are keyed by `id()`, ctypes pointer targets by buffer address.
    Every recorded object is kept alive until the tracker is dropped, so an
    `id()` cannot be reused by a temporary created later in the same dump.
    Not thread-safe; each dump owns its tracker.
    """

    __slots__ = ("_seen",)

    def __init__(self) -> None:
        self._seen: dict[int, Any] = {}

    def visit(self, identity: int, obj: Any) -> bool:
        """Record `identity` and return True on first sight, False on every later call."""
        if identity in self._seen:
            return False
        self._seen[identity] = obj
        return True

    def __contains__(self, identity: object) -> bool:
        return identity in self._seen

    def __len__(self) -> int:
        return len(self._seen)

    def clear(self) -> None:
        self._seen.clear()


# End of file: src/mstair/litdump/dumper/identity_tracker.py
