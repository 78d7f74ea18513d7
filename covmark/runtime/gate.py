"""
Enablement gate - process-wide count of live checks.

``hit`` reads the gate on every call, including in code paths no test is
watching, so ``is_active`` is a single attribute read. Writers serialize on a
lock; readers may briefly see a stale value, which only costs a wasted walk of
the per-thread registry.
"""

import threading


class EnablementGate:
    """Count of checks currently live anywhere in the process."""

    def __init__(self) -> None:
        self._level = 0
        self._lock = threading.Lock()

    @property
    def level(self) -> int:
        """Number of live checks."""
        return self._level

    def is_active(self) -> bool:
        """Whether any check is live."""
        return self._level > 0

    def increment(self) -> None:
        with self._lock:
            self._level += 1

    def decrement(self) -> None:
        with self._lock:
            if self._level == 0:
                raise RuntimeError("Enablement gate decremented below zero")
            self._level -= 1

    def __repr__(self) -> str:
        return f"EnablementGate(level={self._level})"


GATE = EnablementGate()
