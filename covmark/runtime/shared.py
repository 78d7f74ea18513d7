"""
Process-wide mark counters for checks that must see hits from any thread.

A shared check records the counter value when it is entered and compares the
difference on exit. Counters are fixed-width and wrap, so the difference is
taken modulo the width: hits made by unrelated checks between entry and exit
are still counted, but a wrapped counter never yields a negative delta.
"""

import threading

COUNTER_WIDTH = 64
_MODULUS = 1 << COUNTER_WIDTH


class SharedCounters:
    """Lock-protected table of per-mark hit counters."""

    def __init__(self) -> None:
        self._counters: dict[str, int] = {}
        self._active = 0
        self._lock = threading.Lock()

    def is_active(self) -> bool:
        """Whether any shared check is live."""
        return self._active > 0

    def activate(self) -> None:
        with self._lock:
            self._active += 1

    def deactivate(self) -> None:
        with self._lock:
            if self._active == 0:
                raise RuntimeError("Shared counters deactivated more often than activated")
            self._active -= 1

    def increment(self, name: str) -> None:
        """Count one hit of ``name``."""
        with self._lock:
            self._counters[name] = (self._counters.get(name, 0) + 1) % _MODULUS

    def read(self, name: str) -> int:
        """Current counter value for ``name``; 0 for marks never hit."""
        with self._lock:
            return self._counters.get(name, 0)

    def seed(self, name: str, value: int) -> None:
        """Set the counter for ``name``, reduced to the counter width."""
        with self._lock:
            self._counters[name] = value % _MODULUS

    @staticmethod
    def delta(entry: int, exit_: int) -> int:
        """Hits between two readings of the same counter, allowing one wrap."""
        return (exit_ - entry) % _MODULUS

    def __repr__(self) -> str:
        return f"SharedCounters(marks={len(self._counters)}, active={self._active})"


SHARED = SharedCounters()
