"""
Activation registry - per-thread stack of live check records.

Each thread owns an independent stack, so no locking is needed and a hit on
one thread is never seen by a check entered on another.
"""

import threading
from collections.abc import Callable
from dataclasses import dataclass, field

from covmark.errors import RegistryOrderViolation


@dataclass(eq=False)
class CheckRecord:
    """Hit counter for one live check.

    Compared by identity: two checks on the same mark are distinct records.
    """

    mark: str
    expected: int | None = None
    hits: int = 0
    shared: bool = False
    thread_id: int = field(default_factory=threading.get_ident)
    # Set once the record's gate and shared slots were given back outside its guard.
    released: bool = False

    def hit(self, name: str) -> None:
        """Count a hit of ``name`` if it is this record's mark."""
        # Shared records take their count from the process-wide counters.
        if name == self.mark and not self.shared:
            self.hits += 1


class ActivationRegistry:
    """Thread-confined LIFO stacks of :class:`CheckRecord`.

    Example:
        >>> registry = ActivationRegistry()
        >>> record = CheckRecord(mark="short_date")
        >>> registry.push(record)
        >>> registry.for_each_matching("short_date", CheckRecord.hit)
        >>> registry.pop(record).hits
        1
    """

    def __init__(self) -> None:
        self._local = threading.local()

    def _stack(self) -> list[CheckRecord]:
        stack: list[CheckRecord] | None = getattr(self._local, "stack", None)
        if stack is None:
            stack = []
            self._local.stack = stack
        return stack

    def push(self, record: CheckRecord) -> None:
        """Make ``record`` the innermost live check on the calling thread."""
        self._stack().append(record)

    def pop(self, owner: CheckRecord) -> CheckRecord:
        """Remove and return the innermost record, which must be ``owner``.

        Raises:
            RegistryOrderViolation: If the stack is empty or its top is another
                check's record. The foreign record is left in place.
        """
        stack = self._stack()
        if not stack:
            raise RegistryOrderViolation(owner.mark, None)
        top = stack[-1]
        if top is not owner:
            raise RegistryOrderViolation(owner.mark, top.mark)
        return stack.pop()

    def discard(self, record: CheckRecord) -> bool:
        """Remove ``record`` wherever it sits on the calling thread's stack.

        Used after an out-of-order exit so the stale record stops counting.
        Returns whether the record was found.
        """
        stack = self._stack()
        for index in range(len(stack) - 1, -1, -1):
            if stack[index] is record:
                del stack[index]
                return True
        return False

    def clear(self) -> list[CheckRecord]:
        """Empty the calling thread's stack and return what it held."""
        stack = self._stack()
        leaked = list(stack)
        stack.clear()
        return leaked

    def for_each_matching(self, name: str, fn: Callable[[CheckRecord, str], None]) -> None:
        """Call ``fn(record, name)`` for every live record on this thread whose mark is ``name``."""
        stack: list[CheckRecord] | None = getattr(self._local, "stack", None)
        if not stack:
            return
        for record in stack:
            if record.mark == name:
                fn(record, name)

    def depth(self) -> int:
        """Number of live checks on the calling thread."""
        return len(self._stack())

    def snapshot(self) -> tuple[CheckRecord, ...]:
        """Copy of the calling thread's stack, outermost first."""
        return tuple(self._stack())

    def __repr__(self) -> str:
        return f"ActivationRegistry(depth={self.depth()})"


REGISTRY = ActivationRegistry()
