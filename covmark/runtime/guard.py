"""
Check guard - a scope that asserts a coverage mark was hit.

A guard registers a :class:`CheckRecord` when it is created and verifies the
record's hit count when its ``with`` block exits, on every exit path. If the
block is already propagating an unrelated exception the count is not asserted,
so the original failure is the one reported.
"""

import functools
import logging
import threading
from collections.abc import Callable
from enum import Enum
from types import TracebackType
from typing import Any, TypeVar

from covmark.config import get_config
from covmark.errors import (
    CheckFailed,
    MarkHitWrongCount,
    MarkNeverHit,
    RegistryOrderViolation,
)
from covmark.runtime.gate import GATE
from covmark.runtime.registry import REGISTRY, CheckRecord
from covmark.runtime.shared import SHARED

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def _validate(name: str, expected: int | None) -> None:
    if not isinstance(name, str):
        raise TypeError(f"Mark name must be a str, got {type(name).__name__}")
    if expected is not None and (
        isinstance(expected, bool) or not isinstance(expected, int) or expected < 0
    ):
        raise ValueError(f"Expected hit count must be a non-negative int, got {expected!r}")


class GuardState(str, Enum):
    """Lifecycle states of a check guard."""

    ENTERED = "entered"
    PASSED = "passed"
    FAILED = "failed"
    SUPPRESSED = "suppressed"


class CheckGuard:
    """
    Live check on a single mark.

    Only :func:`enter_check` creates guards. Use the guard as a context
    manager so it is closed exactly when its block ends:

        >>> with enter_check("save_divide_zero"):
        ...     safe_divide(92, 0)

    ``expected=None`` passes if the mark was hit at least once; an integer
    passes only on exactly that many hits.
    """

    def __init__(
        self,
        mark: str,
        expected: int | None,
        shared: bool,
        enabled: bool = True,
    ) -> None:
        _validate(mark, expected)
        self.mark = mark
        self.expected = expected
        self.shared = shared
        self.enabled = enabled
        self.state = GuardState.ENTERED
        self._record: CheckRecord | None = None
        self._baseline = 0
        self._final_hits: int | None = None

        if not enabled:
            return

        record = CheckRecord(mark=mark, expected=expected, shared=shared)
        if shared:
            SHARED.activate()
            self._baseline = SHARED.read(mark)
        REGISTRY.push(record)
        GATE.increment()
        self._record = record
        logger.debug("Entered check for mark %s (expected=%s, shared=%s)", mark, expected, shared)

    @property
    def hits(self) -> int:
        """Hits observed so far, or the final count once the guard has exited."""
        if self._final_hits is not None:
            return self._final_hits
        return self._observed()

    @property
    def exited(self) -> bool:
        return self.state is not GuardState.ENTERED

    def _observed(self) -> int:
        if self._record is None:
            return 0
        if self.shared:
            return SHARED.delta(self._baseline, SHARED.read(self.mark))
        return self._record.hits

    def _verdict(self, hits: int) -> CheckFailed | None:
        if self.expected is None:
            return None if hits > 0 else MarkNeverHit(self.mark)
        if hits == self.expected:
            return None
        return MarkHitWrongCount(self.mark, hits, self.expected)

    def close(self, exc: BaseException | None = None) -> None:
        """
        Deregister the check and assert its hit count.

        Args:
            exc: Exception propagating out of the checked block, if any. When
                set, the hit count is not asserted.

        Raises:
            RegistryOrderViolation: If the guard already exited, is closed on a
                thread that did not enter it, or is not the innermost check on
                this thread. Raised even when ``exc`` is set. A close from the
                wrong thread leaves the guard live for its owner.
            MarkNeverHit: If ``expected`` is None and the mark was never hit.
            MarkHitWrongCount: If ``expected`` is set and the count differs.
        """
        if self.exited:
            logger.error("Check for mark %s exited twice", self.mark)
            raise RegistryOrderViolation(
                self.mark, None, f"check for mark {self.mark} has already exited"
            )

        if self._record is None:
            self.state = GuardState.PASSED
            return

        record = self._record
        if record.thread_id != threading.get_ident():
            logger.error("Check for mark %s closed on a thread that did not enter it", self.mark)
            raise RegistryOrderViolation(
                self.mark,
                None,
                f"check for mark {self.mark} must exit on the thread that entered it",
            )
        if record.released:
            self.state = GuardState.FAILED
            logger.error("Check for mark %s was released before it exited", self.mark)
            raise RegistryOrderViolation(
                self.mark, None, f"check for mark {self.mark} was released before it exited"
            )

        GATE.decrement()
        self._final_hits = self._observed()
        if self.shared:
            SHARED.deactivate()

        try:
            REGISTRY.pop(record)
        except RegistryOrderViolation as violation:
            REGISTRY.discard(record)
            self.state = GuardState.FAILED
            logger.error("%s", violation)
            raise

        hits = self._final_hits
        failure = self._verdict(hits)

        if exc is not None:
            self.state = GuardState.SUPPRESSED
            if failure is not None:
                logger.warning(
                    "Suppressed check result while %s propagates: %s",
                    type(exc).__name__,
                    failure,
                )
            return

        if failure is not None:
            self.state = GuardState.FAILED
            logger.debug("Check for mark %s failed: %s", self.mark, failure)
            raise failure

        self.state = GuardState.PASSED
        logger.debug("Check for mark %s passed with %d hits", self.mark, hits)

    def __enter__(self) -> "CheckGuard":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        self.close(exc)
        return False

    def __repr__(self) -> str:
        return (
            f"CheckGuard(mark={self.mark!r}, expected={self.expected}, "
            f"hits={self.hits}, state={self.state.value})"
        )


def enter_check(
    name: str,
    expected: int | None = None,
    *,
    shared: bool | None = None,
) -> CheckGuard:
    """
    Begin a check scope for mark ``name``.

    Args:
        name: Mark to watch
        expected: Exact number of hits required, or None for "at least one"
        shared: Count hits from every thread through process-wide counters
            instead of the calling thread only. Defaults to the configured
            ``shared_by_default``.

    Returns:
        A live CheckGuard; close it by leaving its ``with`` block
    """
    _validate(name, expected)
    config = get_config()
    if shared is None:
        shared = config.shared_by_default
    return CheckGuard(name, expected, shared, enabled=config.enabled)


def check(name: str, *, shared: bool | None = None) -> CheckGuard:
    """Check that mark ``name`` is hit at least once before the scope ends."""
    return enter_check(name, None, shared=shared)


def check_count(name: str, count: int, *, shared: bool | None = None) -> CheckGuard:
    """Check that mark ``name`` is hit exactly ``count`` times before the scope ends."""
    return enter_check(name, count, shared=shared)


def checked(
    name: str, expected: int | None = None, *, shared: bool | None = None
) -> Callable[[F], F]:
    """
    Decorator running the whole function body inside a check scope.

    Example:
        >>> @checked("covered_dropper_drops", 2)
        ... def test_drop_count():
        ...     ...
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with enter_check(name, expected, shared=shared):
                return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator
