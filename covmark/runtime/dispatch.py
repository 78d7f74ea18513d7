"""Hit dispatcher."""

from covmark.runtime.gate import GATE
from covmark.runtime.registry import REGISTRY, CheckRecord
from covmark.runtime.shared import SHARED


def hit(name: str) -> None:
    """
    Fire the coverage mark ``name``.

    Every live check for ``name`` on the calling thread is incremented, so
    nested checks on the same mark each observe the hit. Live shared checks
    observe it from any thread. With no live checks this is a single branch.

    Example:
        >>> def safe_divide(dividend, divisor):
        ...     if divisor == 0:
        ...         hit("save_divide_zero")
        ...         return 0
        ...     return dividend // divisor
    """
    if not GATE.is_active():
        return
    _hit_slow(name)


def _hit_slow(name: str) -> None:
    REGISTRY.for_each_matching(name, CheckRecord.hit)
    if SHARED.is_active():
        SHARED.increment(name)
