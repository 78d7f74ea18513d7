"""
covmark runtime.

Correlates mark hits with the check scopes live on the calling thread.
"""

from covmark.runtime.dispatch import hit
from covmark.runtime.gate import GATE, EnablementGate
from covmark.runtime.guard import (
    CheckGuard,
    GuardState,
    check,
    check_count,
    checked,
    enter_check,
)
from covmark.runtime.registry import REGISTRY, ActivationRegistry, CheckRecord
from covmark.runtime.shared import COUNTER_WIDTH, SHARED, SharedCounters

__all__ = [
    # Dispatch
    "hit",
    # Guards
    "CheckGuard",
    "GuardState",
    "check",
    "check_count",
    "checked",
    "enter_check",
    # Process-wide state
    "ActivationRegistry",
    "CheckRecord",
    "EnablementGate",
    "SharedCounters",
    "COUNTER_WIDTH",
    "GATE",
    "REGISTRY",
    "SHARED",
]
