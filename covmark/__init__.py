"""
covmark - coverage marks for tests.

Production code fires a named mark when a specific branch runs; a test
checks, for the duration of a ``with`` block, that the mark fired.

Usage:
    from covmark import check, hit

    def parse_date(s):
        if len(s) != 10:
            hit("short_date")
            return None
        ...

    def test_short_date():
        with check("short_date"):
            assert parse_date("92") is None
"""

import logging

from covmark.config import ConfigLoader, CovMarkConfig, configure, get_config, reset_config
from covmark.errors import (
    CheckFailed,
    CovMarkError,
    MarkHitWrongCount,
    MarkNeverHit,
    RegistryOrderViolation,
)
from covmark.runtime import (
    CheckGuard,
    GuardState,
    check,
    check_count,
    checked,
    enter_check,
    hit,
)

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    # Marks and checks
    "hit",
    "enter_check",
    "check",
    "check_count",
    "checked",
    "CheckGuard",
    "GuardState",
    # Errors
    "CovMarkError",
    "CheckFailed",
    "MarkNeverHit",
    "MarkHitWrongCount",
    "RegistryOrderViolation",
    # Configuration
    "ConfigLoader",
    "CovMarkConfig",
    "configure",
    "get_config",
    "reset_config",
]
