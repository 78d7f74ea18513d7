"""
Tests for hit dispatch.
"""

from unittest.mock import patch

from covmark import check, check_count, hit
from covmark.runtime import GATE, REGISTRY
from covmark.runtime.registry import CheckRecord


class TestHit:
    """Test hit()."""

    def test_no_live_checks_is_noop(self):
        """Test hitting with nothing watching does nothing."""
        assert GATE.is_active() is False
        hit("unwatched")
        assert REGISTRY.depth() == 0

    def test_fast_path_skips_registry(self):
        """Test the registry is not walked while the gate is closed."""
        with patch.object(REGISTRY, "for_each_matching") as walk:
            hit("unwatched")
        walk.assert_not_called()

    def test_unmatched_name_is_silent(self):
        """Test a hit on a mark nobody checks never raises."""
        with check("m") as guard:
            hit("m")
            hit("something_else")
        assert guard.hits == 1

    def test_increments_every_matching_record(self):
        """Test all live checks for the mark are incremented."""
        with check_count("m", 1) as outer:
            with check_count("m", 1) as inner:
                hit("m")
        assert outer.hits == 1
        assert inner.hits == 1

    def test_stale_gate_is_harmless(self):
        """Test an open gate with an empty registry counts nothing."""
        GATE.increment()
        try:
            hit("m")
            record = CheckRecord(mark="m")
            assert record.hits == 0
            assert REGISTRY.depth() == 0
        finally:
            GATE.decrement()

    def test_repeated_hits_idempotently_safe(self):
        """Test many hits in a row are each counted."""
        with check_count("m", 1000) as guard:
            for _ in range(1000):
                hit("m")
        assert guard.hits == 1000
