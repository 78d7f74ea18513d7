"""
Tests for the pytest plugin.
"""

import pytest

INSTRUMENTED = '''
from covmark import hit


def safe_divide(dividend, divisor):
    if divisor == 0:
        hit("save_divide_zero")
        return 0
    return dividend // divisor
'''


@pytest.fixture
def project(pytester):
    """Create a temporary project with instrumented code."""
    pytester.makepyfile(instrumented=INSTRUMENTED)
    return pytester


class TestMarker:
    """Test @pytest.mark.covmark."""

    def test_marker_passes_when_hit(self, project):
        """Test a marked test passes when its mark fires."""
        project.makepyfile(
            test_marker="""
            import pytest
            from instrumented import safe_divide

            @pytest.mark.covmark("save_divide_zero")
            def test_divide_by_zero():
                assert safe_divide(92, 0) == 0
            """
        )
        result = project.runpytest()
        result.assert_outcomes(passed=1)

    def test_marker_fails_when_missed(self, project):
        """Test a marked test fails when its mark never fires."""
        project.makepyfile(
            test_marker="""
            import pytest
            from instrumented import safe_divide

            @pytest.mark.covmark("save_divide_zero")
            def test_divide():
                assert safe_divide(4, 2) == 2
            """
        )
        result = project.runpytest()
        result.assert_outcomes(failed=1)
        result.stdout.fnmatch_lines(["*mark save_divide_zero was not hit*"])

    def test_marker_count(self, project):
        """Test count= requires an exact number of hits."""
        project.makepyfile(
            test_marker="""
            import pytest
            from instrumented import safe_divide

            @pytest.mark.covmark("save_divide_zero", count=2)
            def test_twice():
                safe_divide(1, 0)
                safe_divide(2, 0)

            @pytest.mark.covmark("save_divide_zero", 2)
            def test_once():
                safe_divide(1, 0)
            """
        )
        result = project.runpytest()
        result.assert_outcomes(passed=1, failed=1)
        result.stdout.fnmatch_lines(["*hit 1 times, expected 2*"])

    def test_unrelated_failure_reported(self, project):
        """Test the test's own failure is reported instead of the check."""
        project.makepyfile(
            test_marker="""
            import pytest

            @pytest.mark.covmark("save_divide_zero")
            def test_broken():
                assert 1 == 2, "original failure"
            """
        )
        result = project.runpytest()
        result.assert_outcomes(failed=1)
        result.stdout.fnmatch_lines(["*original failure*"])
        result.stdout.no_fnmatch_line("*was not hit*")

    def test_marker_requires_name(self, project):
        """Test a marker without a mark name is a usage error."""
        project.makepyfile(
            test_marker="""
            import pytest

            @pytest.mark.covmark()
            def test_nameless():
                pass
            """
        )
        result = project.runpytest()
        assert result.ret != 0
        result.stdout.fnmatch_lines(["*requires a mark name*"])


class TestFixture:
    """Test the covmark fixture."""

    def test_fixture_checks(self, project):
        """Test the fixture exposes check and check_count."""
        project.makepyfile(
            test_fixture="""
            from instrumented import safe_divide

            def test_with_fixture(covmark):
                with covmark.check("save_divide_zero"):
                    assert covmark.active_marks() == ["save_divide_zero"]
                    safe_divide(1, 0)
                with covmark.check_count("save_divide_zero", 0):
                    safe_divide(1, 1)
                with covmark.check("manual"):
                    covmark.hit("manual")
            """
        )
        result = project.runpytest()
        result.assert_outcomes(passed=1)


class TestLeakDetection:
    """Test checks left open past the end of a test."""

    def test_leaked_check_errors(self, project):
        """Test a guard kept alive past its test is reported."""
        project.makepyfile(
            test_leak="""
            from covmark import enter_check

            KEPT = []

            def test_leaks():
                KEPT.append(enter_check("leaked_mark"))
                KEPT.append(enter_check("leaked_shared", shared=True))

            def test_gate_closed_after_leak():
                from covmark.runtime import GATE, SHARED

                assert GATE.is_active() is False
                assert SHARED.is_active() is False
            """
        )
        result = project.runpytest_subprocess()
        result.assert_outcomes(passed=2, errors=1)
        result.stdout.fnmatch_lines(["*left 2 check(s) open: leaked_mark, leaked_shared*"])

    def test_single_leak_message(self, project):
        """Test the report names the leaked mark."""
        project.makepyfile(
            test_leak="""
            from covmark import enter_check

            KEPT = []

            def test_leaks():
                KEPT.append(enter_check("leaked_mark"))
            """
        )
        result = project.runpytest_subprocess()
        result.assert_outcomes(passed=1, errors=1)
        result.stdout.fnmatch_lines(["*left 1 check(s) open: leaked_mark*"])


class TestDisableOption:
    """Test --covmark-disable."""

    def test_disable_skips_checks(self, project):
        """Test checks never fail when marks are disabled."""
        project.makepyfile(
            test_disabled="""
            import pytest
            from covmark import check

            @pytest.mark.covmark("never_fired")
            def test_marker():
                pass

            def test_context():
                with check("never_fired"):
                    pass
            """
        )
        result = project.runpytest_subprocess("--covmark-disable")
        result.assert_outcomes(passed=2)
