"""
Error taxonomy for coverage mark checks.

Check failures are ``AssertionError`` subclasses so a failed check fails the
enclosing test through the same channel as a plain ``assert``.
"""


class CovMarkError(Exception):
    """Marker base for every error raised by covmark."""


class CheckFailed(CovMarkError, AssertionError):
    """A check scope ended with a hit count that does not satisfy its policy."""

    def __init__(self, mark: str, hits: int, expected: int | None, message: str) -> None:
        self.mark = mark
        self.hits = hits
        self.expected = expected
        super().__init__(message)


class MarkNeverHit(CheckFailed):
    """Raised when a ``check`` scope saw zero hits for its mark."""

    def __init__(self, mark: str) -> None:
        super().__init__(mark, 0, None, f"mark {mark} was not hit")


class MarkHitWrongCount(CheckFailed):
    """Raised when a ``check_count`` scope saw a different number of hits."""

    def __init__(self, mark: str, hits: int, expected: int) -> None:
        super().__init__(
            mark,
            hits,
            expected,
            f"mark {mark} was hit {hits} times, expected {expected}",
        )


class RegistryOrderViolation(CovMarkError, AssertionError):
    """Raised when a guard exits out of LIFO order or more than once.

    Always raised, even while another exception is propagating: it means the
    instrumentation itself is broken, not the code under test.
    """

    def __init__(self, mark: str, found: str | None, message: str | None = None) -> None:
        self.mark = mark
        self.found = found
        if message is None:
            if found is None:
                message = f"check for mark {mark} exited but no check is active on this thread"
            else:
                message = (
                    f"check for mark {mark} exited out of order: "
                    f"innermost active check is for mark {found}"
                )
        super().__init__(message)
