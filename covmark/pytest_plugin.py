"""pytest integration: the ``covmark`` marker and fixture."""

from __future__ import annotations

import contextlib
from collections.abc import Generator
from typing import Any

import pytest

from covmark.config import CovMarkConfig, configure, get_config
from covmark.errors import RegistryOrderViolation
from covmark.runtime import GATE, REGISTRY, SHARED, CheckGuard, enter_check, hit

_previous_config_key = pytest.StashKey[CovMarkConfig]()


class CovMarkHelper:
    """Handle returned by the ``covmark`` fixture."""

    def check(self, name: str, *, shared: bool | None = None) -> CheckGuard:
        return enter_check(name, None, shared=shared)

    def check_count(self, name: str, count: int, *, shared: bool | None = None) -> CheckGuard:
        return enter_check(name, count, shared=shared)

    def hit(self, name: str) -> None:
        hit(name)

    def active_marks(self) -> list[str]:
        """Marks checked on the calling thread, outermost first."""
        return [record.mark for record in REGISTRY.snapshot()]


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register covmark command-line options."""
    group = parser.getgroup("covmark")
    group.addoption(
        "--covmark-disable",
        action="store_true",
        default=False,
        help="Turn coverage marks off: hits are ignored and checks never fail.",
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register the marker and apply command-line settings."""
    config.addinivalue_line(
        "markers",
        "covmark(name, count=None): fail the test unless mark `name` is hit "
        "(exactly `count` times when given) while the test body runs.",
    )
    if config.getoption("covmark_disable", default=False):
        current = get_config()
        config.stash[_previous_config_key] = current
        configure(current.model_copy(update={"enabled": False}))


def pytest_unconfigure(config: pytest.Config) -> None:
    previous = config.stash.get(_previous_config_key, None)
    if previous is not None:
        configure(previous)


@pytest.hookimpl(wrapper=True)
def pytest_runtest_call(item: pytest.Item) -> Generator[None, Any, Any]:
    """Run the test body inside one check scope per ``covmark`` marker."""
    markers = list(item.iter_markers(name="covmark"))
    if not markers:
        return (yield)

    with contextlib.ExitStack() as stack:
        for marker in markers:
            name, count = _marker_args(marker)
            stack.enter_context(enter_check(name, count))
        return (yield)


@pytest.hookimpl(trylast=True)
def pytest_runtest_teardown(item: pytest.Item, nextitem: pytest.Item | None) -> None:
    """Fail the test if a check outlived it on this thread."""
    if REGISTRY.depth() == 0:
        return
    leaked = REGISTRY.clear()
    for record in leaked:
        record.released = True
        GATE.decrement()
        if record.shared:
            SHARED.deactivate()
    marks = ", ".join(record.mark for record in leaked)
    raise RegistryOrderViolation(
        leaked[-1].mark,
        None,
        f"{item.nodeid} left {len(leaked)} check(s) open: {marks}",
    )


def _marker_args(marker: pytest.Mark) -> tuple[str, int | None]:
    if not marker.args and "name" not in marker.kwargs:
        raise pytest.UsageError("covmark marker requires a mark name")
    name = marker.args[0] if marker.args else marker.kwargs["name"]
    if len(marker.args) > 1:
        count = marker.args[1]
    else:
        count = marker.kwargs.get("count")
    return name, count


@pytest.fixture
def covmark() -> CovMarkHelper:
    """Check coverage marks from inside a test."""
    return CovMarkHelper()
