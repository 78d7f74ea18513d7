"""Shared fixtures for covmark tests."""

import pytest

from covmark.config import CovMarkConfig, configure, reset_config


@pytest.fixture(autouse=True)
def default_config():
    """Run every test with default settings, independent of the environment."""
    configure(CovMarkConfig())
    yield
    reset_config()
