"""
Shared test fixtures for the faultforward test suite.
"""

import pytest

from faultforward.config import set_config
from faultforward.testing import PanicRecorder


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Isolate every test from FF_* variables and the cached default config."""
    for name in ("FF_CAPTURE_LIMIT", "FF_ALL_UNITS", "FF_INCLUDE_TASKS"):
        monkeypatch.delenv(name, raising=False)
    set_config(None)
    yield
    set_config(None)


@pytest.fixture
def recorder():
    return PanicRecorder()
