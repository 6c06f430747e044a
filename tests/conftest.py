"""Shared fixtures for devlog tests."""

import io

import pytest

from devlog import log
from devlog.config import reset_config
from devlog.handler import Handler, HandlerOptions


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Isolate tests from the developer's color and logging environment."""
    for name in ("NO_COLOR", "FORCE_COLOR", "TERM"):
        monkeypatch.delenv(name, raising=False)
    for name in (
        "LOG_LEVEL",
        "LOG_ADD_SOURCE",
        "LOG_DISABLE_COLORS",
        "LOG_FORCE_COLORS",
        "LOG_TIME_FORMAT",
        "LOG_JSON",
    ):
        monkeypatch.delenv(name, raising=False)
    # Keeps a .env file in the working directory from leaking into config tests
    monkeypatch.chdir(tmp_path)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def default_logger():
    """Restore the default logger of devlog.log after the test."""
    saved = log._default
    yield
    log._default = saved


@pytest.fixture
def sink():
    return io.BytesIO()


@pytest.fixture
def make_handler(sink):
    """Factory for handlers writing to the sink fixture, with colors off unless given."""

    def factory(**options) -> Handler:
        options.setdefault("disable_colors", True)
        return Handler(sink, HandlerOptions(**options))

    return factory


@pytest.fixture
def output(sink):
    """Everything written to the sink so far, decoded."""
    return lambda: sink.getvalue().decode("utf-8")
