import io
import sys

import pytest

from devlog.color import is_color_terminal


class FakeTerminal(io.StringIO):
    def isatty(self):
        return True


@pytest.mark.skipif(sys.platform == "win32", reason="Windows also checks the console mode")
def test_terminal_supports_colors():
    assert is_color_terminal(FakeTerminal())


def test_non_terminal_has_no_colors():
    assert not is_color_terminal(io.StringIO())
    assert not is_color_terminal(None)


def test_output_without_isatty_has_no_colors():
    class Sink:
        def write(self, data):
            pass

    assert not is_color_terminal(Sink())


def test_no_color_env_wins_over_terminal(monkeypatch):
    monkeypatch.setenv("NO_COLOR", "1")
    monkeypatch.setenv("FORCE_COLOR", "1")
    assert not is_color_terminal(FakeTerminal())


def test_force_color_env(monkeypatch):
    monkeypatch.setenv("FORCE_COLOR", "1")
    assert is_color_terminal(io.StringIO())


def test_dumb_terminal(monkeypatch):
    monkeypatch.setenv("TERM", "dumb")
    assert not is_color_terminal(FakeTerminal())
