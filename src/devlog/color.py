"""ANSI color codes, and a check for whether an output stream supports them.

See https://en.wikipedia.org/wiki/ANSI_escape_code#Colors for the codes.
"""

import os
import sys
from typing import Any

from devlog.logging import get_logger

logger = get_logger(__name__)

Color = bytes

RESET: Color = b"\x1b[0m"
BLACK: Color = b"\x1b[30m"
RED: Color = b"\x1b[31m"
GREEN: Color = b"\x1b[32m"
YELLOW: Color = b"\x1b[33m"
BLUE: Color = b"\x1b[34m"
MAGENTA: Color = b"\x1b[35m"
CYAN: Color = b"\x1b[36m"
GRAY: Color = b"\x1b[37m"
DEFAULT: Color = b"\x1b[39m"
NO_COLOR: Color = b""

# Windows console mode flags
_ENABLE_PROCESSED_OUTPUT = 0x0001
_ENABLE_VIRTUAL_TERMINAL_PROCESSING = 0x0004


def is_color_terminal(output: Any) -> bool:
    """Check if the given output stream is a terminal with ANSI color support.

    Respects the NO_COLOR (https://no-color.org/), FORCE_COLOR
    (https://force-color.org/) and TERM=dumb environment variables.

    Args:
        output: Stream that log output will be written to.

    Returns:
        True if colored output can be written to the stream.
    """
    if os.environ.get("NO_COLOR", ""):
        return False
    if os.environ.get("FORCE_COLOR", ""):
        return True
    if os.environ.get("TERM", "") == "dumb":
        return False

    if output is None:
        return False

    isatty = getattr(output, "isatty", None)
    if isatty is None or not isatty():
        return False

    if sys.platform == "win32":
        return _enable_windows_virtual_terminal(output)

    return True


def _enable_windows_virtual_terminal(output: Any) -> bool:
    """Enable ANSI escape processing on a Windows console, if it is not already on."""
    import ctypes
    import msvcrt
    from ctypes import wintypes

    try:
        console = msvcrt.get_osfhandle(output.fileno())
    except (AttributeError, OSError, ValueError) as e:
        logger.debug("color_probe_failed", reason="no_console_handle", error=str(e))
        return False

    kernel32 = ctypes.windll.kernel32
    mode = wintypes.DWORD()
    if not kernel32.GetConsoleMode(console, ctypes.byref(mode)):
        return False

    wanted = _ENABLE_PROCESSED_OUTPUT | _ENABLE_VIRTUAL_TERMINAL_PROCESSING
    if mode.value & wanted == wanted:
        return True

    if not kernel32.SetConsoleMode(console, mode.value | wanted):
        logger.debug("color_probe_failed", reason="set_console_mode_rejected")
        return False

    return True
