"""devlog: structured logs rendered as indented, colored, human-readable text.

Meant for development builds. In production, log JSON instead (see
``devlog.integrations.setup_logging``).
"""

from devlog.attrs import Attr, Kind, Value, attr, empty, group
from devlog.color import is_color_terminal
from devlog.config import DevlogConfig, get_config
from devlog.errors import ConfigurationError, DevlogError, HandlerMisuseError
from devlog.handler import Handler, HandlerOptions, TimeFormat
from devlog.record import Level, LogHandler, Record, Source, level_name, parse_level

__version__ = "0.1.0"

__all__ = [
    "Attr",
    "ConfigurationError",
    "DevlogConfig",
    "DevlogError",
    "Handler",
    "HandlerMisuseError",
    "HandlerOptions",
    "Kind",
    "Level",
    "LogHandler",
    "Record",
    "Source",
    "TimeFormat",
    "Value",
    "attr",
    "empty",
    "get_config",
    "group",
    "is_color_terminal",
    "level_name",
    "parse_level",
]
