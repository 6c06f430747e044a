"""structlog processor that renders event dicts in devlog's format.

Use it as the last processor in a structlog chain:

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            DevRenderer(),
        ],
    )
"""

import sys
from datetime import datetime
from typing import Any, Mapping

from structlog.typing import EventDict, WrappedLogger

from devlog.attrs import Attr, Value, attr
from devlog.handler import Handler, HandlerOptions
from devlog.record import Record, parse_level

# Keys that are part of the record line itself, not attributes
_EVENT_KEY = "event"
_LEVEL_KEY = "level"
_TIMESTAMP_KEY = "timestamp"


def _dict_to_attr(key: str, value: Any) -> Attr:
    if isinstance(value, Mapping):
        return Attr(key, Value.group(_dict_to_attr(str(k), v) for k, v in value.items()))
    return attr(key, value)


def _parse_timestamp(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


class DevRenderer:
    """Render a structlog event dict the way a devlog Handler renders records.

    The ``event`` key is the message, ``level`` (or the method name) the
    level, and ``timestamp`` the time. Every other key becomes an attribute,
    with nested dicts rendered as groups.
    """

    def __init__(self, options: HandlerOptions | None = None, stream: Any = None) -> None:
        """
        Args:
            options: Handler options. The level option is not applied, since
                structlog does its own filtering.
            stream: Stream the rendered output ends up on, used to check for
                color support. Defaults to sys.stdout.
        """
        self._handler = Handler(stream if stream is not None else sys.stdout, options)

    def to_record(self, method_name: str, event_dict: EventDict) -> Record:
        fields = dict(event_dict)
        message = str(fields.pop(_EVENT_KEY, ""))

        level_name = fields.pop(_LEVEL_KEY, method_name)
        try:
            level = parse_level(level_name)
        except ValueError:
            level = parse_level("info")

        timestamp = _parse_timestamp(fields.pop(_TIMESTAMP_KEY, None))
        if timestamp is not None and timestamp.tzinfo is not None:
            timestamp = timestamp.astimezone()

        attrs = tuple(_dict_to_attr(str(key), value) for key, value in fields.items())
        return Record(timestamp, level, message, attrs)

    def __call__(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> str:
        record = self.to_record(method_name, event_dict)
        # The logger factory adds its own trailing newline
        return self._handler.format(record).decode("utf-8").rstrip("\n")
