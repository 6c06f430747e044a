"""Log records, severity levels, and the interface that output handlers implement."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import IntEnum
from typing import Iterable, Protocol

from devlog.attrs import Attr

SOURCE_KEY = "source"


class Level(IntEnum):
    """Log severity, using the same numbers as the standard library's logging module."""

    DEBUG = 10
    INFO = 20
    WARN = 30
    ERROR = 40


_LEVEL_ALIASES = {
    "WARNING": Level.WARN,
    "CRITICAL": Level.ERROR,
    "FATAL": Level.ERROR,
    # structlog method name for logger.exception()
    "EXCEPTION": Level.ERROR,
}


def parse_level(value: "int | str") -> int:
    """Parse a level name (case-insensitive, e.g. "info" or "WARNING") or number."""
    if isinstance(value, int):
        return value
    name = value.strip().upper()
    if name in Level.__members__:
        return Level[name]
    if name in _LEVEL_ALIASES:
        return _LEVEL_ALIASES[name]
    if name.lstrip("-").isdigit():
        return int(name)
    raise ValueError(f"Unknown log level {value!r}. Valid: {list(Level.__members__)}")


def level_name(level: int) -> str:
    """Name of a level, e.g. "INFO". Levels between the named ones get an offset, e.g. "INFO+2"."""

    def with_offset(base: Level) -> str:
        offset = level - base
        if offset == 0:
            return base.name
        return f"{base.name}{offset:+d}"

    if level < Level.INFO:
        return with_offset(Level.DEBUG)
    if level < Level.WARN:
        return with_offset(Level.INFO)
    if level < Level.ERROR:
        return with_offset(Level.WARN)
    return with_offset(Level.ERROR)


@dataclass(frozen=True, slots=True)
class Source:
    """Where in the program a log record was made."""

    function: str
    file: str
    line: int


@dataclass(frozen=True, slots=True)
class Record:
    """A single log event. Records are immutable, and handled once."""

    time: datetime | None
    level: int
    message: str
    attrs: tuple[Attr, ...] = field(default=())
    source: Source | None = None

    def with_attrs(self, attrs: Iterable[Attr]) -> "Record":
        """Return a copy of the record with the given attributes appended."""
        extra = tuple(attrs)
        if not extra:
            return self
        return replace(self, attrs=self.attrs + extra)

    def with_attrs_first(self, attrs: Iterable[Attr]) -> "Record":
        extra = tuple(attrs)
        if not extra:
            return self
        return replace(self, attrs=extra + self.attrs)


class LogHandler(Protocol):
    """Output side of logging. Implemented by devlog.Handler and its wrappers."""

    def enabled(self, level: int) -> bool: ...

    def handle(self, record: Record) -> None: ...

    def with_attrs(self, attrs: Iterable[Attr]) -> "LogHandler": ...

    def with_group(self, name: str) -> "LogHandler": ...
