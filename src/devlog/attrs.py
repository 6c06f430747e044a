"""Log attributes: a key paired with a typed value.

A Value's kind is decided once, when the attribute is constructed, so the
renderer dispatches on ``Value.kind`` instead of inspecting arbitrary objects.
Lists and tuples get their own LIST kind. Groups hold an ordered tuple of
child attributes, and values implementing ``log_value()`` are resolved lazily
at render time.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Iterable, Protocol, runtime_checkable

BAD_KEY = "!BADKEY"

# Bounds LogValuer resolution, in case a value keeps returning new LogValuers
_MAX_RESOLVE_DEPTH = 100


class Kind(Enum):
    ANY = "any"
    BOOL = "bool"
    DURATION = "duration"
    FLOAT = "float"
    INT = "int"
    STRING = "string"
    TIME = "time"
    GROUP = "group"
    LIST = "list"
    LOG_VALUER = "log_valuer"


@runtime_checkable
class LogValuer(Protocol):
    """A value that produces its log representation when it is rendered."""

    def log_value(self) -> Any: ...


@runtime_checkable
class JSONLogValuer(Protocol):
    """A value that should be logged as prettified JSON."""

    def json_log_value(self) -> Any: ...


@dataclass(frozen=True, slots=True)
class Value:
    kind: Kind
    payload: Any = None

    @classmethod
    def of(cls, value: Any) -> "Value":
        """Wrap a plain Python value, picking its kind from its type."""
        if isinstance(value, Value):
            return value
        if isinstance(value, str):
            return cls(Kind.STRING, value)
        if isinstance(value, bool):
            return cls(Kind.BOOL, value)
        if isinstance(value, int):
            return cls(Kind.INT, value)
        if isinstance(value, float):
            return cls(Kind.FLOAT, value)
        if isinstance(value, datetime):
            return cls(Kind.TIME, value)
        if isinstance(value, timedelta):
            return cls(Kind.DURATION, value)
        # Named tuples are records, not lists
        if isinstance(value, list) or (isinstance(value, tuple) and not hasattr(value, "_fields")):
            return cls(Kind.LIST, tuple(value))
        if isinstance(value, LogValuer) and not isinstance(value, type):
            return cls(Kind.LOG_VALUER, value)
        return cls(Kind.ANY, value)

    @classmethod
    def group(cls, attrs: Iterable["Attr"]) -> "Value":
        return cls(Kind.GROUP, tuple(attrs))

    def resolve(self) -> "Value":
        """Call ``log_value()`` until the value is no longer a LogValuer."""
        value = self
        for _ in range(_MAX_RESOLVE_DEPTH):
            if value.kind is not Kind.LOG_VALUER:
                return value
            try:
                value = Value.of(value.payload.log_value())
            except Exception as e:  # noqa: BLE001 - a broken value must not break the log
                return Value(Kind.STRING, f"!ERROR:{type(e).__name__}: {e}")
        return Value(Kind.STRING, "!ERROR:LogValuer resolution exceeded maximum depth")

    def is_empty(self) -> bool:
        return self.kind is Kind.ANY and self.payload is None

    def __str__(self) -> str:
        if self.kind is Kind.GROUP:
            return "[" + " ".join(str(attr) for attr in self.payload) + "]"
        return str(self.payload)


@dataclass(frozen=True, slots=True)
class Attr:
    key: str
    value: Value

    def is_empty(self) -> bool:
        return self.key == "" and self.value.is_empty()

    def resolved(self) -> "Attr":
        if self.value.kind is not Kind.LOG_VALUER:
            return self
        return Attr(self.key, self.value.resolve())

    def __str__(self) -> str:
        return f"{self.key}={self.value}"


def attr(key: str, value: Any) -> Attr:
    """Create an attribute, picking the value kind from the value's type."""
    return Attr(key, Value.of(value))


def group(key: str, *args: Any) -> Attr:
    """Create a group attribute. Children may be Attrs or key/value pairs.

    A group with an empty key is inlined into its parent when rendered.
    """
    return Attr(key, Value.group(attrs_from_args(args)))


def empty() -> Attr:
    """The zero attribute, which the renderer skips."""
    return Attr("", Value(Kind.ANY, None))


def attrs_from_args(args: Iterable[Any]) -> list[Attr]:
    """Turn a mix of Attrs and key/value pairs into a list of Attrs.

    A string is taken as a key for the argument after it. A non-string,
    non-Attr argument in key position gets the key ``!BADKEY``, as does a
    string with no value after it.
    """
    parsed: list[Attr] = []
    items = list(args)
    index = 0
    while index < len(items):
        item = items[index]
        if isinstance(item, Attr):
            parsed.append(item)
            index += 1
        elif isinstance(item, str):
            if index + 1 < len(items):
                parsed.append(attr(item, items[index + 1]))
                index += 2
            else:
                parsed.append(attr(BAD_KEY, item))
                index += 1
        else:
            parsed.append(attr(BAD_KEY, item))
            index += 1
    return parsed
