"""Prettified, optionally colorized JSON output for log values.

Values are first converted to JSON-compatible Python objects with pydantic, so
dataclasses, pydantic models, datetimes, enums and sets all work. The JSON
text is then written token by token, so keys, punctuation and scalars can be
colored separately.
"""

import json
from dataclasses import dataclass
from typing import Any

from pydantic_core import to_jsonable_python

from devlog import color
from devlog.buffer import INDENT, Buffer, safe_str, small_pool
from devlog.color import Color
from devlog.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class JSONColors:
    key: Color = color.NO_COLOR
    punctuation: Color = color.NO_COLOR
    string: Color = color.NO_COLOR
    number: Color = color.NO_COLOR
    bool: Color = color.NO_COLOR
    null: Color = color.NO_COLOR


# Used for JSON attribute values, to match the colors of regular attributes
ATTRIBUTE_JSON_COLORS = JSONColors(key=color.CYAN, punctuation=color.GRAY)

# Used for JSON in log messages (Logger.debug_json)
MESSAGE_JSON_COLORS = JSONColors(
    key=color.NO_COLOR,
    punctuation=color.GRAY,
    string=color.CYAN,
    number=color.CYAN,
    bool=color.CYAN,
    null=color.CYAN,
)


def to_json_compatible(value: Any) -> Any:
    """Convert value to plain dicts, lists and scalars.

    Raises:
        PydanticSerializationError: If some part of the value has no JSON form.
    """
    return to_jsonable_python(value)


def encode_json(value: Any, prefix: bytes, colors: JSONColors | None) -> bytes:
    """Encode value as indented JSON.

    Every line after the first starts with ``prefix``, and nesting adds two
    spaces per level. No trailing newline is written.

    Raises:
        PydanticSerializationError: If the value has no JSON form.
        ValueError: If the value contains NaN or infinite floats.
    """
    compatible = to_json_compatible(value)
    scratch = small_pool.get()
    try:
        _JSONWriter(scratch, prefix, colors).write_value(compatible, 0)
        return scratch.getvalue()
    finally:
        scratch.free()


def write_json(
    buf: Buffer, value: Any, indent: int, colors: JSONColors | None, fallback: Any = None
) -> None:
    """Write value as JSON aligned to the given attribute indent, then a newline.

    If the value cannot be encoded, writes ``str(fallback)`` (or ``str(value)``)
    instead. Nothing is written for the failed encoding attempt.
    """
    prefix = INDENT * (indent + 1)
    try:
        encoded = encode_json(value, prefix, colors)
    except Exception as e:  # noqa: BLE001 - custom serializers may raise anything
        logger.debug("json_encode_failed", error=safe_str(e), type=type(e).__name__)
        buf.write_any(value if fallback is None else fallback)
        buf.write_byte(b"\n")
        return

    buf.write_bytes(encoded)
    buf.write_byte(b"\n")


class _JSONWriter:
    def __init__(self, buf: Buffer, prefix: bytes, colors: JSONColors | None) -> None:
        self.buf = buf
        self.prefix = prefix
        self.colors = colors

    def write_colored(self, text: str, token_color: Color) -> None:
        if self.colors is not None and token_color:
            self.buf.write_bytes(token_color)
            self.buf.write_string(text)
            self.buf.write_bytes(color.RESET)
        else:
            self.buf.write_string(text)

    def punctuation(self, text: str) -> None:
        self.write_colored(text, self.colors.punctuation if self.colors else color.NO_COLOR)

    def newline(self, depth: int) -> None:
        self.buf.write_byte(b"\n")
        self.buf.write_bytes(self.prefix)
        self.buf.write_bytes(INDENT * depth)

    def write_value(self, value: Any, depth: int) -> None:
        if isinstance(value, dict):
            self.write_object(value, depth)
        elif isinstance(value, (list, tuple)):
            self.write_array(value, depth)
        else:
            self.write_scalar(value)

    def write_object(self, value: dict, depth: int) -> None:
        if not value:
            self.punctuation("{}")
            return

        self.punctuation("{")
        for index, (key, item) in enumerate(value.items()):
            if index > 0:
                self.punctuation(",")
            self.newline(depth + 1)
            key_text = json.dumps(key if isinstance(key, str) else str(key), ensure_ascii=False)
            self.write_colored(key_text, self.colors.key if self.colors else color.NO_COLOR)
            self.punctuation(":")
            self.buf.write_byte(b" ")
            self.write_value(item, depth + 1)
        self.newline(depth)
        self.punctuation("}")

    def write_array(self, value: list | tuple, depth: int) -> None:
        if not value:
            self.punctuation("[]")
            return

        self.punctuation("[")
        for index, item in enumerate(value):
            if index > 0:
                self.punctuation(",")
            self.newline(depth + 1)
            self.write_value(item, depth + 1)
        self.newline(depth)
        self.punctuation("]")

    def write_scalar(self, value: Any) -> None:
        text = json.dumps(value, ensure_ascii=False, allow_nan=False)
        if self.colors is None:
            self.buf.write_string(text)
        elif value is None:
            self.write_colored(text, self.colors.null)
        elif isinstance(value, bool):
            self.write_colored(text, self.colors.bool)
        elif isinstance(value, (int, float)):
            self.write_colored(text, self.colors.number)
        else:
            self.write_colored(text, self.colors.string)
