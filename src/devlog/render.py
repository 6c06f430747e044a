"""Rendering of single log attributes into indented, optionally colored text.

Output for a record's attributes looks like this:

    port: 8000
    request:
      id: 42
    tags:
      - first
      - second
"""

from typing import Any

from devlog import color
from devlog.attrs import Attr, JSONLogValuer, Kind
from devlog.buffer import Buffer, safe_str
from devlog.color import Color
from devlog.jsonvalue import ATTRIBUTE_JSON_COLORS, write_json
from devlog.logging import get_logger

logger = get_logger(__name__)


def _is_list(value: Any) -> bool:
    return isinstance(value, list) or (isinstance(value, tuple) and not hasattr(value, "_fields"))


class AttributeRenderer:
    """Writes attributes to buffers. Stateless apart from the colors setting."""

    __slots__ = ("colors_enabled",)

    def __init__(self, colors_enabled: bool) -> None:
        self.colors_enabled = colors_enabled

    def set_color(self, buf: Buffer, value: Color) -> None:
        if self.colors_enabled:
            buf.write_bytes(value)

    def reset_color(self, buf: Buffer) -> None:
        self.set_color(buf, color.RESET)

    def write_string_with_color(self, buf: Buffer, text: str, value: Color) -> None:
        self.set_color(buf, value)
        buf.write_string(text)
        self.reset_color(buf)

    def write_byte_with_color(self, buf: Buffer, byte: bytes, value: Color) -> None:
        self.set_color(buf, value)
        buf.write_byte(byte)
        self.reset_color(buf)

    def write_attribute_key(self, buf: Buffer, key: str) -> None:
        self.set_color(buf, color.CYAN)
        buf.write_string(key)
        self.reset_color(buf)
        self.write_byte_with_color(buf, b":", color.GRAY)

    def write_group_header(self, buf: Buffer, name: str, indent: int) -> None:
        buf.write_indent(indent)
        self.write_attribute_key(buf, name)
        buf.write_byte(b"\n")

    def write_attribute(self, buf: Buffer, attr: Attr, indent: int) -> None:
        """Write a single attribute (and any nested attributes) at the given indent."""
        attr = attr.resolved()
        if attr.is_empty():
            return

        value = attr.value
        kind = value.kind

        if kind is Kind.GROUP:
            children = value.payload
            if not children:
                return
            if attr.key:
                self.write_group_header(buf, attr.key, indent)
                indent += 1
            for child in children:
                self.write_attribute(buf, child, indent)
            return

        buf.write_indent(indent)
        self.write_attribute_key(buf, attr.key)

        if kind is Kind.TIME:
            buf.write_byte(b" ")
            buf.write_time(value.payload)
            buf.write_byte(b"\n")
        elif kind is Kind.LIST:
            self.write_list_or_single_element(buf, value.payload, indent + 1)
            buf.write_byte(b"\n")
        elif kind is Kind.ANY and isinstance(value.payload, JSONLogValuer):
            buf.write_byte(b" ")
            self.write_json(buf, value.payload, indent)
        elif kind is Kind.STRING:
            buf.write_byte(b" ")
            buf.write_string_with_indented_newlines(value.payload, indent + 1)
            buf.write_byte(b"\n")
        else:
            buf.write_byte(b" ")
            buf.write_any_with_indented_newlines(value, indent + 1)
            buf.write_byte(b"\n")

    def write_json(self, buf: Buffer, valuer: JSONLogValuer, indent: int) -> None:
        colors = ATTRIBUTE_JSON_COLORS if self.colors_enabled else None
        try:
            json_value = valuer.json_log_value()
        except Exception as e:  # noqa: BLE001 - falls back to the default string form
            logger.debug("json_log_value_failed", error=safe_str(e), type=type(e).__name__)
            buf.write_any(valuer)
            buf.write_byte(b"\n")
            return
        write_json(buf, json_value, indent, colors, fallback=valuer)

    def write_list_or_single_element(self, buf: Buffer, items: tuple | list, indent: int) -> None:
        if len(items) == 0:
            buf.write_string(" []")
        elif len(items) == 1:
            item = items[0]
            if _is_list(item):
                self.write_list_or_single_element(buf, item, indent)
            elif isinstance(item, str):
                buf.write_byte(b" ")
                buf.write_string_with_indented_newlines(item, indent)
            else:
                buf.write_byte(b" ")
                buf.write_any_with_indented_newlines(item, indent)
        else:
            self.write_list(buf, items, indent)

    def write_list(self, buf: Buffer, items: tuple | list, indent: int) -> None:
        for item in items:
            if _is_list(item):
                self.write_list(buf, item, indent + 1)
            elif isinstance(item, str):
                self.write_list_item_prefix(buf, indent)
                buf.write_string_with_indented_newlines(item, indent + 1)
            else:
                self.write_list_item_prefix(buf, indent)
                buf.write_any_with_indented_newlines(item, indent + 1)

    def write_list_item_prefix(self, buf: Buffer, indent: int) -> None:
        buf.write_byte(b"\n")
        buf.write_indent(indent)
        self.write_byte_with_color(buf, b"-", color.GRAY)
        buf.write_byte(b" ")
