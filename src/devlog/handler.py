"""Handler that writes log records in a human-readable format, for development builds.

Example output:

    [10:31:09] INFO: Server started
      port: 8000
      environment: DEV

Handlers are immutable. ``with_attrs`` and ``with_group`` return new handlers
that share the already-rendered attribute and group text of their parent, so
handlers can be derived and used from any number of threads. Only the final
write of each record to the output is serialized, by a lock shared between a
handler and everything derived from it.
"""

import codecs
import threading
from enum import Enum
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, field_validator

from devlog import color
from devlog.attrs import Attr
from devlog.buffer import Buffer, new_buffer
from devlog.color import is_color_terminal
from devlog.errors import ConfigurationError
from devlog.record import SOURCE_KEY, Level, Record, level_name, parse_level
from devlog.render import AttributeRenderer


class TimeFormat(str, Enum):
    """How much of a record's timestamp to show."""

    SHORT = "short"  # [10:31:09]
    FULL = "full"  # [2024-09-29 10:31:09]


class HandlerOptions(BaseModel):
    """Options for a log Handler. All fields are optional."""

    model_config = ConfigDict(frozen=True)

    # Minimum level of records that will be logged
    level: int = Level.INFO
    # Adds a 'source' attribute with the function, file and line that produced the record
    add_source: bool = False
    # Colors are on by default, but turned off if the output is not a color terminal
    disable_colors: bool = False
    # Skips the color terminal check, and overrides disable_colors
    force_colors: bool = False
    time_format: TimeFormat = TimeFormat.SHORT

    @field_validator("level", mode="before")
    @classmethod
    def _parse_level(cls, value: Any) -> int:
        return parse_level(value)


def _level_color(level: int) -> color.Color:
    if level >= Level.ERROR:
        return color.RED
    if level >= Level.WARN:
        return color.YELLOW
    if level >= Level.INFO:
        return color.GREEN
    return color.MAGENTA


class _Output:
    """The destination stream, and the lock that serializes writes to it."""

    __slots__ = ("stream", "lock", "_binary", "_encoding")

    def __init__(self, stream: Any) -> None:
        self.stream = stream
        self.lock = threading.Lock()
        # Text streams like sys.stdout take bytes through their underlying binary buffer
        binary = getattr(stream, "buffer", None)
        encoding = getattr(stream, "encoding", None)
        self._binary = binary if binary is not None and encoding else None
        # Records are rendered as UTF-8, and re-encoded for streams with another encoding
        self._encoding = None
        if self._binary is not None and codecs.lookup(encoding).name != "utf-8":
            self._encoding = encoding

    def write(self, data: bytes) -> None:
        with self.lock:
            if self._binary is not None:
                if self._encoding is not None:
                    data = data.decode("utf-8").encode(self._encoding, errors="replace")
                self.stream.flush()
                self._binary.write(data)
                self._binary.flush()
                return
            try:
                self.stream.write(data)
            except TypeError:
                # Text stream without a binary buffer, e.g. io.StringIO
                self.stream.write(data.decode("utf-8"))
            flush = getattr(self.stream, "flush", None)
            if flush is not None:
                flush()


class Handler:
    """Log handler producing indented, colored, human-readable output.

    Attributes bound with ``with_attrs`` are rendered once, when bound, and
    reused for every record. Groups opened with ``with_group`` only show up on
    a record once there is an attribute to put in them.
    """

    __slots__ = (
        "_output",
        "options",
        "_renderer",
        "indent",
        "preformatted_attrs",
        "preformatted_groups",
        "preformatted_groups_with_attrs",
    )

    def __init__(self, output: Any, options: HandlerOptions | None = None) -> None:
        """Create a handler writing to output.

        Args:
            output: Binary or text stream with a ``write`` method.
            options: Handler options. Defaults are used if None.

        Raises:
            ConfigurationError: If output is None.
        """
        if output is None:
            raise ConfigurationError("Handler output must not be None")

        options = options or HandlerOptions()
        if options.force_colors:
            colors_enabled = True
        else:
            colors_enabled = not options.disable_colors and is_color_terminal(output)

        self._output = _Output(output)
        self.options = options
        self._renderer = AttributeRenderer(colors_enabled)
        self.indent = 0
        self.preformatted_attrs = b""
        self.preformatted_groups = b""
        self.preformatted_groups_with_attrs = b""

    @property
    def colors_enabled(self) -> bool:
        return self._renderer.colors_enabled

    def _derive(self) -> "Handler":
        # Bypasses __init__: the child shares output, lock, options and renderer
        child = object.__new__(Handler)
        child._output = self._output
        child.options = self.options
        child._renderer = self._renderer
        child.indent = self.indent
        child.preformatted_attrs = self.preformatted_attrs
        child.preformatted_groups = self.preformatted_groups
        child.preformatted_groups_with_attrs = self.preformatted_groups_with_attrs
        return child

    def enabled(self, level: int) -> bool:
        """Report whether records at the given level will be logged."""
        return level >= self.options.level

    def with_attrs(self, attrs: Iterable[Attr]) -> "Handler":
        """Return a handler that adds the given attributes to every record.

        The newest bound attributes are shown first. Any groups opened since
        the last bind now contain attributes, so they show up on every record.
        """
        attrs = list(attrs)
        if not attrs:
            return self

        buf = new_buffer()
        try:
            for attr in attrs:
                self._renderer.write_attribute(buf, attr, self.indent)
            buf.join(self.preformatted_attrs)
            rendered = buf.getvalue()
            buf.reset()
            buf.join(self.preformatted_groups_with_attrs)
            buf.join(self.preformatted_groups)
            groups_with_attrs = buf.getvalue()
        finally:
            buf.free()

        child = self._derive()
        child.preformatted_attrs = rendered
        child.preformatted_groups_with_attrs = groups_with_attrs
        child.preformatted_groups = b""
        return child

    def with_group(self, name: str) -> "Handler":
        """Return a handler that nests all further attributes under the given group."""
        if not name:
            return self

        buf = new_buffer()
        try:
            buf.join(self.preformatted_groups)
            self._renderer.write_group_header(buf, name, self.indent)
            rendered = buf.getvalue()
        finally:
            buf.free()

        child = self._derive()
        child.preformatted_groups = rendered
        child.indent = self.indent + 1
        return child

    def handle(self, record: Record) -> None:
        """Write the record to the output, unless its level is disabled.

        Raises:
            OSError: Errors from writing to the output are passed on as-is.
        """
        if not self.enabled(record.level):
            return

        buf = new_buffer()
        try:
            self.write_record(buf, record)
            data = buf.getvalue()
        finally:
            buf.free()

        self._output.write(data)

    def format(self, record: Record) -> bytes:
        """Render the record without writing it, ignoring the level check."""
        buf = new_buffer()
        try:
            self.write_record(buf, record)
            return buf.getvalue()
        finally:
            buf.free()

    def write_record(self, buf: Buffer, record: Record) -> None:
        renderer = self._renderer

        if record.time is not None:
            renderer.set_color(buf, color.GRAY)
            buf.write_byte(b"[")
            buf.write_time(record.time, with_date=self.options.time_format is TimeFormat.FULL)
            buf.write_byte(b"]")
            renderer.reset_color(buf)
            buf.write_byte(b" ")

        self.write_level(buf, record.level)
        renderer.write_byte_with_color(buf, b":", color.GRAY)
        buf.write_byte(b" ")
        buf.write_string(record.message)
        buf.write_byte(b"\n")

        buf.join(self.preformatted_groups_with_attrs)

        if record.attrs:
            buf.join(self.preformatted_groups)
            for attr in record.attrs:
                renderer.write_attribute(buf, attr, self.indent)

        buf.join(self.preformatted_attrs)

        if self.options.add_source and record.source is not None:
            self.write_source(buf, record)

    def write_level(self, buf: Buffer, level: int) -> None:
        name = level_name(level)
        if not self.colors_enabled:
            buf.write_string(name)
            return
        self._renderer.write_string_with_color(buf, name, _level_color(level))

    def write_source(self, buf: Buffer, record: Record) -> None:
        source = record.source
        buf.write_indent(0)
        self._renderer.write_attribute_key(buf, SOURCE_KEY)
        buf.write_byte(b" ")
        buf.write_string(source.function)
        buf.write_string(" (")
        buf.write_string(source.file)
        buf.write_byte(b":")
        buf.write_decimal(source.line)
        buf.write_string(")\n")
