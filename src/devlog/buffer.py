"""Growable byte buffer with typed write helpers, and pools for reusing buffers.

Every log record is rendered into a Buffer taken from ``large_pool``, and the
finished bytes are written to the output in one call. Short-lived buffers used
to stringify single values come from ``small_pool``.
"""

from collections import deque
from datetime import datetime
from typing import Any

INDENT = b"  "


def error_text(error: BaseException) -> str:
    """Text written in place of a value that failed to render."""
    return f"!ERROR:{type(error).__name__}: {error}"


def safe_str(value: Any) -> str:
    try:
        return str(value)
    except Exception as e:  # noqa: BLE001 - a broken value must not break the log
        return error_text(e)


class Buffer:
    """Append-only byte sequence used to build log output."""

    __slots__ = ("_data", "_pool")

    def __init__(self, pool: "BufferPool | None" = None) -> None:
        self._data = bytearray()
        self._pool = pool

    def __len__(self) -> int:
        return len(self._data)

    def __bytes__(self) -> bytes:
        return bytes(self._data)

    def getvalue(self) -> bytes:
        """Independent copy of the contents, unaffected by later writes or reuse of the buffer."""
        return bytes(self._data)

    def write_string(self, value: str) -> None:
        self._data += value.encode("utf-8")

    def write_byte(self, value: bytes) -> None:
        self._data += value

    def write_bytes(self, value: bytes | bytearray) -> None:
        self._data += value

    def write_decimal(self, value: int) -> None:
        self._data += str(value).encode("ascii")

    def write_fixed_width_decimal(self, value: int, width: int) -> None:
        """Write a non-negative decimal left-padded with zeros to at least ``width`` digits."""
        digits = str(value)
        if len(digits) < width:
            self._data += b"0" * (width - len(digits))
        self._data += digits.encode("ascii")

    def write_indent(self, depth: int) -> None:
        # Depth 0 is the first level below the log message, so it is already indented once.
        self._data += INDENT * (depth + 1)

    def write_any(self, value: Any) -> None:
        """Write str(value). If that raises, writes an !ERROR marker instead."""
        self.write_string(safe_str(value))

    def write_time(self, value: datetime, with_date: bool = True) -> None:
        """Write ``YYYY-MM-DD HH:MM:SS``, or only ``HH:MM:SS`` if with_date is False."""
        if with_date:
            self.write_fixed_width_decimal(value.year, 4)
            self._data += b"-"
            self.write_fixed_width_decimal(value.month, 2)
            self._data += b"-"
            self.write_fixed_width_decimal(value.day, 2)
            self._data += b" "

        self.write_fixed_width_decimal(value.hour, 2)
        self._data += b":"
        self.write_fixed_width_decimal(value.minute, 2)
        self._data += b":"
        self.write_fixed_width_decimal(value.second, 2)

    def write_bytes_with_indented_newlines(self, value: bytes | bytearray, depth: int) -> None:
        """Write value, indenting every line after the first to the given depth."""
        lines = value.split(b"\n")
        self._data += lines[0]
        for line in lines[1:]:
            self._data += b"\n"
            self._data += INDENT * (depth + 1)
            self._data += line

    def write_string_with_indented_newlines(self, value: str, depth: int) -> None:
        self.write_bytes_with_indented_newlines(value.encode("utf-8"), depth)

    def write_any_with_indented_newlines(self, value: Any, depth: int) -> None:
        scratch = small_pool.get()
        try:
            scratch.write_any(value)
            self.write_bytes_with_indented_newlines(scratch._data, depth)
        finally:
            scratch.free()

    def join(self, other: "Buffer | bytes") -> None:
        """Append the contents of another buffer, or of already rendered bytes."""
        if isinstance(other, Buffer):
            self._data += other._data
        else:
            self._data += other

    def reset(self) -> None:
        del self._data[:]

    def free(self) -> None:
        """Return the buffer to the pool it came from, if any."""
        if self._pool is not None:
            self._pool.put(self)


class BufferPool:
    """Thread-safe pool of reusable buffers.

    Buffers that have grown past ``max_size`` are dropped instead of being
    returned, so one huge record does not pin memory for the process lifetime.
    """

    def __init__(self, initial_capacity: int, max_idle: int = 64) -> None:
        self.initial_capacity = initial_capacity
        self.max_size = initial_capacity * 16
        # deque append/pop are atomic, and maxlen discards the oldest idle buffer when full
        self._idle: deque[Buffer] = deque(maxlen=max_idle)

    def get(self) -> Buffer:
        try:
            buf = self._idle.pop()
        except IndexError:
            return Buffer(self)
        buf.reset()
        return buf

    def put(self, buf: Buffer) -> None:
        if len(buf) <= self.max_size:
            buf.reset()
            self._idle.append(buf)

    def __len__(self) -> int:
        return len(self._idle)


large_pool = BufferPool(1024)
small_pool = BufferPool(128)


def new_buffer() -> Buffer:
    """Get a record-sized buffer from the shared pool. Call ``free()`` when done."""
    return large_pool.get()
