from datetime import datetime

from devlog.buffer import INDENT, Buffer, BufferPool, new_buffer


def test_write_time_zero_pads_each_component():
    buf = Buffer()
    buf.write_time(datetime(45, 1, 2, 3, 7, 9))
    assert buf.getvalue() == b"0045-01-02 03:07:09"


def test_write_time_without_date():
    buf = Buffer()
    buf.write_time(datetime(2024, 9, 29, 3, 7, 9), with_date=False)
    assert buf.getvalue() == b"03:07:09"


def test_write_fixed_width_decimal():
    buf = Buffer()
    buf.write_fixed_width_decimal(7, 3)
    buf.write_byte(b" ")
    buf.write_fixed_width_decimal(12345, 2)
    assert buf.getvalue() == b"007 12345"


def test_write_indent_includes_base_level():
    buf = Buffer()
    buf.write_indent(0)
    assert buf.getvalue() == INDENT

    buf.reset()
    buf.write_indent(2)
    assert buf.getvalue() == b"      "


def test_write_string_with_indented_newlines():
    buf = Buffer()
    buf.write_string_with_indented_newlines("first\nsecond\nthird", 1)
    assert buf.getvalue() == b"first\n    second\n    third"


def test_write_any_with_indented_newlines_uses_str():
    class Multiline:
        def __str__(self):
            return "a\nb"

    buf = Buffer()
    buf.write_any_with_indented_newlines(Multiline(), 0)
    assert buf.getvalue() == b"a\n  b"


def test_write_string_encodes_utf8():
    buf = Buffer()
    buf.write_string("blåbær")
    assert buf.getvalue() == "blåbær".encode("utf-8")
    assert len(buf) == len("blåbær".encode("utf-8"))


def test_getvalue_is_independent_of_later_writes():
    buf = Buffer()
    buf.write_string("abc")
    value = buf.getvalue()
    buf.write_string("def")
    buf.reset()

    assert value == b"abc"


def test_join():
    buf = Buffer()
    other = Buffer()
    other.write_string("b")
    buf.write_string("a")
    buf.join(other)
    buf.join(b"c")
    assert bytes(buf) == b"abc"
    assert other.getvalue() == b"b"


def test_write_any_with_failing_str_writes_error_marker():
    class Broken:
        def __str__(self):
            raise RuntimeError("boom")

    buf = Buffer()
    buf.write_any(Broken())
    assert buf.getvalue() == b"!ERROR:RuntimeError: boom"


def test_pool_reuses_freed_buffers():
    pool = BufferPool(8)
    buf = pool.get()
    buf.write_string("used")
    buf.free()

    assert len(pool) == 1
    reused = pool.get()
    assert reused is buf
    assert reused.getvalue() == b""


def test_pool_drops_oversized_buffers():
    pool = BufferPool(4)
    buf = pool.get()
    buf.write_bytes(b"x" * (pool.max_size + 1))
    buf.free()

    assert len(pool) == 0


def test_pool_keeps_at_most_max_idle_buffers():
    pool = BufferPool(8, max_idle=2)
    buffers = [pool.get() for _ in range(3)]
    for buf in buffers:
        buf.free()

    assert len(pool) == 2


def test_unpooled_buffer_free_is_noop():
    buf = Buffer()
    buf.write_string("x")
    buf.free()
    assert buf.getvalue() == b"x"


def test_new_buffer_is_empty():
    buf = new_buffer()
    try:
        assert len(buf) == 0
    finally:
        buf.free()
