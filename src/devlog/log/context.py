"""Log attributes attached to the current execution context.

Context attributes are stored in a ContextVar, so they follow threads and
asyncio tasks the same way ``structlog.contextvars`` does. They are added to
every log made through ``devlog.log`` while they are set, and to logs made
through any handler wrapped with ``ContextHandler``.

    with context_attrs("request_id", request.id):
        log.info("Handling request")  # includes request_id
"""

from contextlib import contextmanager
from contextvars import ContextVar, Token
from enum import Enum
from typing import Any, Iterable, Iterator

from devlog.attrs import Attr, attrs_from_args
from devlog.errors import HandlerMisuseError
from devlog.log.attrs import append_attrs
from devlog.record import LogHandler, Record

_context_attrs: ContextVar[tuple[Attr, ...]] = ContextVar("devlog_context_attrs", default=())


def get_context_attrs() -> tuple[Attr, ...]:
    """Context attributes currently set, most recently added first."""
    return _context_attrs.get()


def add_context_attrs(*args: Any) -> Token:
    """Add log attributes to the current context.

    Attributes can be given as key/value pairs, Attr objects, or a mix.
    Attributes added earlier are kept, but a new attribute replaces an older
    one with the same key. The newest attributes show up first in logs.

    Returns:
        Token for ``reset_context_attrs``, to restore the previous attributes.
    """
    attrs = attrs_from_args(args)
    attrs = append_attrs(attrs, _context_attrs.get())
    return _context_attrs.set(tuple(attrs))


def reset_context_attrs(token: Token) -> None:
    _context_attrs.reset(token)


@contextmanager
def context_attrs(*args: Any) -> Iterator[tuple[Attr, ...]]:
    """Add log attributes to the context for the duration of a ``with`` block."""
    token = add_context_attrs(*args)
    try:
        yield _context_attrs.get()
    finally:
        reset_context_attrs(token)


class MergePolicy(str, Enum):
    """Where context attributes go relative to a record's own attributes."""

    APPEND = "append"
    PREPEND = "prepend"


class ContextHandler:
    """Wraps a handler, adding context attributes to every record it handles.

    Context attributes with a key that the record already has are skipped,
    so attributes given directly to a log call take precedence.
    """

    __slots__ = ("wrapped", "policy")

    def __init__(self, wrapped: LogHandler, policy: MergePolicy = MergePolicy.APPEND) -> None:
        """
        Raises:
            HandlerMisuseError: If wrapped is None.
        """
        if wrapped is None:
            raise HandlerMisuseError("ContextHandler was given no handler to wrap")
        self.wrapped = wrapped
        self.policy = policy

    def enabled(self, level: int) -> bool:
        return self.wrapped.enabled(level)

    def handle(self, record: Record) -> None:
        existing = {attr.key for attr in record.attrs}
        extra = [attr for attr in get_context_attrs() if attr.key not in existing]
        if self.policy is MergePolicy.PREPEND:
            record = record.with_attrs_first(extra)
        else:
            record = record.with_attrs(extra)
        self.wrapped.handle(record)

    def with_attrs(self, attrs: Iterable[Attr]) -> "ContextHandler":
        return ContextHandler(self.wrapped.with_attrs(attrs), self.policy)

    def with_group(self, name: str) -> "ContextHandler":
        return ContextHandler(self.wrapped.with_group(name), self.policy)

    @property
    def colors_enabled(self) -> bool:
        return getattr(self.wrapped, "colors_enabled", False)
