"""Bridge from the standard library's logging module to a devlog handler."""

import logging
from datetime import datetime

from devlog.attrs import Attr, attr
from devlog.errors import HandlerMisuseError
from devlog.log.error_chain import append_cause_error
from devlog.record import LogHandler, Record, Source

# Attributes every LogRecord has. Anything else was passed through ``extra``.
_DEFAULT_RECORD_ATTRS: frozenset[str] = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}


class DevlogHandler(logging.Handler):
    """logging.Handler that forwards records to a devlog handler.

    Fields passed with ``extra`` become attributes, and exceptions from
    ``logger.exception()`` become a 'cause' attribute with the exception
    chain, followed by the traceback.

    Write errors are reported through ``logging.Handler.handleError``, like
    any other logging handler.
    """

    def __init__(self, handler: LogHandler, level: int = logging.NOTSET) -> None:
        if handler is None:
            raise HandlerMisuseError("DevlogHandler was given no devlog handler")
        super().__init__(level)
        self.devlog_handler = handler

    def to_record(self, record: logging.LogRecord) -> Record:
        attrs: list[Attr] = [
            attr(key, value)
            for key, value in record.__dict__.items()
            if key not in _DEFAULT_RECORD_ATTRS
        ]

        if record.exc_info and record.exc_info[1] is not None:
            attrs = append_cause_error(attrs, record.exc_info[1])
            attrs.append(attr("traceback", self.formatException(record.exc_info)))
        if record.stack_info:
            attrs.append(attr("stack", record.stack_info))

        return Record(
            time=datetime.fromtimestamp(record.created),
            level=record.levelno,
            message=record.getMessage(),
            attrs=tuple(attrs),
            source=Source(
                function=f"{record.module}.{record.funcName}",
                file=record.pathname,
                line=record.lineno,
            ),
        )

    def formatException(self, exc_info) -> str:
        formatter = self.formatter or logging.Formatter()
        return formatter.formatException(exc_info)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.devlog_handler.handle(self.to_record(record))
        except Exception:
            self.handleError(record)
