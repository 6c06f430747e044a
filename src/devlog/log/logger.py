"""Logger: the input side of devlog, producing records for an output handler."""

import sys
from datetime import datetime
from typing import Any

from devlog import color
from devlog.attrs import Attr, attrs_from_args
from devlog.buffer import safe_str
from devlog.errors import HandlerMisuseError
from devlog.jsonvalue import MESSAGE_JSON_COLORS, encode_json
from devlog.log.attrs import append_attrs
from devlog.log.context import get_context_attrs
from devlog.log.error_chain import append_cause_error, append_cause_errors, error_message_and_cause
from devlog.record import Level, LogHandler, Record, Source


def _format(message_format: str, format_args: tuple) -> str:
    if not format_args:
        return message_format
    return message_format % format_args


class Logger:
    """Produces log records for an output handler, with helpers for messages and errors.

    Attributes can be passed to the logging methods as key/value pairs, Attr
    objects, or a mix of the two:

        logger.info("user created", "id", 1, attr("name", "hermannm"))

    Context attributes (see ``devlog.log.context``) are added after the
    attributes given to the call.
    """

    __slots__ = ("_handler", "_json_colors")

    def __init__(self, handler: LogHandler, *, json_colors: bool | None = None) -> None:
        """
        Args:
            handler: Output handler for the produced records.
            json_colors: Whether ``debug_json`` colors its JSON. Defaults to
                the handler's color setting.

        Raises:
            HandlerMisuseError: If handler is None.
        """
        if handler is None:
            raise HandlerMisuseError("Logger was given no handler")
        self._handler = handler
        if json_colors is None:
            json_colors = bool(getattr(handler, "colors_enabled", False))
        self._json_colors = json_colors

    @property
    def handler(self) -> LogHandler:
        return self._handler

    def with_attrs(self, *args: Any) -> "Logger":
        """Return a Logger that includes the given attributes in each log."""
        attrs = attrs_from_args(args)
        if not attrs:
            return self
        return Logger(self._handler.with_attrs(attrs), json_colors=self._json_colors)

    def with_group(self, name: str) -> "Logger":
        """Return a Logger that nests further attributes under the given group name."""
        if not name:
            return self
        return Logger(self._handler.with_group(name), json_colors=self._json_colors)

    def enabled(self, level: int) -> bool:
        return self._handler.enabled(level)

    def log(self, level: int, message: str, *args: Any) -> None:
        self._log(level, message, args, stacklevel=1)

    def logf(self, level: int, message_format: str, *format_args: Any) -> None:
        if self._handler.enabled(level):
            self._emit(level, _format(message_format, format_args), [], stacklevel=1)

    def info(self, message: str, *args: Any) -> None:
        self._log(Level.INFO, message, args, stacklevel=1)

    def infof(self, message_format: str, *format_args: Any) -> None:
        if self._handler.enabled(Level.INFO):
            self._emit(Level.INFO, _format(message_format, format_args), [], stacklevel=1)

    def warn(self, message: str, *args: Any) -> None:
        self._log(Level.WARN, message, args, stacklevel=1)

    def warnf(self, message_format: str, *format_args: Any) -> None:
        if self._handler.enabled(Level.WARN):
            self._emit(Level.WARN, _format(message_format, format_args), [], stacklevel=1)

    def debug(self, message: str, *args: Any) -> None:
        self._log(Level.DEBUG, message, args, stacklevel=1)

    def debugf(self, message_format: str, *format_args: Any) -> None:
        if self._handler.enabled(Level.DEBUG):
            self._emit(Level.DEBUG, _format(message_format, format_args), [], stacklevel=1)

    def error(self, err: BaseException, message: str = "", *args: Any) -> None:
        """Log err at the ERROR level.

        If message is blank, the error's outermost message is the log message
        and the rest of its chain goes in a 'cause' attribute. Otherwise the
        whole error goes in 'cause'.
        """
        self._log_error(Level.ERROR, err, message, args, stacklevel=1)

    def errorf(self, err: BaseException, message_format: str, *format_args: Any) -> None:
        if self._handler.enabled(Level.ERROR):
            message = _format(message_format, format_args)
            self._emit(Level.ERROR, message, append_cause_error([], err), stacklevel=1)

    def errors(self, message: str, *errs: BaseException) -> None:
        """Log message at the ERROR level, with the given errors in a 'cause' attribute."""
        if self._handler.enabled(Level.ERROR):
            self._emit(Level.ERROR, message, append_cause_errors([], errs), stacklevel=1)

    def error_message(self, message: str, *args: Any) -> None:
        self._log(Level.ERROR, message, args, stacklevel=1)

    def error_messagef(self, message_format: str, *format_args: Any) -> None:
        if self._handler.enabled(Level.ERROR):
            self._emit(Level.ERROR, _format(message_format, format_args), [], stacklevel=1)

    def warn_error(self, err: BaseException, message: str = "", *args: Any) -> None:
        """Like ``error``, but at the WARN level."""
        self._log_error(Level.WARN, err, message, args, stacklevel=1)

    def warn_errorf(self, err: BaseException, message_format: str, *format_args: Any) -> None:
        if self._handler.enabled(Level.WARN):
            message = _format(message_format, format_args)
            self._emit(Level.WARN, message, append_cause_error([], err), stacklevel=1)

    def warn_errors(self, message: str, *errs: BaseException) -> None:
        if self._handler.enabled(Level.WARN):
            self._emit(Level.WARN, message, append_cause_errors([], errs), stacklevel=1)

    def debug_json(self, value: Any, message: str = "", *args: Any) -> None:
        """Log value as prettified JSON at the DEBUG level.

        If message is not blank, the JSON is prefixed by the message and a colon.
        """
        if self._handler.enabled(Level.DEBUG):
            text = self.build_json_message(value, message)
            self._emit(Level.DEBUG, text, attrs_from_args(args), stacklevel=1)

    def build_json_message(self, value: Any, message: str = "") -> str:
        colors = MESSAGE_JSON_COLORS if self._json_colors else None

        prefix = ""
        if message:
            if colors is not None:
                punctuation = (colors.punctuation + b":" + color.RESET).decode("utf-8")
                prefix = f"{message}{punctuation} "
            else:
                prefix = f"{message}: "

        try:
            encoded = encode_json(value, b"  ", colors)
        except Exception as e:  # noqa: BLE001 - custom serializers may raise anything
            return f"{prefix}{safe_str(value)} (!JSON:{type(e).__name__})"
        return prefix + encoded.decode("utf-8")

    def _log(self, level: int, message: str, args: tuple, stacklevel: int) -> None:
        if self._handler.enabled(level):
            self._emit(level, message, attrs_from_args(args), stacklevel + 1)

    def _log_error(
        self, level: int, err: BaseException, message: str, args: tuple, stacklevel: int
    ) -> None:
        if not self._handler.enabled(level):
            return
        attrs = attrs_from_args(args)
        if message:
            attrs = append_cause_error(attrs, err)
        else:
            message, attrs = error_message_and_cause(err, attrs)
        self._emit(level, message, attrs, stacklevel + 1)

    def _emit(self, level: int, message: str, attrs: list[Attr], stacklevel: int) -> None:
        # Frame 0 is this method, stacklevel counts the frames up to the caller of the public method
        frame = sys._getframe(stacklevel + 1)
        code = frame.f_code
        source = Source(
            function=f"{frame.f_globals.get('__name__', '?')}.{code.co_qualname}",
            file=code.co_filename,
            line=frame.f_lineno,
        )

        attrs = append_attrs(attrs, get_context_attrs())
        record = Record(datetime.now(), level, message, tuple(attrs), source)
        self._handler.handle(record)
