"""Input API for devlog: logging functions, context attributes and error logging.

The module-level functions log through the default logger. Until
``set_default`` is called, that is a devlog Handler on stderr, configured from
the environment (see ``devlog.config``).

    from devlog import log

    log.info("Server started", "port", 8000)
    log.error(err, "Request failed", "path", request.path)

    with log.context_attrs("request_id", request.id):
        log.warn("Slow request")  # includes request_id
"""

import sys
import threading
from typing import Any

from devlog.attrs import attrs_from_args
from devlog.config import get_config
from devlog.errors import HandlerMisuseError
from devlog.handler import Handler
from devlog.log.attrs import JSONValue, append_attrs, json
from devlog.log.context import (
    ContextHandler,
    MergePolicy,
    add_context_attrs,
    context_attrs,
    get_context_attrs,
    reset_context_attrs,
)
from devlog.log.error_chain import CAUSE_KEY, WrappedError, append_cause_error, append_cause_errors
from devlog.log.logger import Logger, _format
from devlog.record import Level, LogHandler

__all__ = [
    "CAUSE_KEY",
    "ContextHandler",
    "JSONValue",
    "Logger",
    "MergePolicy",
    "WrappedError",
    "add_context_attrs",
    "append_attrs",
    "context_attrs",
    "debug",
    "debug_json",
    "debugf",
    "default",
    "error",
    "error_message",
    "error_messagef",
    "errorf",
    "errors",
    "get_context_attrs",
    "info",
    "infof",
    "json",
    "log",
    "logf",
    "reset_context_attrs",
    "set_default",
    "warn",
    "warn_error",
    "warn_errorf",
    "warn_errors",
    "warnf",
]

_default: Logger | None = None
_default_lock = threading.Lock()


def set_default(handler: LogHandler) -> Logger:
    """Make handler the output of the module-level logging functions.

    The handler is wrapped in a ContextHandler, so context attributes are
    added to logs from other code that logs through it.

    Raises:
        HandlerMisuseError: If handler is None.
    """
    global _default
    if handler is None:
        raise HandlerMisuseError("set_default was given no handler")
    if not isinstance(handler, ContextHandler):
        handler = ContextHandler(handler)
    logger = Logger(handler)
    with _default_lock:
        _default = logger
    return logger


def default() -> Logger:
    """The logger used by the module-level logging functions."""
    global _default
    if _default is None:
        with _default_lock:
            if _default is None:
                handler = Handler(sys.stderr, get_config().to_options())
                _default = Logger(ContextHandler(handler))
    return _default


def log(level: int, message: str, *args: Any) -> None:
    default()._log(level, message, args, stacklevel=1)


def logf(level: int, message_format: str, *format_args: Any) -> None:
    logger = default()
    if logger.enabled(level):
        logger._emit(level, _format(message_format, format_args), [], stacklevel=1)


def info(message: str, *args: Any) -> None:
    """Log message at the INFO level, along with any given attributes."""
    default()._log(Level.INFO, message, args, stacklevel=1)


def infof(message_format: str, *format_args: Any) -> None:
    """Log a %-formatted message at the INFO level."""
    logger = default()
    if logger.enabled(Level.INFO):
        logger._emit(Level.INFO, _format(message_format, format_args), [], stacklevel=1)


def warn(message: str, *args: Any) -> None:
    default()._log(Level.WARN, message, args, stacklevel=1)


def warnf(message_format: str, *format_args: Any) -> None:
    logger = default()
    if logger.enabled(Level.WARN):
        logger._emit(Level.WARN, _format(message_format, format_args), [], stacklevel=1)


def debug(message: str, *args: Any) -> None:
    """Log message at the DEBUG level. DEBUG is disabled unless LOG_LEVEL allows it."""
    default()._log(Level.DEBUG, message, args, stacklevel=1)


def debugf(message_format: str, *format_args: Any) -> None:
    logger = default()
    if logger.enabled(Level.DEBUG):
        logger._emit(Level.DEBUG, _format(message_format, format_args), [], stacklevel=1)


def error(err: BaseException, message: str = "", *args: Any) -> None:
    """Log err at the ERROR level. See ``Logger.error``."""
    default()._log_error(Level.ERROR, err, message, args, stacklevel=1)


def errorf(err: BaseException, message_format: str, *format_args: Any) -> None:
    logger = default()
    if logger.enabled(Level.ERROR):
        message = _format(message_format, format_args)
        logger._emit(Level.ERROR, message, append_cause_error([], err), stacklevel=1)


def errors(message: str, *errs: BaseException) -> None:
    logger = default()
    if logger.enabled(Level.ERROR):
        logger._emit(Level.ERROR, message, append_cause_errors([], errs), stacklevel=1)


def error_message(message: str, *args: Any) -> None:
    default()._log(Level.ERROR, message, args, stacklevel=1)


def error_messagef(message_format: str, *format_args: Any) -> None:
    logger = default()
    if logger.enabled(Level.ERROR):
        logger._emit(Level.ERROR, _format(message_format, format_args), [], stacklevel=1)


def warn_error(err: BaseException, message: str = "", *args: Any) -> None:
    default()._log_error(Level.WARN, err, message, args, stacklevel=1)


def warn_errorf(err: BaseException, message_format: str, *format_args: Any) -> None:
    logger = default()
    if logger.enabled(Level.WARN):
        message = _format(message_format, format_args)
        logger._emit(Level.WARN, message, append_cause_error([], err), stacklevel=1)


def warn_errors(message: str, *errs: BaseException) -> None:
    logger = default()
    if logger.enabled(Level.WARN):
        logger._emit(Level.WARN, message, append_cause_errors([], errs), stacklevel=1)


def debug_json(value: Any, message: str = "", *args: Any) -> None:
    """Log value as prettified JSON at the DEBUG level. See ``Logger.debug_json``."""
    logger = default()
    if logger.enabled(Level.DEBUG):
        text = logger.build_json_message(value, message)
        logger._emit(Level.DEBUG, text, attrs_from_args(args), stacklevel=1)
