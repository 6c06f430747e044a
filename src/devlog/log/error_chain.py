"""Structuring of exception chains into log messages and 'cause' attributes.

An exception chain like this:

    try:
        parse_config()
    except ValueError as e:
        raise WrappedError("failed to start server", e) from e

is logged by ``log.error(err)`` as:

    ERROR: failed to start server
      cause: invalid port

Exceptions contribute a wrapping message when they are a ``WrappedError``
(or otherwise have a ``wrapping_message()`` method), or when their message
ends with ``": "`` followed by the message of their ``__cause__``. Exception
groups contribute their message, and their sub-exceptions as a nested list.

Along the chain, attributes are collected from ``log_attrs()`` (attributes
attached to the exception) and ``context_attrs()`` (context attributes from
where the exception was created). Attributes that come earlier win when keys
collide: single-log attributes, then outer error attributes, then inner
ones, with each exception's context attributes after those of its causes.
"""

from typing import Any

from devlog.attrs import Attr, attr, attrs_from_args
from devlog.log.attrs import append_attrs
from devlog.log.context import get_context_attrs

CAUSE_KEY = "cause"


class WrappedError(Exception):
    """An exception that wraps a cause with a message and optional log attributes.

    Captures the context attributes that are set where it is created, so they
    are still logged after the exception has propagated out of that context.
    """

    def __init__(self, message: str, cause: BaseException | None = None, *attrs: Any) -> None:
        super().__init__(message)
        self.message = message
        self.__cause__ = cause
        self._log_attrs = tuple(attrs_from_args(attrs))
        self._context_attrs = get_context_attrs()

    def wrapping_message(self) -> str:
        return self.message

    def log_attrs(self) -> tuple[Attr, ...]:
        return self._log_attrs

    def context_attrs(self) -> tuple[Attr, ...]:
        return self._context_attrs

    def __str__(self) -> str:
        if self.__cause__ is None:
            return self.message
        return f"{self.message}: {_error_message(self.__cause__)}"


def _error_message(err: BaseException) -> str:
    return str(err) or type(err).__name__


def _is_group(err: BaseException) -> bool:
    return isinstance(err, BaseExceptionGroup)


def _unwrap_error(err: BaseException) -> tuple[BaseException, str, bool]:
    """Returns (cause, message, message_is_wrapping_message).

    If the flag is False, message is the full message of err.
    """
    cause = err.__cause__

    wrapping_message = getattr(err, "wrapping_message", None)
    if callable(wrapping_message):
        return cause, wrapping_message(), True

    message = _error_message(err)
    cause_message = _error_message(cause)

    # Common pattern: raise ValueError(f"wrapping message: {cause}") from cause
    end = len(message) - len(cause_message) - 2
    if end > 0 and message.endswith(cause_message) and message[end] == ":":
        if message[end + 1] in (" ", "\n"):
            return cause, message[:end], True

    return cause, message, False


def _unwrap_errors(err: BaseExceptionGroup) -> tuple[tuple[BaseException, ...], str, bool]:
    wrapping_message = getattr(err, "wrapping_message", None)
    if callable(wrapping_message):
        return err.exceptions, wrapping_message(), True
    if not err.message:
        return err.exceptions, _error_message(err), False
    return err.exceptions, err.message, True


def _append_error_attrs(attrs: list[Attr], err: BaseException) -> list[Attr]:
    log_attrs = getattr(err, "log_attrs", None)
    if callable(log_attrs):
        return append_attrs(attrs, attrs_from_args(log_attrs()))
    return attrs


def _append_error_context_attrs(attrs: list[Attr], err: BaseException) -> list[Attr]:
    context_attrs = getattr(err, "context_attrs", None)
    if callable(context_attrs):
        return append_attrs(attrs, context_attrs())
    return attrs


def _traverse_for_attrs(attrs: list[Attr], err: BaseException) -> list[Attr]:
    attrs = _append_error_attrs(attrs, err)
    if _is_group(err):
        for inner in err.exceptions:
            attrs = _traverse_for_attrs(attrs, inner)
    elif err.__cause__ is not None:
        attrs = _traverse_for_attrs(attrs, err.__cause__)
    return _append_error_context_attrs(attrs, err)


def error_message_and_cause(err: BaseException, attrs: list[Attr]) -> tuple[str, list[Attr]]:
    """Use the outermost message of err as log message, and the rest of the chain as cause."""
    attrs = _append_error_attrs(attrs, err)

    if _is_group(err):
        causes, message, is_wrapping = _unwrap_errors(err)
        if is_wrapping:
            attrs = append_cause_errors(attrs, causes)
        else:
            for inner in causes:
                attrs = _traverse_for_attrs(attrs, inner)
    elif err.__cause__ is not None:
        cause, message, is_wrapping = _unwrap_error(err)
        if is_wrapping:
            attrs = append_cause_error(attrs, cause)
        else:
            attrs = _traverse_for_attrs(attrs, cause)
    else:
        message = _error_message(err)

    attrs = _append_error_context_attrs(attrs, err)
    return message, attrs


def append_cause_error(attrs: list[Attr], err: BaseException) -> list[Attr]:
    """Add a 'cause' attribute for err in front of attrs, plus attributes from its chain."""
    error_log, attrs = _build_error_log(err, attrs)
    return _prepend_cause_attr(error_log, attrs)


def append_cause_errors(attrs: list[Attr], errs: "tuple[BaseException, ...] | list[BaseException]") -> list[Attr]:
    error_log, attrs = _build_error_list_log(errs, attrs, part_of_list=False)
    return _prepend_cause_attr(error_log, attrs)


def _prepend_cause_attr(error_log: Any, attrs: list[Attr]) -> list[Attr]:
    if error_log is None:
        return attrs
    return [attr(CAUSE_KEY, error_log), *attrs]


def _build_error_log(err: BaseException, attrs: list[Attr]) -> tuple[Any, list[Attr]]:
    attrs = _append_error_attrs(attrs, err)

    if _is_group(err):
        causes, message, is_wrapping = _unwrap_errors(err)
        if is_wrapping:
            list_log, attrs = _build_error_list_log(causes, attrs, part_of_list=False)
            error_log = [message, list_log] if list_log is not None else message
        else:
            error_log = message
            for inner in causes:
                attrs = _traverse_for_attrs(attrs, inner)
    elif err.__cause__ is not None:
        cause, message, is_wrapping = _unwrap_error(err)
        if is_wrapping:
            error_log, attrs = _append_error([message], attrs, cause, part_of_list=False)
        else:
            error_log = message
            attrs = _traverse_for_attrs(attrs, cause)
    else:
        error_log = _error_message(err)

    attrs = _append_error_context_attrs(attrs, err)
    return error_log, attrs


def _append_error(
    error_log: list[Any],
    attrs: list[Attr],
    err: BaseException,
    part_of_list: bool,
) -> tuple[list[Any], list[Attr]]:
    attrs = _append_error_attrs(attrs, err)

    if _is_group(err):
        causes, message, is_wrapping = _unwrap_errors(err)
        if is_wrapping:
            error_log.append(message)
            list_log, attrs = _build_error_list_log(causes, attrs, part_of_list)
            if list_log is not None:
                error_log.append(list_log)
        else:
            error_log.append(message)
            for inner in causes:
                attrs = _traverse_for_attrs(attrs, inner)
    elif err.__cause__ is not None:
        cause, message, is_wrapping = _unwrap_error(err)
        if is_wrapping:
            error_log.append(message)
            if part_of_list:
                # Nest the rest of the chain, so it reads as belonging to this list item
                nested, attrs = _append_error([], attrs, cause, part_of_list)
                error_log.append(nested)
            else:
                error_log, attrs = _append_error(error_log, attrs, cause, part_of_list)
        else:
            error_log.append(message)
            attrs = _traverse_for_attrs(attrs, cause)
    else:
        error_log.append(_error_message(err))

    attrs = _append_error_context_attrs(attrs, err)
    return error_log, attrs


def _build_error_list_log(
    errs: "tuple[BaseException, ...] | list[BaseException]",
    attrs: list[Attr],
    part_of_list: bool,
) -> tuple[Any, list[Attr]]:
    """Returns None as the error log if errs is empty."""
    if len(errs) == 0:
        return None, attrs
    if len(errs) == 1 and not part_of_list:
        return _build_error_log(errs[0], attrs)

    error_log: list[Any] = []
    for err in errs:
        error_log, attrs = _append_error(error_log, attrs, err, part_of_list=True)
    return error_log, attrs
