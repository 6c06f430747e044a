import inspect
import re

import pytest

from devlog import log
from devlog.attrs import attr
from devlog.errors import HandlerMisuseError
from devlog.handler import Handler, HandlerOptions
from devlog.log import (
    ContextHandler,
    Logger,
    MergePolicy,
    WrappedError,
    add_context_attrs,
    context_attrs,
    get_context_attrs,
    json,
    reset_context_attrs,
)
from devlog.record import Level, Record

_TIME_PREFIX = re.compile(r"^\[\d{2}:\d{2}:\d{2}\] ", re.MULTILINE)


def strip_time(output: str) -> str:
    return _TIME_PREFIX.sub("", output)


@pytest.fixture
def logger(make_handler):
    return Logger(make_handler(level=Level.DEBUG))


@pytest.fixture
def logged(output):
    return lambda: strip_time(output())


def wrapped_parse_error() -> WrappedError:
    try:
        try:
            raise ValueError("invalid port")
        except ValueError as e:
            raise WrappedError("failed to parse config", e, "file", "config.yaml") from e
    except WrappedError as e:
        return e


def test_info_with_attrs(logger, logged):
    logger.info("Server started", "port", 8000, attr("environment", "DEV"))
    assert logged() == "INFO: Server started\n  port: 8000\n  environment: DEV\n"


def test_record_has_timestamp(logger, output):
    logger.info("message")
    assert re.fullmatch(r"\[\d{2}:\d{2}:\d{2}\] INFO: message\n", output())


def test_bad_keys(logger, logged):
    logger.info("message", "dangling")
    logger.info("message", 5)
    assert logged() == "INFO: message\n  !BADKEY: dangling\nINFO: message\n  !BADKEY: 5\n"


def test_formatted_messages(logger, logged):
    logger.infof("Loaded %d items from %s", 3, "db")
    logger.warnf("No arguments: 100%")
    logger.debugf("%s", "debug")
    logger.error_messagef("failed after %d tries", 3)
    assert logged() == (
        "INFO: Loaded 3 items from db\n"
        "WARN: No arguments: 100%\n"
        "DEBUG: debug\n"
        "ERROR: failed after 3 tries\n"
    )


def test_levels_below_minimum_are_skipped(make_handler, sink):
    logger = Logger(make_handler(level=Level.WARN))
    logger.info("info")
    logger.debug("debug")
    logger.debug_json({"a": 1})
    logger.infof("%s", "info")

    assert sink.getvalue() == b""
    assert not logger.enabled(Level.INFO)


def test_log_with_custom_level(logger, logged):
    logger.log(Level.INFO + 2, "notice")
    logger.logf(Level.ERROR, "code %d", 7)
    assert logged() == "INFO+2: notice\nERROR: code 7\n"


def test_with_attrs_and_group(logger, logged):
    logger.with_attrs("service", "api").with_group("request").info("Handled", "id", 42)
    assert logged() == "INFO: Handled\n  request:\n    id: 42\n  service: api\n"


def test_with_nothing_returns_same_logger(logger):
    assert logger.with_attrs() is logger
    assert logger.with_group("") is logger


def test_none_handler_is_rejected():
    with pytest.raises(HandlerMisuseError):
        Logger(None)
    with pytest.raises(HandlerMisuseError):
        ContextHandler(None)


def test_json_attr(logger, logged):
    logger.info("User created", json("user", {"id": 1}))
    assert logged() == 'INFO: User created\n  user: {\n    "id": 1\n  }\n'


def test_debug_json(logger, logged):
    logger.debug_json({"id": 1}, "Response", "status", 200)
    logger.debug_json([])
    assert logged() == 'DEBUG: Response: {\n    "id": 1\n  }\n  status: 200\nDEBUG: []\n'


def test_debug_json_falls_back_on_unserializable_value(logger, logged):
    class Opaque:
        def __str__(self):
            return "opaque"

    logger.debug_json(Opaque(), "Value")
    assert logged().startswith("DEBUG: Value: opaque (!JSON:")


def test_debug_json_with_failing_str(logger, logged):
    class Broken:
        def __str__(self):
            raise RuntimeError("boom")

    logger.debug_json(Broken(), "Value")
    assert logged().startswith("DEBUG: Value: !ERROR:RuntimeError: boom (!JSON:")


def test_source_points_at_caller(make_handler, output):
    logger = Logger(make_handler(add_source=True))
    frame = inspect.currentframe()
    logger.info("Located")
    expected_line = frame.f_lineno - 1

    last_line = output().splitlines()[-1]
    assert last_line.startswith("  source: ")
    assert ".test_source_points_at_caller (" in last_line
    assert last_line.endswith(f"test_log.py:{expected_line})")


class TestErrors:
    def test_error_with_message_puts_chain_in_cause(self, logger, logged):
        logger.error(wrapped_parse_error(), "Startup failed")
        assert logged() == (
            "ERROR: Startup failed\n"
            "  cause:\n"
            "    - failed to parse config\n"
            "    - invalid port\n"
            "  file: config.yaml\n"
        )

    def test_error_without_message_uses_outer_message(self, logger, logged):
        logger.error(wrapped_parse_error())
        assert logged() == "ERROR: failed to parse config\n  cause: invalid port\n  file: config.yaml\n"

    def test_single_log_attrs_come_before_error_attrs(self, logger, logged):
        logger.error(wrapped_parse_error(), "", "file", "override.yaml", "user", 7)
        assert logged() == (
            "ERROR: failed to parse config\n"
            "  cause: invalid port\n"
            "  file: override.yaml\n"
            "  user: 7\n"
        )

    def test_message_ending_with_cause_is_a_wrapping_message(self, logger, logged):
        try:
            try:
                raise ConnectionError("connection refused")
            except ConnectionError as e:
                raise RuntimeError(f"db query failed: {e}") from e
        except RuntimeError as e:
            logger.error(e)

        assert logged() == "ERROR: db query failed\n  cause: connection refused\n"

    def test_unrelated_cause_message_is_not_split(self, logger, logged):
        try:
            try:
                raise KeyError("user")
            except KeyError as e:
                raise RuntimeError("lookup failed") from e
        except RuntimeError as e:
            logger.error(e, "Request failed")

        assert logged() == "ERROR: Request failed\n  cause: lookup failed\n"

    def test_error_without_cause(self, logger, logged):
        logger.error(ValueError("bad input"))
        logger.error(ValueError())
        assert logged() == "ERROR: bad input\nERROR: ValueError\n"

    def test_exception_group(self, logger, logged):
        group = ExceptionGroup("multiple failures", [ValueError("first"), TypeError("second")])
        logger.error(group)
        assert logged() == "ERROR: multiple failures\n  cause:\n    - first\n    - second\n"

    def test_errors(self, logger, logged):
        logger.errors("Workers failed", ValueError("worker 1"), ValueError("worker 2"))
        logger.errors("One worker failed", ValueError("worker 1"))
        assert logged() == (
            "ERROR: Workers failed\n  cause:\n    - worker 1\n    - worker 2\n"
            "ERROR: One worker failed\n  cause: worker 1\n"
        )

    def test_wrapped_errors_in_list_are_nested(self, logger, logged):
        inner = ValueError("timeout")
        wrapped = WrappedError("worker 2 failed", inner)
        logger.errors("Workers failed", ValueError("worker 1"), wrapped)
        assert logged() == (
            "ERROR: Workers failed\n"
            "  cause:\n"
            "    - worker 1\n"
            "    - worker 2 failed\n"
            "      - timeout\n"
        )

    def test_warn_variants(self, logger, logged):
        logger.warn_error(ValueError("disk slow"), "Degraded")
        logger.warn_errorf(ValueError("disk slow"), "Degraded %d", 2)
        logger.warn_errors("Degraded", ValueError("disk slow"))
        assert logged() == (
            "WARN: Degraded\n  cause: disk slow\n"
            "WARN: Degraded 2\n  cause: disk slow\n"
            "WARN: Degraded\n  cause: disk slow\n"
        )

    def test_wrapped_error_str(self):
        assert str(wrapped_parse_error()) == "failed to parse config: invalid port"
        assert str(WrappedError("no cause")) == "no cause"

    def test_error_keeps_context_attrs_from_where_it_was_raised(self, logger, logged):
        with context_attrs("user_id", 7):
            err = WrappedError("permission denied")
        logger.error(err)
        assert logged() == "ERROR: permission denied\n  user_id: 7\n"


class TestContext:
    def test_context_attrs_come_after_record_attrs(self, logger, logged):
        with context_attrs("request_id", "abc"):
            logger.info("message", "key", 1)
        logger.info("outside")
        assert logged() == "INFO: message\n  key: 1\n  request_id: abc\nINFO: outside\n"

    def test_record_attrs_win_over_context_attrs(self, logger, logged):
        with context_attrs("key", "context"):
            logger.info("message", "key", "record")
        assert logged() == "INFO: message\n  key: record\n"

    def test_newer_context_attrs_replace_older(self):
        first = add_context_attrs("a", 1, "b", 2)
        second = add_context_attrs("a", 3)
        try:
            assert get_context_attrs() == (attr("a", 3), attr("b", 2))
        finally:
            reset_context_attrs(second)
            reset_context_attrs(first)
        assert get_context_attrs() == ()

    @pytest.mark.parametrize(
        ("policy", "expected"),
        [
            (MergePolicy.APPEND, "INFO: m\n  key: 1\n  context: 2\n"),
            (MergePolicy.PREPEND, "INFO: m\n  context: 2\n  key: 1\n"),
        ],
    )
    def test_context_handler_policies(self, make_handler, output, policy, expected):
        handler = ContextHandler(make_handler(), policy)
        with context_attrs("context", 2, "key", "skipped"):
            handler.handle(Record(None, Level.INFO, "m", (attr("key", 1),)))
        assert output() == expected

    def test_context_handler_derives_wrapped_handlers(self, make_handler, output):
        handler = ContextHandler(make_handler()).with_attrs([attr("bound", 1)]).with_group("g")
        assert isinstance(handler, ContextHandler)
        handler.handle(Record(None, Level.INFO, "m", (attr("key", 1),)))
        assert output() == "INFO: m\n  g:\n    key: 1\n  bound: 1\n"


class TestDefaultLogger:
    def test_module_functions_use_default(self, default_logger, make_handler, logged):
        log.set_default(make_handler(level=Level.DEBUG))
        log.info("Server started", "port", 8000)
        log.warnf("%d retries", 2)
        log.error(ValueError("bad"), "Failed")
        log.errors("Failed", ValueError("a"), ValueError("b"))
        log.debug("debugging")
        assert logged() == (
            "INFO: Server started\n  port: 8000\n"
            "WARN: 2 retries\n"
            "ERROR: Failed\n  cause: bad\n"
            "ERROR: Failed\n  cause:\n    - a\n    - b\n"
            "DEBUG: debugging\n"
        )

    def test_set_default_wraps_in_context_handler(self, default_logger, make_handler):
        logger = log.set_default(make_handler())
        assert isinstance(logger.handler, ContextHandler)
        assert log.default() is logger

    def test_set_default_rejects_none(self, default_logger):
        with pytest.raises(HandlerMisuseError):
            log.set_default(None)

    def test_default_is_created_lazily(self, default_logger, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        log._default = None

        logger = log.default()

        assert isinstance(logger.handler, ContextHandler)
        assert isinstance(logger.handler.wrapped, Handler)
        assert not logger.enabled(Level.WARN)

    def test_module_source_points_at_caller(self, default_logger, sink):
        log.set_default(Handler(sink, HandlerOptions(add_source=True, disable_colors=True)))
        frame = inspect.currentframe()
        log.info("Located")
        expected_line = frame.f_lineno - 1

        assert sink.getvalue().decode().endswith(f"test_log.py:{expected_line})\n")
