"""Print sample logs in devlog's format, to check how they look in a terminal.

Run with: python scripts/demo.py
Debug:    python scripts/demo.py --level DEBUG
Source:   python scripts/demo.py --source
Full time: python scripts/demo.py --time-format full
Stdlib:   python scripts/demo.py --bridges

Settings not given as flags are read from the environment (LOG_LEVEL,
LOG_FORCE_COLORS, ...) or a .env file.

Exit codes:
  0 = success (sample logs on stderr)
  1 = error (message on stderr)
"""

import argparse
import logging
import sys
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

from devlog import Handler, TimeFormat, get_config  # noqa: E402
from devlog.attrs import group  # noqa: E402
from devlog.log import Logger, WrappedError, context_attrs, json  # noqa: E402


@dataclass
class Event:
    id: int
    name: str
    tags: list[str] = field(default_factory=list)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Print sample devlog output")
    parser.add_argument("--level", help="Minimum log level (default: LOG_LEVEL or INFO)")
    parser.add_argument("--source", action="store_true", help="Add source locations")
    parser.add_argument(
        "--time-format",
        choices=[fmt.value for fmt in TimeFormat],
        help="Timestamp format (default: LOG_TIME_FORMAT or short)",
    )
    parser.add_argument(
        "--bridges",
        action="store_true",
        help="Also log through structlog and the standard library",
    )
    return parser.parse_args(argv)


def _log_samples(logger: Logger) -> None:
    logger.info("Server started", "port", 8000, "environment", "DEV")

    request_logger = logger.with_attrs("service", "api").with_group("request")
    request_logger.info("Handled request", "id", 42, "path", "/events")

    logger.info("Event tags", "tags", ["first", "second", ["nested", "list"]], "single", ["only"])
    logger.info("Event created", json("event", Event(1, "launch", ["public"])))
    logger.debug("Cache miss", group("cache", "key", "event:1", "ttl_seconds", 60))
    logger.debug_json({"id": 1, "status": "ok"}, "Response body")

    with context_attrs("user_id", 7):
        try:
            try:
                raise ValueError("invalid port")
            except ValueError as e:
                raise WrappedError("failed to parse config", e, "file", "config.yaml") from e
        except WrappedError as e:
            logger.error(e, "Startup failed")

    logger.warn_errors(
        "Some workers failed",
        ConnectionError("worker 1 unreachable"),
        TimeoutError("worker 2 timed out"),
    )


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    config = get_config()
    updates = {}
    if args.level:
        updates["log_level"] = args.level.upper()
    if args.source:
        updates["log_add_source"] = True
    if args.time_format:
        updates["log_time_format"] = TimeFormat(args.time_format)
    config = config.model_copy(update=updates)

    try:
        handler = Handler(sys.stderr, config.to_options())
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    _log_samples(Logger(handler))

    if args.bridges:
        from devlog.integrations import setup_logging
        from devlog.logging import get_logger

        setup_logging(json_output=False, config=config)
        get_logger("demo").info("structlog_event", count=3, details={"retry": True})
        logging.getLogger("demo.stdlib").warning("Disk almost full", extra={"percent": 91})

    return 0


if __name__ == "__main__":
    sys.exit(main())
