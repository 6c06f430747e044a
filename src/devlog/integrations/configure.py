"""Process-wide logging setup: structlog, the standard library, and devlog.

Development builds get devlog's human-readable output, production builds get
JSON lines. All three logging entry points (devlog.log, structlog and the
standard library's logging module) end up in the same format.
"""

import logging
import sys

import structlog

from devlog import log
from devlog.config import DevlogConfig, get_config
from devlog.handler import Handler
from devlog.integrations.stdlib import DevlogHandler
from devlog.integrations.structlog_renderer import DevRenderer
from devlog.record import parse_level


def setup_logging(
    json_output: bool | None = None,
    log_level: str | None = None,
    config: DevlogConfig | None = None,
) -> None:
    """Configure structlog, stdlib logging and devlog's default logger.

    Args:
        json_output: If True, output JSON (production). If False, devlog format (dev).
            Defaults to the LOG_JSON setting.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR). Defaults to the
            LOG_LEVEL setting.
        config: Configuration to use instead of the one from the environment.

    Raises:
        ValueError: If log_level is not a known level.
    """
    config = config or get_config()
    if json_output is None:
        json_output = config.log_json
    if log_level is not None:
        config = config.model_copy(update={"log_level": log_level.upper()})

    options = config.to_options()
    numeric_level = parse_level(config.log_level)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.format_exc_info,
    ]

    if json_output:
        processors.append(structlog.processors.TimeStamper(fmt="iso", utc=True))
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))
        processors.append(DevRenderer(options, sys.stdout))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Bridge stdlib logging, replacing any handlers set up before
    root = logging.getLogger()
    root.handlers = []
    root.setLevel(numeric_level)
    if json_output:
        stream_handler = logging.StreamHandler(sys.stdout)
        stream_handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(stream_handler)
    else:
        handler = Handler(sys.stdout, options)
        root.addHandler(DevlogHandler(handler))
        log.set_default(handler)
