"""Logger for devlog's own diagnostics.

Diagnostics go through structlog, so applications decide where they end up.
Render paths only log at debug level, and never log the value being rendered.
"""

import structlog


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a logger instance bound with the module name.

    Args:
        name: Logger name (typically __name__ from calling module).

    Returns:
        Structlog logger with module name context.
    """
    return structlog.get_logger(name)
