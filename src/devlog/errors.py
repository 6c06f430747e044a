"""Error hierarchy for devlog.

Only configuration mistakes are raised by devlog itself. Errors from writing
to a handler's output are not wrapped: they reach the caller of
``Handler.handle`` unchanged, and devlog never retries a write.

Example:
    try:
        handler.handle(record)
    except OSError:
        ...  # output stream failed, caller decides whether to drop or escalate
"""


class DevlogError(Exception):
    """Base exception for all devlog errors."""

    pass


class ConfigurationError(DevlogError):
    """Invalid handler or logger configuration, e.g. a missing output stream."""

    pass


class HandlerMisuseError(ConfigurationError):
    """A wrapper or logger was given no handler to forward to.

    This is a wiring mistake in the program, so it is raised immediately at
    construction instead of failing later when something is logged.
    """

    pass
