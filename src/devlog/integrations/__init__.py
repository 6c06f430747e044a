"""Integrations with structlog and the standard library's logging module."""

from devlog.integrations.configure import setup_logging
from devlog.integrations.stdlib import DevlogHandler
from devlog.integrations.structlog_renderer import DevRenderer

__all__ = ["DevRenderer", "DevlogHandler", "setup_logging"]
