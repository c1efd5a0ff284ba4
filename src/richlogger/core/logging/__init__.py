"""
Diagnostic logging for the engine's own faults.

This is the fallback channel that keeps logging failures from crashing the
host: file I/O errors, unreadable settings and formatting faults are
reported here, on stderr, through structlog and a Rich handler.

Example:
    >>> from richlogger.core.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.warning("Failed to delete old log file", path="/tmp/x.log")
"""

from richlogger.core.logging.logger import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
