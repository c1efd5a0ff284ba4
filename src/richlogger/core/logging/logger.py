"""
Diagnostic logging for the RichLogger engine itself.

The engine must never raise out of a log call, so every internal fault
(settings file errors, log file I/O failures, formatting errors) is
reported here instead. This is the low-level fallback channel: it writes to
stderr through the standard library and never touches the engine's own
display sink or log files.

RichLogger is embedded in host applications, so nothing here touches
global logging state: structlog loggers are wrapped with their own
processor chain instead of going through ``structlog.configure()``, and the
Rich handler is attached to the ``richlogger`` stdlib logger only.

Functions:
    setup_logging(level): Set the diagnostic level and install the handler
    get_logger(name): Get a structured logger routed to the diagnostic channel

Example:
    >>> from richlogger.core.logging.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.warning("Log flush failed", path="/tmp/logger.log", error="EIO")
"""

import logging
from typing import Union

import structlog
from rich.console import Console
from rich.logging import RichHandler

DIAGNOSTIC_LOGGER_NAME = "richlogger"

_PROCESSORS = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
    structlog.dev.ConsoleRenderer(colors=False),
]

_handler_installed = False


def setup_logging(level: Union[str, int] = "WARNING") -> None:
    """
    Initialize the diagnostic logging pipeline.

    Sets the level of the ``richlogger`` logger and attaches a single Rich
    handler on stderr to it. The root logger and the global structlog
    configuration of the host application are left alone so that embedding
    RichLogger never changes how the host's own logging behaves.

    Args:
        level: Minimum level for engine diagnostics (name or number)
    """
    global _handler_installed

    base = logging.getLogger(DIAGNOSTIC_LOGGER_NAME)
    base.setLevel(level)

    if not _handler_installed:
        rich_handler = RichHandler(
            console=Console(stderr=True),
            show_time=True,
            show_level=True,
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        )
        base.addHandler(rich_handler)
        base.propagate = False
        _handler_installed = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger routed to the diagnostic channel.

    Args:
        name (str): Logger name, typically __name__ of the calling module

    Returns:
        structlog.stdlib.BoundLogger: Logger with RichLogger's own processors

    Note:
        If the diagnostic handler hasn't been installed yet, this function
        will automatically call setup_logging() with the default level.
    """
    if not _handler_installed:
        setup_logging()
    return structlog.wrap_logger(
        logging.getLogger(name),
        processors=_PROCESSORS,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        cache_logger_on_first_use=True,
    )
