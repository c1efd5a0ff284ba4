"""
RichLogger - Severity-gated structured logging with runtime reload.

RichLogger formats log messages with color markup and caller context for an
interactive console, keeps plain-text copies in rotating per-process log
files, and picks up edits to its settings file while the host keeps
running.

Modules:
    core: Configuration, settings persistence, diagnostics and exceptions
    engine: Records, stack capture, formatting, sinks and the Logger
    cli: Command-line tools for editing settings and reading log files

Example:
    >>> from richlogger import CallerContext, get_default_logger
    >>> log = get_default_logger()
    >>> log.error("disk full", CallerContext.here())
    >>> log.update_settings(level="verbose")
"""

__version__ = "0.1.0"
__description__ = (
    "Structured logging engine with severity gating, rich console markup, "
    "rotating per-process log files and settings that reload at runtime."
)

from richlogger.core.config.settings import EngineConfig, LoggerSettings
from richlogger.core.exceptions.custom_exceptions import (
    NullArgumentError,
    throw_if_none,
)
from richlogger.engine.dispatcher import (
    Logger,
    get_default_logger,
    reset_default_logger,
)
from richlogger.engine.records import CallerContext, Severity

__all__ = [
    "CallerContext",
    "EngineConfig",
    "Logger",
    "LoggerSettings",
    "NullArgumentError",
    "Severity",
    "get_default_logger",
    "reset_default_logger",
    "throw_if_none",
]
