"""
Exception hierarchy for RichLogger.

The engine swallows its own runtime faults (a logging call must never crash
the host), so most of these exceptions are raised and caught internally and
end up as diagnostic messages. The one deliberate exception that escapes to
user code is NullArgumentError, a programmer-error check that logs itself
before propagating.

Exception Hierarchy:
    RichLoggerError (base)
    ├── ConfigurationError: Unusable engine configuration
    ├── LogFileError: Log file create/write/flush/delete failures
    └── NullArgumentError: A required argument was None

Example:
    >>> from richlogger.core.exceptions.custom_exceptions import throw_if_none
    >>> from richlogger.engine.records import CallerContext
    >>> def spawn(prefab):
    ...     throw_if_none(prefab, "prefab", CallerContext.here())
"""

from typing import TYPE_CHECKING, Any, Dict, Optional

from richlogger.engine.records import CallerContext

if TYPE_CHECKING:
    from richlogger.engine.dispatcher import Logger


class RichLoggerError(Exception):
    """
    Base exception class for all RichLogger errors.

    Attributes:
        message (str): Human-readable error description
        error_code (str): Machine-readable error identifier, defaults to the
            class name
        details (Dict[str, Any]): Additional contextual information
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}


class ConfigurationError(RichLoggerError):
    """
    Raised when engine configuration cannot be used.

    Settings-file problems never raise this; they fall back to the current
    values. It is reserved for configuration the engine cannot start with,
    such as an unknown change-detection backend.
    """

    pass


class LogFileError(RichLoggerError):
    """
    Raised inside the file sink when log file I/O fails.

    Always caught before it reaches a log call and reported through the
    diagnostic logger, together with the path in ``details``.
    """

    pass


class NullArgumentError(RichLoggerError):
    """
    Raised when a required argument is None.

    On construction the error logs itself as an ERROR record, attributed to
    ``caller``, and then propagates like any other exception. This is the
    only case where using the logging API intentionally raises.

    Attributes:
        argument_name (str): Name of the missing argument
        caller (CallerContext): Call site that performed the check
        context (Optional[str]): Free-text explanation appended to the message

    Example:
        >>> raise NullArgumentError("player", CallerContext.here(),
        ...                         context="spawn requires a player")
    """

    def __init__(
        self,
        argument_name: str,
        caller: CallerContext,
        context: Optional[str] = None,
        logger: Optional["Logger"] = None,
    ) -> None:
        message = f"Argument {argument_name} is null"
        if context:
            message = f"{message}: {context}"
        super().__init__(
            message,
            error_code="NULL_ARGUMENT",
            details={
                "argument_name": argument_name,
                "caller": caller.caller,
                "file_path": caller.file_path,
                "line": caller.line,
            },
        )
        self.argument_name = argument_name
        self.caller = caller
        self.context = context

        if logger is None:
            from richlogger.engine.dispatcher import get_default_logger

            logger = get_default_logger()
        logger.error(message, caller, skip_frames=1)


def throw_if_none(
    value: Any,
    argument_name: str,
    caller: CallerContext,
    context: Optional[str] = None,
    logger: Optional["Logger"] = None,
) -> None:
    """
    Raise NullArgumentError when ``value`` is None.

    Args:
        value: The argument to check
        argument_name: Name reported in the error message
        caller: Call site performing the check
        context: Optional free-text explanation
        logger: Logger that records the error, default logger if omitted

    Raises:
        NullArgumentError: If value is None
    """
    if value is not None:
        return
    raise NullArgumentError(argument_name, caller, context=context, logger=logger)
