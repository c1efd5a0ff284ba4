"""
Value types shared by every stage of the logging engine.

This module defines the small, immutable data structures that flow through
the dispatcher, the stack capturer and the formatter. None of them perform
I/O; they exist so that each stage can be tested in isolation with plain
values.

Classes:
    Severity: Ordered log level, lower value means higher priority
    CallerContext: Caller name, source file and line supplied by the call site
    StackFrame: One captured frame of a call stack
    LogRecord: Everything needed to render a single log entry

Severity gating compares ordinals: a record is emitted only when its
severity value is less than or equal to the configured threshold.

Example:
    >>> from richlogger.engine.records import CallerContext, Severity
    >>> Severity.WARNING <= Severity.INFO
    True
    >>> ctx = CallerContext("load_level", "/game/world/loader.py", 42)
    >>> ctx.file_stem
    'loader'
"""

import os
import sys
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import List, Union

UNKNOWN = "Unknown"


class Severity(IntEnum):
    """
    Log severity levels ordered by priority.

    The integer value is the ordinal used for gating and for the
    ``LogLevel`` key of the settings file. ERROR is the most important
    level and VERBOSE the least.
    """

    ERROR = 0
    WARNING = 1
    INFO = 2
    DEBUG = 3
    VERBOSE = 4

    @classmethod
    def parse(cls, value: Union["Severity", int, str]) -> "Severity":
        """
        Convert an int, a digit string or a level name into a Severity.

        Args:
            value: Severity member, ordinal (0-4) or case-insensitive name

        Returns:
            Severity: The matching level

        Raises:
            ValueError: If the value does not name a known level
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid severity: {value!r}")
        if isinstance(value, int):
            return cls(value)
        text = str(value).strip()
        if text.lstrip("-").isdigit():
            return cls(int(text))
        try:
            return cls[text.upper()]
        except KeyError:
            names = ", ".join(member.name.lower() for member in cls)
            raise ValueError(
                f"Invalid severity: {value!r} (expected 0-4 or one of {names})"
            ) from None

    def allows(self, severity: "Severity") -> bool:
        """Return True when a record at ``severity`` passes this threshold."""
        return severity <= self


@dataclass(frozen=True)
class CallerContext:
    """
    Source location of a log call.

    The engine never inspects the caller's frame on its own; the call site
    passes this value explicitly. ``CallerContext.here()`` is a convenience
    for call sites that want Python to fill it in.

    Attributes:
        caller (str): Function or method name of the call site
        file_path (str): Path of the source file, may be empty
        line (int): Line number, 0 when unknown
    """

    caller: str = ""
    file_path: str = ""
    line: int = 0

    @classmethod
    def here(cls, depth: int = 0) -> "CallerContext":
        """
        Build a context describing the function that calls ``here()``.

        Args:
            depth: Extra frames to walk up, for helpers that wrap the call

        Returns:
            CallerContext: Location of the calling frame, or an empty
            context if the stack is not that deep
        """
        try:
            frame = sys._getframe(depth + 1)
        except ValueError:
            return cls()
        code = frame.f_code
        return cls(code.co_name, code.co_filename, frame.f_lineno)

    @property
    def file_name(self) -> str:
        return os.path.basename(self.file_path) if self.file_path else ""

    @property
    def file_stem(self) -> str:
        name = self.file_name
        return os.path.splitext(name)[0] if name else UNKNOWN


@dataclass(frozen=True)
class StackFrame:
    """One frame of a captured call stack."""

    method: str = UNKNOWN
    file_name: str = UNKNOWN
    line: int = 0


@dataclass(frozen=True)
class LogRecord:
    """
    A single log entry before rendering.

    Records are created per call and consumed synchronously by the
    formatter; only their rendered text is ever retained.

    Attributes:
        severity (Severity): Level of the entry
        message (str): Message text, possibly containing markup-like text
        caller (CallerContext): Where the entry was logged from
        pid (int): Identifier of the logging process
        timestamp (datetime): Local wall-clock time of the call
        frames (List[StackFrame]): Captured stack, innermost first
    """

    severity: Severity
    message: str
    caller: CallerContext
    pid: int = field(default_factory=os.getpid)
    timestamp: datetime = field(default_factory=datetime.now)
    frames: List[StackFrame] = field(default_factory=list)
