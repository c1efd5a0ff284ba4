"""
The logging engine: records, stack capture, formatting, sinks and the
Logger dispatcher.
"""

from richlogger.engine.display import (
    DisplaySink,
    MemoryDisplaySink,
    NullDisplaySink,
    RichConsoleSink,
)
from richlogger.engine.file_sink import FileSink
from richlogger.engine.formatter import MessageFormatter, strip_markup
from richlogger.engine.records import CallerContext, LogRecord, Severity, StackFrame
from richlogger.engine.stack import StackCapturer

__all__ = [
    "CallerContext",
    "DisplaySink",
    "FileSink",
    "LogRecord",
    "MemoryDisplaySink",
    "MessageFormatter",
    "NullDisplaySink",
    "RichConsoleSink",
    "Severity",
    "StackCapturer",
    "StackFrame",
    "strip_markup",
]
