"""
Rendering of log records into display markup and plain text.

Every record is rendered twice:

- the rich form, in rich console markup, with a color per severity, a
  ``@hint`` tooltip on the severity tag carrying the caller context, and a
  grey stack-trace block. This is what the display sink receives.
- the plain form, with no markup at all. This is what goes to the log file.

Rich form layout::

    [#AAAAAA][PID:4242] [13:37:00.123][/] [#FF5555][@hint='Class:loader
    Method:load File:loader.py Line:42'][ERROR][/][/] disk full

Plain form of the same record::

    [PID:4242] [13:37:00.123] [ERROR] disk full

Running the rich form through ``strip_markup()`` yields exactly the plain
form. User text is escaped in the rich form, so a message such as
``"[red]not a tag[/red]"`` reaches the file unchanged.
"""

from typing import Dict, List, Tuple

from rich.control import strip_control_codes
from rich.markup import RE_TAGS
from rich.text import Text

from richlogger.engine.records import LogRecord, Severity, StackFrame

TIMESTAMP_COLOR = "#AAAAAA"
STACK_COLOR = "#888888"

SEVERITY_COLORS: Dict[Severity, str] = {
    Severity.ERROR: "#FF5555",
    Severity.WARNING: "#FFAA55",
    Severity.INFO: "#55AAFF",
    Severity.DEBUG: "#55FF55",
    Severity.VERBOSE: "#AAAAAA",
}


def strip_markup(markup: str) -> str:
    """Remove every markup tag from a rich form string."""
    return Text.from_markup(markup, emoji=False).plain


def escape_markup(text: str) -> str:
    """
    Escape text so that rich renders every character of it verbatim.

    rich.markup.escape() only escapes brackets that look like tags, but the
    parser also turns ``\\[`` into ``[`` everywhere else. Tag-like brackets
    get an odd run of backslashes (halved by the parser, the odd one marks
    the escape); every other bracket gets one backslash of its own.

    The result must not be followed directly by a tag, since trailing
    backslashes are left as they are.
    """
    parts: List[str] = []
    position = 0
    for match in RE_TAGS.finditer(text):
        start, end = match.span()
        escapes = match.group(2)
        parts.append(_escape_brackets(text[position:start]))
        parts.append("\\" * (2 * len(escapes) + 1))
        parts.append(text[start + len(escapes) : end])
        position = end
    parts.append(_escape_brackets(text[position:]))
    return "".join(parts)


def _escape_brackets(text: str) -> str:
    return text.replace("[", "\\[")


class MessageFormatter:
    """
    Render LogRecord instances.

    The formatter is stateless and safe to share between threads.

    Example:
        >>> formatter = MessageFormatter()
        >>> rich_form, plain_form = formatter.render(record)
        >>> plain_form
        '[PID:4242] [13:37:00.123] [ERROR] disk full'
    """

    def render(self, record: LogRecord) -> Tuple[str, str]:
        """Return ``(rich_form, plain_form)`` for a record."""
        return self.render_rich(record), self.render_plain(record)

    def render_rich(self, record: LogRecord) -> str:
        """Render the markup-annotated form for interactive display."""
        color = SEVERITY_COLORS.get(record.severity, "#FFFFFF")
        header = (
            f"[{TIMESTAMP_COLOR}]{escape_markup(self._prefix(record))}[/] "
            f"[{color}][@hint={self.tooltip(record)!r}]"
            f"{escape_markup(self._level_tag(record))}[/][/] "
            f"{escape_markup(record.message)}"
        )
        if not record.frames:
            return header

        lines = [f"[{STACK_COLOR}]Stack trace:[/]"]
        for frame in record.frames:
            lines.append(f"[{STACK_COLOR}]{escape_markup(self._frame_line(frame))}[/]")
        return header + "\n" + "\n".join(lines)

    def render_plain(self, record: LogRecord) -> str:
        """Render the markup-free form persisted to the log file."""
        header = (
            f"{self._prefix(record)} {self._level_tag(record)} "
            f"{strip_control_codes(record.message)}"
        )
        if not record.frames:
            return header
        lines: List[str] = ["Stack trace:"]
        lines.extend(
            strip_control_codes(self._frame_line(frame)) for frame in record.frames
        )
        return header + "\n" + "\n".join(lines)

    def tooltip(self, record: LogRecord) -> str:
        """
        Caller context shown when hovering the severity tag.

        Square brackets would terminate the markup tag, so they are replaced
        by parentheses; the tooltip never reaches the plain form.
        """
        caller = record.caller
        text = (
            f"Class:{caller.file_stem} Method:{caller.caller} "
            f"File:{caller.file_name} Line:{caller.line}"
        )
        return text.replace("[", "(").replace("]", ")")

    @staticmethod
    def _prefix(record: LogRecord) -> str:
        ts = record.timestamp
        millis = ts.microsecond // 1000
        return f"[PID:{record.pid}] [{ts:%H:%M:%S}.{millis:03d}]"

    @staticmethod
    def _level_tag(record: LogRecord) -> str:
        return f"[{record.severity.name}]"

    @staticmethod
    def _frame_line(frame: StackFrame) -> str:
        return f"  at {frame.method} in {frame.file_name}:line {frame.line}"
