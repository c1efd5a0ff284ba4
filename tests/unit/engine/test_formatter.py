"""
Tests for MessageFormatter rich and plain rendering.
"""

from datetime import datetime

import random

import pytest

from richlogger.engine.formatter import SEVERITY_COLORS, MessageFormatter, strip_markup
from richlogger.engine.records import CallerContext, LogRecord, Severity, StackFrame

CALLER = CallerContext("save_game", "/project/scripts/save_system.py", 87)
TIME = datetime(2024, 1, 2, 9, 5, 7, 45000)


def make_record(
    message="disk full", severity=Severity.ERROR, frames=None, caller=CALLER
):
    return LogRecord(
        severity=severity,
        message=message,
        caller=caller,
        pid=4242,
        timestamp=TIME,
        frames=frames or [],
    )


@pytest.fixture
def formatter():
    return MessageFormatter()


class TestPlainForm:
    """Test cases for the file (plain) form."""

    def test_header_layout(self, formatter):
        assert (
            formatter.render_plain(make_record())
            == "[PID:4242] [09:05:07.045] [ERROR] disk full"
        )

    @pytest.mark.parametrize("severity", list(Severity))
    def test_severity_name_is_upper_case(self, formatter, severity):
        plain = formatter.render_plain(make_record(severity=severity))
        assert f"[{severity.name}] disk full" in plain

    def test_stack_block(self, formatter):
        frames = [
            StackFrame("save_game", "save_system.py", 87),
            StackFrame("on_quit", "menu.py", 12),
        ]
        assert formatter.render_plain(make_record(frames=frames)) == (
            "[PID:4242] [09:05:07.045] [ERROR] disk full\n"
            "Stack trace:\n"
            "  at save_game in save_system.py:line 87\n"
            "  at on_quit in menu.py:line 12"
        )

    def test_no_frames_means_no_stack_block(self, formatter):
        assert "Stack trace" not in formatter.render_plain(make_record(frames=[]))


class TestRichForm:
    """Test cases for the display (rich markup) form."""

    def test_contains_color_and_tooltip(self, formatter):
        rich_form = formatter.render_rich(make_record())
        assert SEVERITY_COLORS[Severity.ERROR] in rich_form
        assert "[ERROR]" in rich_form
        assert "@hint=" in rich_form
        assert (
            "Class:save_system Method:save_game File:save_system.py Line:87"
            in rich_form
        )

    def test_tooltip_for_unknown_file(self, formatter):
        record = make_record(caller=CallerContext("main", "", 0))
        assert formatter.tooltip(record) == "Class:Unknown Method:main File: Line:0"

    def test_tooltip_brackets_are_neutralized(self, formatter):
        record = make_record(caller=CallerContext("<lambda>[0]", "a.py", 1))
        assert "[" not in formatter.tooltip(record)
        strip_markup(formatter.render_rich(record))

    def test_user_markup_is_escaped(self, formatter):
        rich_form = formatter.render_rich(make_record(message="[bold]hi[/bold]"))
        assert "\\[bold]" in rich_form

    def test_stack_block_is_grey(self, formatter):
        frames = [StackFrame("save_game", "save_system.py", 87)]
        rich_form = formatter.render_rich(make_record(frames=frames))
        assert "[#888888]Stack trace:[/]" in rich_form
        assert "[#888888]  at save_game in save_system.py:line 87[/]" in rich_form


class TestRoundTrip:
    """Stripping the rich form must give exactly the plain form."""

    @pytest.mark.parametrize(
        "message",
        [
            "disk full",
            "",
            "[red]looks like markup[/red]",
            "inventory[3] = [sword]",
            "path C:\\saves\\slot1",
            "ends with a backslash \\",
            "\\[escaped tag]",
            "tab\tseparated",
            "multi\nline",
            "emoji :smile: stays literal",
            "[@click=quit]no handlers[/]",
            "carriage\rreturn",
            "ünïcödé ✓",
            "a\\[b",
            "a\\\\[b",
            "\\\\[[",
            "[[a]",
            "[x]\\\\[y",
            "open [bracket only",
            "\\\\\\[/] three backslashes",
        ],
    )
    @pytest.mark.parametrize("severity", list(Severity))
    def test_strip_equals_plain(self, formatter, message, severity):
        record = make_record(message=message, severity=severity)
        rich_form, plain_form = formatter.render(record)
        assert strip_markup(rich_form) == plain_form

    def test_strip_equals_plain_with_stack(self, formatter):
        frames = [
            StackFrame("<module>", "[weird].py", 1),
            StackFrame("Unknown", "Unknown", 0),
        ]
        rich_form, plain_form = formatter.render(make_record(frames=frames))
        assert strip_markup(rich_form) == plain_form

    def test_strip_equals_plain_with_bracketed_frame_fields(self, formatter):
        frames = [StackFrame("x[y", "z]w.py", 4), StackFrame("\\\\[a", "b\\", 5)]
        rich_form, plain_form = formatter.render(make_record(frames=frames))
        assert strip_markup(rich_form) == plain_form

    def test_random_messages(self, formatter):
        alphabet = "ab[]\\/@#=: \t\n\r\x07\x08\x0b\x0c\x1b"
        rng = random.Random(20240102)
        mismatches = []
        for _ in range(5000):
            message = "".join(rng.choice(alphabet) for _ in range(rng.randint(0, 14)))
            rich_form, plain_form = formatter.render(make_record(message=message))
            if strip_markup(rich_form) != plain_form:
                mismatches.append(message)
        assert mismatches == []
