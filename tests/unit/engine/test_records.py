"""
Tests for severity ordering and caller context values.
"""

import pytest

from richlogger.engine.records import CallerContext, Severity


class TestSeverity:
    """Test cases for Severity."""

    def test_ordinals(self):
        assert [s.value for s in Severity] == [0, 1, 2, 3, 4]
        assert Severity.ERROR < Severity.VERBOSE

    @pytest.mark.parametrize("threshold", list(Severity))
    @pytest.mark.parametrize("severity", list(Severity))
    def test_allows_iff_ordinal_not_greater(self, severity, threshold):
        assert threshold.allows(severity) == (int(severity) <= int(threshold))

    @pytest.mark.parametrize(
        "raw, expected",
        [
            (1, Severity.WARNING),
            ("3", Severity.DEBUG),
            ("verbose", Severity.VERBOSE),
            (" Error ", Severity.ERROR),
            (Severity.INFO, Severity.INFO),
        ],
    )
    def test_parse(self, raw, expected):
        assert Severity.parse(raw) is expected

    @pytest.mark.parametrize("raw", [5, -1, "7", "loud", True, ""])
    def test_parse_rejects_unknown(self, raw):
        with pytest.raises(ValueError):
            Severity.parse(raw)


class TestCallerContext:
    """Test cases for CallerContext."""

    def test_file_name_and_stem(self):
        ctx = CallerContext("load", "/game/world/loader.py", 42)
        assert ctx.file_name == "loader.py"
        assert ctx.file_stem == "loader"

    def test_empty_file_path(self):
        ctx = CallerContext("load", "", 0)
        assert ctx.file_name == ""
        assert ctx.file_stem == "Unknown"

    def test_here_describes_calling_function(self):
        ctx = CallerContext.here()
        assert ctx.caller == "test_here_describes_calling_function"
        assert ctx.file_name == "test_records.py"
        assert ctx.line > 0

    def test_here_with_depth_skips_helper(self):
        def helper():
            return CallerContext.here(depth=1)

        ctx = helper()
        assert ctx.caller == "test_here_with_depth_skips_helper"

    def test_here_beyond_stack_is_empty(self):
        assert CallerContext.here(depth=10_000) == CallerContext()
