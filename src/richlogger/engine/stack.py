"""
On-demand call stack capture for log records.
"""

import os
import sys
import traceback
from typing import List

from richlogger.engine.records import UNKNOWN, StackFrame


class StackCapturer:
    """
    Capture a truncated view of the live call stack.

    The capturer always hides its own frame. ``engine_frames`` is the fixed
    number of frames the logging engine adds between the user's call and
    ``capture()``; callers wrapping the logger add their own layers through
    ``skip_frames`` on each call.

    Example:
        >>> capturer = StackCapturer(engine_frames=0)
        >>> frames = capturer.capture(depth=1)
        >>> len(frames)
        1
    """

    def __init__(self, engine_frames: int = 0):
        if engine_frames < 0:
            raise ValueError("engine_frames must be >= 0")
        self.engine_frames = engine_frames

    def capture(self, skip_frames: int = 0, depth: int = 3) -> List[StackFrame]:
        """
        Return up to ``depth`` frames, innermost first.

        Args:
            skip_frames: Additional frames to hide above the engine frames
            depth: Maximum number of frames to keep

        Returns:
            List[StackFrame]: Captured frames; empty when depth is 0 or the
            stack is shallower than the requested skip
        """
        if depth <= 0:
            return []

        try:
            start = sys._getframe(1 + self.engine_frames + max(skip_frames, 0))
        except ValueError:
            return []

        summaries = traceback.StackSummary.extract(
            traceback.walk_stack(start), limit=depth, lookup_lines=False
        )
        return [self._to_frame(summary) for summary in summaries]

    @staticmethod
    def _to_frame(summary: traceback.FrameSummary) -> StackFrame:
        file_name = os.path.basename(summary.filename) if summary.filename else ""
        return StackFrame(
            method=summary.name or UNKNOWN,
            file_name=file_name or UNKNOWN,
            line=summary.lineno or 0,
        )
