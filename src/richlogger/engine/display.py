"""
Interactive display sinks.

The engine hands the rich form of every emitted record to a display sink
through a single ``write(text)`` call. How the markup is rendered is the
sink's business: the default sink prints it to a terminal with rich, an
embedding host can supply its own object with a ``write`` method.
"""

from typing import List, Optional, Protocol, runtime_checkable

from rich.console import Console


@runtime_checkable
class DisplaySink(Protocol):
    """Anything with a ``write(str)`` method."""

    def write(self, text: str) -> None:
        ...


class RichConsoleSink:
    """Print rich markup to a terminal."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(highlight=False, emoji=False)

    def write(self, text: str) -> None:
        self.console.print(
            text, markup=True, emoji=False, highlight=False, soft_wrap=True
        )


class NullDisplaySink:
    """Discard everything; used by headless hosts that only want log files."""

    def write(self, text: str) -> None:
        pass


class MemoryDisplaySink:
    """Keep every written string in memory, for tests and in-game consoles."""

    def __init__(self):
        self.lines: List[str] = []

    def write(self, text: str) -> None:
        self.lines.append(text)
