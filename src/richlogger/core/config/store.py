"""
Persistence of LoggerSettings in the shared key-value settings file.

The settings file is a small INI document with a single ``[Logger]``
section. It is the source of truth across process restarts and across
processes sharing the file: the consumer process reloads it while running,
and any other process (the ``richlogger config`` CLI, an editor, a text
editor) may rewrite it at any time.

File Format:
    [Logger]
    LogLevel = 2
    IncludeStackTraces = false
    StackTraceDepth = 3
    LogToFile = true

Loading is a merge: only keys that are present and valid overwrite the
values passed in; everything else keeps its current value. Saving always
writes every recognized key.
"""

import configparser
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Union

from richlogger.core.config.settings import LoggerSettings
from richlogger.core.logging.logger import get_logger
from richlogger.engine.records import Severity

logger = get_logger(__name__)

SECTION = "Logger"


def _parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in ("true", "1", "yes", "on"):
        return True
    if value in ("false", "0", "no", "off"):
        return False
    raise ValueError(f"not a boolean: {raw!r}")


def _parse_depth(raw: str) -> int:
    depth = int(raw.strip())
    if depth < 0:
        raise ValueError(f"stack trace depth must be >= 0, got {depth}")
    return depth


# file key -> (model field, parser, serializer)
_KEYS: Dict[str, Any] = {
    "LogLevel": ("level", Severity.parse, lambda v: str(int(v))),
    "IncludeStackTraces": (
        "include_stack_traces",
        _parse_bool,
        lambda v: str(v).lower(),
    ),
    "StackTraceDepth": ("stack_trace_depth", _parse_depth, str),
    "LogToFile": ("log_to_file", _parse_bool, lambda v: str(v).lower()),
}


class SettingsStore:
    """
    Load and save LoggerSettings snapshots.

    The store itself is stateless apart from the file path; callers own the
    in-memory snapshot and pass it to ``load()`` to be merged with whatever
    the file contains.

    Attributes:
        path (Path): Location of the settings file

    Example:
        >>> store = SettingsStore("/tmp/logger_settings.cfg")
        >>> settings = store.initialize()          # load + self-heal
        >>> store.save(settings.model_copy(update={"log_to_file": False}))
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def last_modified(self) -> Optional[int]:
        """Return the file's mtime in nanoseconds, or None if it is missing."""
        try:
            return os.stat(self.path).st_mtime_ns
        except OSError:
            return None

    def load(self, current: Optional[LoggerSettings] = None) -> LoggerSettings:
        """
        Merge the file's values over ``current``.

        A missing or unreadable file, a missing section, a missing key and
        an invalid value all leave the corresponding current value in place.
        Invalid values are reported through the diagnostic logger.

        Args:
            current: Snapshot to merge into, defaults to LoggerSettings()

        Returns:
            LoggerSettings: A new snapshot; ``current`` is never modified
        """
        current = current or LoggerSettings()

        parser = configparser.ConfigParser(interpolation=None)
        parser.optionxform = str  # keep key case
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                parser.read_file(f)
        except FileNotFoundError:
            return current
        except (OSError, UnicodeDecodeError, configparser.Error) as e:
            logger.warning(f"Failed to read logger settings {self.path}: {e}")
            return current

        if not parser.has_section(SECTION):
            return current

        updates: Dict[str, Any] = {}
        for key, (field_name, parse, _) in _KEYS.items():
            if not parser.has_option(SECTION, key):
                continue
            raw = parser.get(SECTION, key)
            try:
                updates[field_name] = parse(raw)
            except ValueError as e:
                logger.warning(
                    f"Ignoring invalid logger setting {key}={raw!r}: {e}"
                )

        if not updates:
            return current
        return current.model_copy(update=updates)

    def save(self, settings: LoggerSettings) -> bool:
        """
        Write every recognized key to the settings file.

        The file is written to a temporary sibling and moved into place, so
        a concurrent reader never sees a half-written document.

        Returns:
            bool: True on success, False if the write failed (reported)
        """
        parser = configparser.ConfigParser(interpolation=None)
        parser.optionxform = str
        parser.add_section(SECTION)
        for key, (field_name, _, serialize) in _KEYS.items():
            parser.set(SECTION, key, serialize(getattr(settings, field_name)))

        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=str(self.path.parent), prefix=".logger_settings", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                parser.write(f)
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as e:
            logger.error(f"Failed to save logger settings {self.path}: {e}")
            return False
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                try:
                    os.unlink(tmp_path)
                except OSError:
                    logger.warning(f"Failed to remove temporary file {tmp_path}")

        return True

    def initialize(self, defaults: Optional[LoggerSettings] = None) -> LoggerSettings:
        """
        Startup sequence: load over defaults, then persist the merged result.

        Persisting on startup fills in any key that was missing from the
        file, so the file always documents every recognized setting.
        """
        settings = self.load(defaults or LoggerSettings())
        self.save(settings)
        return settings
