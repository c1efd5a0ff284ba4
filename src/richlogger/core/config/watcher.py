"""
Settings-file change detection.

The dispatcher asks a single question before every log call: "has the
settings file changed since I last looked?" This module provides
interchangeable answers to that question.

Classes:
    ChangeDetector: Interface shared by all backends
    PollingChangeDetector: Compares the file's mtime, at most once per
        throttle interval
    WatchdogChangeDetector: Filesystem events (watchdog) flip a dirty flag
        that the next check consumes
    NullChangeDetector: Never reports a change

Every backend guarantees the same observable contract: an external edit of
the settings file is reported by a check made within one throttle interval
after the edit. ``has_changed()`` never blocks; a check that races with
another check on a different thread simply reports no change, and the next
call picks the change up.
"""

import threading
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Optional, Union

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from richlogger.core.config.settings import EngineConfig
from richlogger.core.exceptions.custom_exceptions import ConfigurationError
from richlogger.core.logging.logger import get_logger

logger = get_logger(__name__)

DEFAULT_INTERVAL = 1.0

# open/close events fire on our own reads and are not changes
_CHANGE_EVENTS = (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
)


class ChangeDetector(ABC):
    """Abstract "has the config changed" check."""

    @abstractmethod
    def has_changed(self) -> bool:
        """Return True once per detected external change."""

    def mark_seen(self) -> None:
        """Treat the file's current state as already observed."""

    def close(self) -> None:
        """Release any background resources."""


class NullChangeDetector(ChangeDetector):
    """Detector for hosts that turn runtime reloads off."""

    def has_changed(self) -> bool:
        return False


class PollingChangeDetector(ChangeDetector):
    """
    Poll the settings file's modification time.

    At most one ``stat`` call is made per ``interval`` seconds regardless of
    how many log calls arrive. A change is reported when the mtime differs
    from the last observed one, including the file appearing or
    disappearing.

    Args:
        path: Settings file to watch
        interval: Throttle interval in seconds
        clock: Monotonic clock, injectable for tests
    """

    def __init__(
        self,
        path: Union[str, Path],
        interval: float = DEFAULT_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.path = Path(path)
        self.interval = interval
        self._clock = clock
        self._lock = threading.Lock()
        self._last_check: Optional[float] = None
        self._last_mtime = self._stat()

    def _stat(self) -> Optional[int]:
        try:
            return self.path.stat().st_mtime_ns
        except OSError:
            return None

    def has_changed(self) -> bool:
        if not self._lock.acquire(blocking=False):
            return False
        try:
            now = self._clock()
            if self._last_check is not None and now - self._last_check < self.interval:
                return False
            self._last_check = now

            mtime = self._stat()
            if mtime == self._last_mtime:
                return False
            self._last_mtime = mtime
            return True
        finally:
            self._lock.release()

    def mark_seen(self) -> None:
        with self._lock:
            self._last_mtime = self._stat()


class _SettingsFileHandler(FileSystemEventHandler):
    """Set a flag whenever an event touches the settings file."""

    def __init__(self, path: Path, dirty: threading.Event):
        super().__init__()
        self._path = path
        self._dirty = dirty

    def _matches(self, raw_path) -> bool:
        if not raw_path:
            return False
        if isinstance(raw_path, bytes):
            raw_path = raw_path.decode()
        try:
            return Path(raw_path).resolve() == self._path
        except OSError:
            return False

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in _CHANGE_EVENTS:
            return
        if self._matches(event.src_path) or self._matches(
            getattr(event, "dest_path", "")
        ):
            self._dirty.set()


class WatchdogChangeDetector(ChangeDetector):
    """
    Detect changes through filesystem notifications.

    A watchdog observer watches the settings file's directory and sets a
    dirty flag for any event on the file (modify, create, move into place).
    ``has_changed()`` consumes the flag, so the change becomes effective on
    the first log call after the event.

    If the observer cannot be started (missing directory, inotify limits)
    the failure is reported and the detector falls back to polling.
    """

    def __init__(self, path: Union[str, Path], interval: float = DEFAULT_INTERVAL):
        self.path = Path(path).resolve()
        self._dirty = threading.Event()
        self._fallback: Optional[PollingChangeDetector] = None
        self._observer = None

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            observer = Observer()
            observer.schedule(
                _SettingsFileHandler(self.path, self._dirty),
                str(self.path.parent),
                recursive=False,
            )
            observer.daemon = True
            observer.start()
            self._observer = observer
        except Exception as e:
            logger.warning(
                f"Settings watch setup failed for {self.path}, polling instead: {e}"
            )
            self._fallback = PollingChangeDetector(self.path, interval)

    def has_changed(self) -> bool:
        if self._fallback is not None:
            return self._fallback.has_changed()
        if not self._dirty.is_set():
            return False
        self._dirty.clear()
        return True

    def mark_seen(self) -> None:
        if self._fallback is not None:
            self._fallback.mark_seen()

    def close(self) -> None:
        observer = self._observer
        self._observer = None
        if observer is None:
            return
        try:
            observer.stop()
            observer.join(timeout=5)
        except Exception as e:
            logger.warning(f"Failed to stop settings watcher: {e}")


def create_change_detector(
    config: EngineConfig, path: Optional[Path] = None
) -> ChangeDetector:
    """
    Build the detector selected by ``config.change_detection``.

    Raises:
        ConfigurationError: If the mode is unknown
    """
    target = path or config.settings_path
    mode = config.change_detection
    if mode == "poll":
        return PollingChangeDetector(target, config.reload_interval)
    if mode == "watch":
        return WatchdogChangeDetector(target, config.reload_interval)
    if mode == "off":
        return NullChangeDetector()
    raise ConfigurationError(
        f"Unknown change detection mode: {mode}",
        error_code="CONFIG_CHANGE_DETECTION",
        details={"mode": mode},
    )
