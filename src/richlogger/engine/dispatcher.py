"""
The public Logger surface.

Logger is a service object with an explicit lifecycle: construct it once,
pass it wherever logging is needed, and ``close()`` it at shutdown (the
default instance does this from ``atexit``). Every log call runs the same
pipeline:

    1. throttled settings reload check
    2. severity gate against the current settings snapshot
    3. build a LogRecord (capturing the stack if enabled)
    4. render rich and plain forms
    5. rich form -> display sink; plain form -> FileSink if log_to_file

A log call never raises. Internal faults are reported through the
diagnostic logger and the call returns normally.

Example:
    >>> from richlogger import CallerContext, Logger, Severity
    >>> with Logger() as log:
    ...     log.info("Level loaded", CallerContext.here())
    ...     log.log_object(Severity.DEBUG, "player", player, CallerContext.here())
"""

import atexit
import os
import threading
from datetime import datetime
from typing import Any, Callable, Optional

from richlogger.core.config.settings import EngineConfig, LoggerSettings
from richlogger.core.config.store import SettingsStore
from richlogger.core.config.watcher import ChangeDetector, create_change_detector
from richlogger.core.logging.logger import get_logger, setup_logging
from richlogger.engine.display import DisplaySink, RichConsoleSink
from richlogger.engine.file_sink import FileSink
from richlogger.engine.formatter import MessageFormatter
from richlogger.engine.records import CallerContext, LogRecord, Severity
from richlogger.engine.stack import StackCapturer

logger = get_logger(__name__)

# Frames between a public log method and StackCapturer.capture():
# the public method itself and _log.
ENGINE_FRAMES = 2


class Logger:
    """
    Severity-gated, reloadable structured logger.

    Args:
        config: Engine configuration, read from the environment if omitted
        display: Sink for the rich form, a RichConsoleSink if omitted
        store: Settings persistence, built from ``config.settings_path``
        change_detector: Reload trigger, built from ``config`` if omitted
        file_sink_factory: Builds the FileSink on first file write
        clock: Wall clock for record timestamps
        pid: Process identifier stamped on records

    Attributes:
        config (EngineConfig): Engine configuration in use
        display (DisplaySink): Interactive display sink
        store (SettingsStore): Settings file persistence
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        display: Optional[DisplaySink] = None,
        store: Optional[SettingsStore] = None,
        change_detector: Optional[ChangeDetector] = None,
        file_sink_factory: Optional[Callable[[], FileSink]] = None,
        clock: Callable[[], datetime] = datetime.now,
        pid: Optional[int] = None,
    ):
        self.config = config or EngineConfig()
        setup_logging(self.config.diagnostic_level)

        self.display = display if display is not None else RichConsoleSink()
        self.store = store or SettingsStore(self.config.settings_path)
        self.formatter = MessageFormatter()
        self.stack = StackCapturer(engine_frames=ENGINE_FRAMES)
        self.pid = os.getpid() if pid is None else pid
        self._clock = clock

        self._settings_lock = threading.Lock()
        self._settings = self.store.initialize(LoggerSettings())

        self.change_detector = change_detector or create_change_detector(
            self.config, self.store.path
        )
        self.change_detector.mark_seen()

        self._file_sink_factory = file_sink_factory or self._default_file_sink
        self._file_sink: Optional[FileSink] = None
        self._file_sink_lock = threading.Lock()
        self._closed = False

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    @property
    def settings(self) -> LoggerSettings:
        """The current settings snapshot."""
        return self._settings

    def reload_settings(self) -> LoggerSettings:
        """
        Reload the settings file and swap in the merged snapshot.

        Keys missing from the file keep their current in-memory values.
        """
        with self._settings_lock:
            self._settings = self.store.load(self._settings)
            return self._settings

    def update_settings(self, **changes: Any) -> LoggerSettings:
        """
        Change settings in-process and persist them.

        Accepts LoggerSettings field names, e.g.
        ``update_settings(level=Severity.DEBUG, include_stack_traces=True)``.
        The new snapshot is validated before it replaces the old one.

        Raises:
            pydantic.ValidationError: If a value is invalid
        """
        with self._settings_lock:
            merged = {**self._settings.model_dump(), **changes}
            self._settings = LoggerSettings.model_validate(merged)
            if self.store.save(self._settings):
                self.change_detector.mark_seen()
            return self._settings

    def _check_reload(self) -> None:
        if self.change_detector.has_changed():
            previous = self._settings
            current = self.reload_settings()
            if current != previous:
                logger.debug(
                    "Logger settings reloaded",
                    level=current.level.name,
                    include_stack_traces=current.include_stack_traces,
                    stack_trace_depth=current.stack_trace_depth,
                    log_to_file=current.log_to_file,
                )

    # ------------------------------------------------------------------
    # Public emission API
    # ------------------------------------------------------------------

    def error(self, message: str, caller: CallerContext, skip_frames: int = 0) -> None:
        self._log(Severity.ERROR, message, caller, skip_frames)

    def warning(
        self, message: str, caller: CallerContext, skip_frames: int = 0
    ) -> None:
        self._log(Severity.WARNING, message, caller, skip_frames)

    def info(self, message: str, caller: CallerContext, skip_frames: int = 0) -> None:
        self._log(Severity.INFO, message, caller, skip_frames)

    def debug(self, message: str, caller: CallerContext, skip_frames: int = 0) -> None:
        self._log(Severity.DEBUG, message, caller, skip_frames)

    def verbose(
        self, message: str, caller: CallerContext, skip_frames: int = 0
    ) -> None:
        self._log(Severity.VERBOSE, message, caller, skip_frames)

    def log(
        self,
        severity: Severity,
        message: str,
        caller: CallerContext,
        skip_frames: int = 0,
    ) -> None:
        """Log at a severity chosen at runtime."""
        self._log(severity, message, caller, skip_frames)

    def log_object(
        self,
        severity: Severity,
        label: str,
        value: Any,
        caller: CallerContext,
        skip_frames: int = 0,
    ) -> None:
        """
        Log ``"{label}: {value}"`` using the value's ``str()`` form.

        The value is only rendered when the severity passes the gate.
        """
        self._log(severity, _LabeledValue(label, value), caller, skip_frames)

    def _log(
        self,
        severity: Severity,
        message: Any,
        caller: CallerContext,
        skip_frames: int,
    ) -> None:
        try:
            self._check_reload()
            settings = self._settings
            if not settings.level.allows(severity):
                return

            frames = []
            if settings.include_stack_traces:
                frames = self.stack.capture(skip_frames, settings.stack_trace_depth)

            record = LogRecord(
                severity=severity,
                message=str(message),
                caller=caller if caller is not None else CallerContext(),
                pid=self.pid,
                timestamp=self._clock(),
                frames=frames,
            )
            rich_form, plain_form = self.formatter.render(record)

            try:
                self.display.write(rich_form)
            except Exception:
                logger.exception("Display write failed", severity=severity.name)
            if settings.log_to_file:
                sink = self._get_file_sink()
                if sink is not None:
                    sink.write(plain_form)
        except Exception:
            logger.exception(
                "Log call failed", severity=getattr(severity, "name", severity)
            )

    # ------------------------------------------------------------------
    # File sink lifecycle
    # ------------------------------------------------------------------

    def _default_file_sink(self) -> FileSink:
        return FileSink(
            self.config.log_dir,
            context=self.config.context,
            max_log_files=self.config.max_log_files,
            pid=self.pid,
        )

    def _get_file_sink(self) -> Optional[FileSink]:
        sink = self._file_sink
        if sink is not None or self._closed:
            return sink
        with self._file_sink_lock:
            if self._file_sink is None and not self._closed:
                self._file_sink = self._file_sink_factory()
            return self._file_sink

    @property
    def file_sink(self) -> Optional[FileSink]:
        """The FileSink, or None if nothing has been written to file yet."""
        return self._file_sink

    def close(self) -> None:
        """Stop reload detection and flush-then-close the log file."""
        with self._file_sink_lock:
            if self._closed:
                return
            self._closed = True
            sink, self._file_sink = self._file_sink, None

        try:
            self.change_detector.close()
        except Exception as e:
            logger.warning(f"Failed to stop change detector: {e}")
        if sink is not None:
            sink.close()

    def __enter__(self) -> "Logger":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class _LabeledValue:
    """Defer ``str(value)`` until the record is known to be emitted."""

    __slots__ = ("label", "value")

    def __init__(self, label: str, value: Any):
        self.label = label
        self.value = value

    def __str__(self) -> str:
        try:
            text = str(self.value)
        except Exception:
            text = repr(self.value)
        return f"{self.label}: {text}"


_default_logger: Optional[Logger] = None
_default_lock = threading.Lock()


def get_default_logger() -> Logger:
    """
    Return the process-wide Logger, creating it on first use.

    The instance is configured from the environment (see EngineConfig) and
    closed automatically at interpreter exit.
    """
    global _default_logger
    if _default_logger is None:
        with _default_lock:
            if _default_logger is None:
                _default_logger = Logger()
                atexit.register(_default_logger.close)
    return _default_logger


def reset_default_logger() -> None:
    """Close and forget the process-wide Logger."""
    global _default_logger
    with _default_lock:
        instance, _default_logger = _default_logger, None
    if instance is not None:
        atexit.unregister(instance.close)
        instance.close()
