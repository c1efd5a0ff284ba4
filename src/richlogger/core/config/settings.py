"""
Configuration models for RichLogger.

Two kinds of configuration live here and they change at very different
rates:

Classes:
    LoggerSettings: Runtime logging settings (level, stack traces, file
        output). Mirrored to the shared settings file and reloaded while the
        host process is running.
    EngineConfig: Process-level engine configuration (file locations,
        retention, reload backend). Read once from environment variables
        when the engine is constructed.

Environment Variables:
    EngineConfig fields can be overridden with ``RICHLOGGER_`` prefixed
    variables, for example ``RICHLOGGER_LOG_DIR=/var/log/mygame`` or
    ``RICHLOGGER_CHANGE_DETECTION=watch``.

Example:
    >>> from richlogger.core.config.settings import EngineConfig, LoggerSettings
    >>> from richlogger.engine.records import Severity
    >>> config = EngineConfig(max_log_files=5)
    >>> settings = LoggerSettings()
    >>> settings.level
    <Severity.INFO: 2>
    >>> tightened = settings.model_copy(update={"level": Severity.WARNING})
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from richlogger.engine.records import Severity

DEFAULT_HOME = Path.home() / ".richlogger"
SETTINGS_FILE_NAME = "logger_settings.cfg"

CHANGE_DETECTION_MODES = ("poll", "watch", "off")


class LoggerSettings(BaseModel):
    """
    Immutable snapshot of the runtime logging settings.

    A snapshot is never modified in place. Reloads and updates build a new
    instance and swap the reference, so a log call always sees one
    consistent set of values.

    Attributes:
        level: Most verbose severity that is still emitted
        include_stack_traces: Append a captured stack to every record
        stack_trace_depth: Maximum frames per captured stack
        log_to_file: Persist plain-text records to the log file
    """

    model_config = ConfigDict(frozen=True)

    level: Severity = Severity.INFO
    include_stack_traces: bool = False
    stack_trace_depth: int = Field(default=3, ge=0)
    log_to_file: bool = True

    @field_validator("level", mode="before")
    @classmethod
    def validate_level(cls, v):
        """Accept ordinals, digit strings and level names."""
        return Severity.parse(v)


class EngineConfig(BaseSettings):
    """
    Engine configuration with environment variable support.

    Attributes:
        settings_path: Location of the shared key-value settings file
        log_dir: Directory holding the per-process log files
        max_log_files: Number of log files kept, including the new one
        context: Run-mode tag embedded in log file names
        reload_interval: Minimum seconds between two settings-file checks
        change_detection: ``poll`` (mtime polling), ``watch`` (filesystem
            events) or ``off``
        diagnostic_level: Level of the engine's own diagnostic logger
    """

    settings_path: Path = DEFAULT_HOME / SETTINGS_FILE_NAME
    log_dir: Path = DEFAULT_HOME / "logs"
    max_log_files: int = Field(default=10, ge=1)
    context: str = "standalone"
    reload_interval: float = Field(default=1.0, ge=0.0)
    change_detection: str = "poll"
    diagnostic_level: str = "WARNING"

    @field_validator("change_detection")
    @classmethod
    def validate_change_detection(cls, v: str) -> str:
        """
        Validate the settings reload backend.

        Raises:
            ValueError: If the mode is not poll, watch or off
        """
        mode = v.strip().lower()
        if mode not in CHANGE_DETECTION_MODES:
            raise ValueError(
                f"change_detection must be one of: {list(CHANGE_DETECTION_MODES)}"
            )
        return mode

    @field_validator("context")
    @classmethod
    def validate_context(cls, v: str) -> str:
        """Keep the context usable as a file name fragment."""
        context = v.strip()
        if not context or "/" in context or "\\" in context:
            raise ValueError(
                "context must be a non-empty name without path separators"
            )
        return context

    @field_validator("diagnostic_level")
    @classmethod
    def validate_diagnostic_level(cls, v: str) -> str:
        """Normalize the diagnostic level to a standard logging name."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"diagnostic_level must be one of: {valid_levels}")
        return v.upper()

    model_config = SettingsConfigDict(
        env_prefix="RICHLOGGER_",
        extra="ignore",
    )


def get_engine_config() -> EngineConfig:
    """Get engine configuration from the environment"""
    return EngineConfig()
