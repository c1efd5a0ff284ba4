from richlogger.core.config.settings import EngineConfig, LoggerSettings
from richlogger.core.config.store import SettingsStore
from richlogger.core.config.watcher import (
    ChangeDetector,
    NullChangeDetector,
    PollingChangeDetector,
    WatchdogChangeDetector,
    create_change_detector,
)

__all__ = [
    "ChangeDetector",
    "EngineConfig",
    "LoggerSettings",
    "NullChangeDetector",
    "PollingChangeDetector",
    "SettingsStore",
    "WatchdogChangeDetector",
    "create_change_detector",
]
