"""
Tests for settings-file change detection and engine configuration.
"""

import os
import time

import pytest
from pydantic import ValidationError

from richlogger.core.config.settings import EngineConfig
from richlogger.core.config.watcher import (
    NullChangeDetector,
    PollingChangeDetector,
    WatchdogChangeDetector,
    create_change_detector,
)


def touch(path, text="[Logger]\nLogLevel = 0\n"):
    """Rewrite the file and move its mtime forward by one second."""
    old = os.stat(path).st_mtime_ns if path.exists() else 0
    path.write_text(text, encoding="utf-8")
    os.utime(path, ns=(old + 1_000_000_000, old + 1_000_000_000))


def wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.05)
    return False


@pytest.fixture
def settings_file(tmp_path):
    path = tmp_path / "logger_settings.cfg"
    path.write_text("[Logger]\nLogLevel = 2\n", encoding="utf-8")
    return path


class TestPollingChangeDetector:
    """Test cases for mtime polling."""

    def test_unchanged_file(self, settings_file, fake_clock):
        detector = PollingChangeDetector(settings_file, 1.0, clock=fake_clock)
        assert detector.has_changed() is False
        fake_clock.advance(10)
        assert detector.has_changed() is False

    def test_first_check_is_not_throttled(self, settings_file, fake_clock):
        detector = PollingChangeDetector(settings_file, 1.0, clock=fake_clock)
        touch(settings_file)
        assert detector.has_changed() is True

    def test_change_is_reported_once(self, settings_file, fake_clock):
        detector = PollingChangeDetector(settings_file, 1.0, clock=fake_clock)
        detector.has_changed()
        touch(settings_file)
        fake_clock.advance(1.0)
        assert detector.has_changed() is True
        fake_clock.advance(1.0)
        assert detector.has_changed() is False

    def test_throttle_window(self, settings_file, fake_clock):
        detector = PollingChangeDetector(settings_file, 1.0, clock=fake_clock)
        detector.has_changed()
        touch(settings_file)

        fake_clock.advance(0.999)
        assert detector.has_changed() is False
        fake_clock.advance(0.001)
        assert detector.has_changed() is True

    def test_throttled_calls_do_not_stat(self, settings_file, fake_clock, monkeypatch):
        detector = PollingChangeDetector(settings_file, 1.0, clock=fake_clock)
        detector.has_changed()

        stats = []
        monkeypatch.setattr(detector, "_stat", lambda: stats.append(1))
        for _ in range(100):
            fake_clock.advance(0.001)
            detector.has_changed()
        assert stats == []

    def test_older_mtime_counts_as_change(self, settings_file, fake_clock):
        detector = PollingChangeDetector(settings_file, 1.0, clock=fake_clock)
        old = os.stat(settings_file).st_mtime_ns
        os.utime(settings_file, ns=(old - 5_000_000_000, old - 5_000_000_000))
        assert detector.has_changed() is True

    def test_file_appearing_and_disappearing(self, tmp_path, fake_clock):
        path = tmp_path / "later.cfg"
        detector = PollingChangeDetector(path, 1.0, clock=fake_clock)
        assert detector.has_changed() is False

        path.write_text("[Logger]\n")
        fake_clock.advance(1.0)
        assert detector.has_changed() is True

        path.unlink()
        fake_clock.advance(1.0)
        assert detector.has_changed() is True

    def test_mark_seen_absorbs_own_write(self, settings_file, fake_clock):
        detector = PollingChangeDetector(settings_file, 1.0, clock=fake_clock)
        touch(settings_file)
        detector.mark_seen()
        assert detector.has_changed() is False

    def test_busy_detector_reports_no_change(self, settings_file, fake_clock):
        detector = PollingChangeDetector(settings_file, 1.0, clock=fake_clock)
        touch(settings_file)
        with detector._lock:
            assert detector.has_changed() is False
        assert detector.has_changed() is True


class TestWatchdogChangeDetector:
    """Test cases for filesystem event detection."""

    def test_external_write_is_reported(self, settings_file):
        detector = WatchdogChangeDetector(settings_file)
        try:
            assert detector.has_changed() is False
            time.sleep(0.2)
            touch(settings_file)
            assert wait_for(detector.has_changed)
        finally:
            detector.close()

    def test_atomic_replace_is_reported(self, settings_file, tmp_path):
        detector = WatchdogChangeDetector(settings_file)
        try:
            time.sleep(0.2)
            replacement = tmp_path / "replacement.tmp"
            replacement.write_text("[Logger]\nLogLevel = 4\n")
            os.replace(replacement, settings_file)
            assert wait_for(detector.has_changed)
        finally:
            detector.close()

    def test_other_files_are_ignored(self, settings_file, tmp_path):
        detector = WatchdogChangeDetector(settings_file)
        try:
            time.sleep(0.2)
            (tmp_path / "unrelated.txt").write_text("noise")
            time.sleep(0.5)
            assert detector.has_changed() is False
        finally:
            detector.close()

    def test_close_is_idempotent(self, settings_file):
        detector = WatchdogChangeDetector(settings_file)
        detector.close()
        detector.close()

    def test_falls_back_to_polling(self, settings_file, monkeypatch):
        def broken_start(self):
            raise OSError("inotify watch limit reached")

        monkeypatch.setattr(
            "richlogger.core.config.watcher.Observer.start", broken_start
        )
        detector = WatchdogChangeDetector(settings_file)
        assert detector._fallback is not None
        touch(settings_file)
        assert detector.has_changed() is True
        detector.close()


class TestCreateChangeDetector:
    """Test cases for backend selection."""

    def test_poll(self, tmp_path, monkeypatch):
        monkeypatch.delenv("RICHLOGGER_CHANGE_DETECTION", raising=False)
        config = EngineConfig(settings_path=tmp_path / "s.cfg", reload_interval=0.25)
        detector = create_change_detector(config)
        assert isinstance(detector, PollingChangeDetector)
        assert detector.interval == 0.25
        assert detector.path == tmp_path / "s.cfg"

    def test_watch(self, tmp_path):
        config = EngineConfig(
            settings_path=tmp_path / "s.cfg", change_detection="watch"
        )
        detector = create_change_detector(config)
        try:
            assert isinstance(detector, WatchdogChangeDetector)
        finally:
            detector.close()

    def test_off(self, tmp_path):
        config = EngineConfig(settings_path=tmp_path / "s.cfg", change_detection="off")
        detector = create_change_detector(config)
        assert isinstance(detector, NullChangeDetector)
        assert detector.has_changed() is False


class TestEngineConfig:
    """Test cases for process-level configuration."""

    def test_defaults(self, monkeypatch):
        for name in ("SETTINGS_PATH", "LOG_DIR", "CHANGE_DETECTION"):
            monkeypatch.delenv(f"RICHLOGGER_{name}", raising=False)
        config = EngineConfig()
        assert config.settings_path.name == "logger_settings.cfg"
        assert config.max_log_files == 10
        assert config.context == "standalone"
        assert config.change_detection == "poll"
        assert config.reload_interval == 1.0

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("RICHLOGGER_LOG_DIR", str(tmp_path / "game-logs"))
        monkeypatch.setenv("RICHLOGGER_MAX_LOG_FILES", "3")
        monkeypatch.setenv("RICHLOGGER_CONTEXT", "interactive")
        monkeypatch.setenv("RICHLOGGER_CHANGE_DETECTION", "WATCH")
        config = EngineConfig()
        assert config.log_dir == tmp_path / "game-logs"
        assert config.max_log_files == 3
        assert config.context == "interactive"
        assert config.change_detection == "watch"

    @pytest.mark.parametrize(
        "field, value",
        [
            ("change_detection", "inotify"),
            ("max_log_files", 0),
            ("context", ""),
            ("context", "../escape"),
            ("diagnostic_level", "LOUD"),
            ("reload_interval", -1),
        ],
    )
    def test_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            EngineConfig(**{field: value})

    def test_diagnostic_level_is_normalized(self):
        assert EngineConfig(diagnostic_level="debug").diagnostic_level == "DEBUG"
