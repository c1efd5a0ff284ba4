"""
Pytest configuration and fixtures for RichLogger tests
"""

import threading
from concurrent.futures import Executor, Future
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Tuple

import pytest

from richlogger.core.config.settings import EngineConfig
from richlogger.core.config.store import SettingsStore
from richlogger.engine.display import MemoryDisplaySink
from richlogger.engine.dispatcher import Logger, reset_default_logger

FIXED_TIME = datetime(2024, 1, 2, 13, 37, 0, 123456)
TEST_PID = 4242


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ManualExecutor(Executor):
    """Executor that only runs submitted work when told to."""

    def __init__(self):
        self.submitted: List[Tuple[Callable, tuple, dict, Future]] = []

    def submit(self, fn, *args, **kwargs):
        future: Future = Future()
        self.submitted.append((fn, args, kwargs, future))
        return future

    def run_all(self) -> int:
        ran = 0
        while self.submitted:
            fn, args, kwargs, future = self.submitted.pop(0)
            future.set_result(fn(*args, **kwargs))
            ran += 1
        return ran


class ConcurrencyTrackingExecutor(Executor):
    """Run work on real threads and record the peak number running at once."""

    def __init__(self, inner: Executor):
        self.inner = inner
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def submit(self, fn, *args, **kwargs):
        def tracked():
            with self._lock:
                self.active += 1
                self.max_active = max(self.max_active, self.active)
            try:
                return fn(*args, **kwargs)
            finally:
                with self._lock:
                    self.active -= 1

        return self.inner.submit(tracked)

    def shutdown(self, wait=True, **kwargs):
        self.inner.shutdown(wait=wait)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def engine_config(tmp_path: Path) -> EngineConfig:
    """Engine configuration rooted in a temporary directory"""
    return EngineConfig(
        settings_path=tmp_path / "logger_settings.cfg",
        log_dir=tmp_path / "logs",
        change_detection="off",
        max_log_files=10,
    )


@pytest.fixture
def settings_store(engine_config: EngineConfig) -> SettingsStore:
    return SettingsStore(engine_config.settings_path)


@pytest.fixture
def display() -> MemoryDisplaySink:
    return MemoryDisplaySink()


@pytest.fixture
def manual_executor() -> ManualExecutor:
    return ManualExecutor()


@pytest.fixture
def tracking_executor():
    from concurrent.futures import ThreadPoolExecutor

    executor = ConcurrencyTrackingExecutor(ThreadPoolExecutor(max_workers=4))
    yield executor
    executor.shutdown(wait=True)


@pytest.fixture
def make_logger(engine_config, display):
    """Build Loggers writing to the temporary directory; closed after the test"""
    created = []

    def factory(**kwargs) -> Logger:
        kwargs.setdefault("config", engine_config)
        kwargs.setdefault("display", display)
        kwargs.setdefault("clock", lambda: FIXED_TIME)
        kwargs.setdefault("pid", TEST_PID)
        log = Logger(**kwargs)
        created.append(log)
        return log

    yield factory

    for log in created:
        log.close()


@pytest.fixture(autouse=True)
def _isolate_default_logger(tmp_path, monkeypatch):
    """Keep the process-wide Logger away from the user's home directory"""
    monkeypatch.setenv("RICHLOGGER_SETTINGS_PATH", str(tmp_path / "default.cfg"))
    monkeypatch.setenv("RICHLOGGER_LOG_DIR", str(tmp_path / "default-logs"))
    monkeypatch.setenv("RICHLOGGER_CHANGE_DETECTION", "off")
    yield
    reset_default_logger()


@pytest.fixture
def read_log_lines():
    """Close a logger's file sink and return the lines it wrote"""

    def read(log: Logger) -> List[str]:
        sink = log.file_sink
        assert sink is not None, "nothing was written to file"
        path = sink.path
        log.close()
        return path.read_text(encoding="utf-8").splitlines()

    return read
