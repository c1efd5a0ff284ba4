"""
Buffered, rotating per-process log files.

Each FileSink owns exactly one append-only UTF-8 file for the lifetime of
the process:

    logger_{YYYY-MM-DD_HH-MM-SS_mmm}_{pid}_{context}.log

Key Features:
    - Retention: on construction the oldest files are deleted so that, with
      the new file, at most ``max_log_files`` remain
    - Buffering: writes go to an in-memory buffer; every FLUSH_THRESHOLD
      messages a flush is handed to a single background worker
    - Single flush in flight: the in-flight flag is a non-blocking gate
      lock; a request that finds the gate taken is skipped and the buffer
      is picked up by the next flush
    - Failure isolation: I/O errors are reported to the diagnostic logger
      and never reach the caller

Log calls never wait for disk I/O. The only blocking flush is the final
one performed by ``close()``.
"""

import os
import threading
from concurrent.futures import Executor, ThreadPoolExecutor
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, TextIO, Union

from richlogger.core.exceptions.custom_exceptions import LogFileError
from richlogger.core.logging.logger import get_logger

logger = get_logger(__name__)

FLUSH_THRESHOLD = 10
DEFAULT_MAX_LOG_FILES = 10
LOG_FILE_PATTERN = "logger_*.log"


def build_log_file_name(timestamp: datetime, pid: int, context: str) -> str:
    """File name for a new log; names sort lexicographically by creation."""
    stamp = f"{timestamp:%Y-%m-%d_%H-%M-%S}_{timestamp.microsecond // 1000:03d}"
    return f"logger_{stamp}_{pid}_{context}.log"


def list_log_files(log_dir: Union[str, Path]) -> List[Path]:
    """Return existing log files in ``log_dir``, newest first."""
    directory = Path(log_dir)
    if not directory.is_dir():
        return []
    files = [p for p in directory.glob(LOG_FILE_PATTERN) if p.is_file()]
    return sorted(files, key=lambda p: p.name, reverse=True)


class FileSink:
    """
    Own one buffered log file and its retention policy.

    Args:
        log_dir: Directory for log files, created if missing
        context: Run-mode tag embedded in the file name
        max_log_files: Files kept after creating this one (>= 1)
        pid: Process identifier for the file name, defaults to os.getpid()
        clock: Wall clock used for the file name timestamp
        executor: Worker running background flushes; a private
            single-thread pool is created when omitted

    Attributes:
        path (Path): The file this sink writes to
        flush_requests (int): Number of background flushes scheduled

    Example:
        >>> sink = FileSink("/tmp/logs", context="interactive")
        >>> sink.write("[PID:1] [12:00:00.000] [INFO] ready")
        >>> sink.close()  # final synchronous flush
    """

    def __init__(
        self,
        log_dir: Union[str, Path],
        context: str = "standalone",
        max_log_files: int = DEFAULT_MAX_LOG_FILES,
        pid: Optional[int] = None,
        clock: Callable[[], datetime] = datetime.now,
        executor: Optional[Executor] = None,
    ):
        self.log_dir = Path(log_dir)
        self.context = context
        self.max_log_files = max(1, int(max_log_files))
        self.pid = os.getpid() if pid is None else pid
        self.flush_requests = 0

        self._buffer: List[str] = []
        self._pending = 0
        self._buffer_lock = threading.Lock()
        self._io_lock = threading.Lock()
        self._flush_gate = threading.Lock()
        self._closed = False

        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="richlogger-flush"
        )

        self.path = self.log_dir / build_log_file_name(clock(), self.pid, context)
        self._handle: Optional[TextIO] = None

        try:
            self.log_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create log directory {self.log_dir}: {e}")
            return

        self.cleanup_old_logs()
        self._handle = self._open()

    def _open(self) -> Optional[TextIO]:
        try:
            return open(self.path, "a", encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to open log file {self.path}: {e}")
            return None

    @property
    def is_open(self) -> bool:
        return self._handle is not None and not self._closed

    def cleanup_old_logs(self) -> List[Path]:
        """
        Delete all but the newest ``max_log_files - 1`` existing log files.

        Returns:
            List[Path]: Files that were deleted
        """
        deleted: List[Path] = []
        try:
            stale = list_log_files(self.log_dir)[self.max_log_files - 1 :]
        except OSError as e:
            logger.error(f"Failed to list log files in {self.log_dir}: {e}")
            return deleted

        for path in stale:
            try:
                path.unlink()
                deleted.append(path)
            except OSError as e:
                logger.warning(f"Failed to delete old log file {path}: {e}")
        if deleted:
            logger.debug(f"Removed {len(deleted)} old log files from {self.log_dir}")
        return deleted

    def write(self, message: str) -> None:
        """
        Buffer one record; schedule a background flush every 10 records.

        Never blocks on disk I/O and never raises.
        """
        if not self.is_open:
            return

        with self._buffer_lock:
            if self._closed:
                return
            self._buffer.append(message)
            self._pending += 1
            threshold_reached = self._pending >= FLUSH_THRESHOLD
            if threshold_reached:
                self._pending = 0

        if threshold_reached:
            self._request_flush()

    def _request_flush(self) -> bool:
        if not self._flush_gate.acquire(blocking=False):
            return False
        self.flush_requests += 1
        try:
            self._executor.submit(self._background_flush)
        except Exception as e:
            self.flush_requests -= 1
            self._flush_gate.release()
            logger.warning(f"Failed to schedule log flush for {self.path}: {e}")
            return False
        return True

    def _background_flush(self) -> None:
        try:
            self.flush()
        finally:
            self._flush_gate.release()

    def flush(self) -> bool:
        """
        Write buffered records to disk and flush the handle.

        Runs on the flush worker, or synchronously from ``close()``. Holding
        the I/O lock across drain and write keeps file order equal to write
        order.

        Returns:
            bool: False if the write failed (reported, records dropped)
        """
        with self._io_lock:
            with self._buffer_lock:
                batch, self._buffer = self._buffer, []
            handle = self._handle
            if handle is None:
                return True
            try:
                self._write_batch(handle, batch)
            except LogFileError as e:
                logger.error(
                    f"Log flush failed: {e.message}",
                    path=str(self.path),
                    dropped=e.details.get("dropped", 0),
                )
                return False
            return True

    def _write_batch(self, handle: TextIO, batch: List[str]) -> None:
        try:
            if batch:
                handle.write("\n".join(batch) + "\n")
            handle.flush()
        except (OSError, ValueError) as e:
            raise LogFileError(
                str(e),
                error_code="LOG_FILE_WRITE_ERROR",
                details={"path": str(self.path), "dropped": len(batch)},
            ) from e

    def close(self) -> None:
        """Flush synchronously and close the file; safe to call twice."""
        with self._buffer_lock:
            if self._closed:
                return
            self._closed = True

        if self._owns_executor:
            self._executor.shutdown(wait=True)

        self.flush()

        with self._io_lock:
            handle, self._handle = self._handle, None
            if handle is None:
                return
            try:
                handle.close()
            except OSError as e:
                logger.error(f"Failed to close log file {self.path}: {e}")

    def __enter__(self) -> "FileSink":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
