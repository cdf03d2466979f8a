"""handler.py - Integration layer between stdlib logging and the bucket exporter.

This module provides S3LogHandler, a logging.Handler subclass that collects
warning and error records and ships them to a LogExporter in batches.

Design contract:
    - Developers add ONE line to their existing logging setup: addHandler().
    - Records of the configured levels flow through emit(), are formatted and
      appended to the handler's LogBuffer.
    - When the buffer reaches ``capacity`` lines, when the optional ``max_age``
      timer fires, or on flush()/close(), the whole buffer is drained and
      handed to the exporter as one batch.
    - Export failures never propagate into the application. They are reported
      on the ``s3logger.handler`` logger and the batch is dropped.

Typical usage:
    import logging
    from s3logger import S3LogHandler, S3Exporter

    handler = S3LogHandler(S3Exporter(store, bucket="my-bucket", directory="_logs"))
    logging.getLogger().addHandler(handler)

    logging.getLogger(__name__).error("payment failed")   # buffered
    handler.flush()                                         # exported
"""

import logging
import threading
import time
from typing import Iterable, Optional

from .buffer import LogBuffer
from .exporter import LogExporter

logger = logging.getLogger(__name__)

DEFAULT_LEVELS = (logging.WARNING, logging.ERROR, logging.CRITICAL)
DEFAULT_FORMAT = "%(asctime)s [%(levelname)s][%(name)s] %(message)s"

# Records from our own loggers are never exported, otherwise a failing export
# would log a warning that is buffered and exported again.
_INTERNAL_LOGGER = "s3logger"


class UTCFormatter(logging.Formatter):
    """logging.Formatter that renders ``asctime`` in UTC."""

    converter = time.gmtime


class S3LogHandler(logging.Handler):
    """A logging.Handler that batches records and exports them to a bucket.

    Buffering strategy:
        Every accepted record is formatted and appended to the handler's
        LogBuffer. Nothing touches storage until the buffer holds ``capacity``
        lines, ``max_age`` seconds have passed since the first pending line, or
        ``flush()`` is called; then the complete buffer is exported as one
        batch and cleared. The ``max_age`` timer runs on a daemon thread and
        calls ``flush()``. ``logging.shutdown()`` (registered with
        ``atexit`` by the logging module) calls ``flush()``, so pending lines
        are exported when the interpreter exits.

    Thread-safety:
        ``logging.Handler`` wraps ``emit()`` in its RLock; ``flush()`` takes the
        same lock, so a batch is never exported twice or interleaved with
        another thread's append.

    Attributes:
        exporter (LogExporter): Destination for drained batches.
        capacity (int): Number of buffered lines that triggers an export.
        max_age (float or None): Seconds a line may wait before it is exported
            regardless of ``capacity``. None waits for capacity or flush().
        levels (frozenset): Log levels accepted by this handler.

    Example:
        >>> handler = S3LogHandler(exporter, capacity=100)
        >>> logging.getLogger().addHandler(handler)
    """

    def __init__(
        self,
        exporter: LogExporter,
        capacity: int = 1000,
        levels: Iterable[int] = DEFAULT_LEVELS,
        max_age: Optional[float] = None,
    ) -> None:
        """Initialise the handler.

        Args:
            exporter: Where batches are sent.
            capacity: Export as soon as this many lines are buffered. Must be
                at least 1. Defaults to 1000.
            levels: Exact log levels to accept. Defaults to WARNING, ERROR and
                CRITICAL; everything else is ignored.
            max_age: Export pending lines at most this many seconds after
                the oldest one was buffered. None or 0 disables the timer.

        Raises:
            ValueError: If ``capacity`` is less than 1 or ``max_age`` is negative.
        """
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        if max_age is not None and max_age < 0:
            raise ValueError(f"max_age must be >= 0, got {max_age}")
        super().__init__()
        self.exporter = exporter
        self.capacity = capacity
        self.levels = frozenset(levels)
        self.max_age = max_age or None
        self._buffer = LogBuffer()
        self._timer: Optional[threading.Timer] = None
        self.setFormatter(UTCFormatter(DEFAULT_FORMAT))
        self.addFilter(self._accepts)

    # ---------------------------------------------------------------------- #
    # Public interface
    # ---------------------------------------------------------------------- #

    def emit(self, record: logging.LogRecord) -> None:
        """Buffer one record, exporting the buffer once it is full.

        Called by the logging framework (after locking and filtering) for
        every record that passes this handler's filters.

        Args:
            record: The LogRecord produced by the logging framework.
        """
        try:
            line = self.format(record)
        except Exception:
            self.handleError(record)
            return

        self._buffer.push(line, level=record.levelno)
        if len(self._buffer) >= self.capacity:
            self._export_buffer()
        elif self.max_age and self._timer is None:
            self._timer = threading.Timer(self.max_age, self.flush)
            self._timer.daemon = True
            self._timer.start()

    def flush(self) -> None:
        """Export every buffered line now."""
        self.acquire()
        try:
            self._export_buffer()
        finally:
            self.release()

    def close(self) -> None:
        """Export pending lines, then release the handler."""
        try:
            self.flush()
        finally:
            super().close()

    @property
    def pending(self) -> int:
        """Number of lines waiting for the next export."""
        return len(self._buffer)

    # ---------------------------------------------------------------------- #
    # Private helpers
    # ---------------------------------------------------------------------- #

    def _accepts(self, record: logging.LogRecord) -> bool:
        if record.levelno not in self.levels:
            return False
        name = record.name
        return not (name == _INTERNAL_LOGGER or name.startswith(_INTERNAL_LOGGER + "."))

    def _export_buffer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        entries = self._buffer.drain()
        if not entries:
            return
        try:
            self.exporter.export(entries)
        except Exception:
            logger.warning(
                "dropped %d log line(s): export failed", len(entries), exc_info=True
            )
