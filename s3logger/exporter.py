"""exporter.py - Writes batches of log lines to a rolling object in a bucket.

This module defines the LogExporter interface and S3Exporter, which keeps one
log object per UTC day in an S3-compatible bucket.

Each call to ``S3Exporter.export()`` is one export cycle::

    IDLE -> FETCHING -> ROTATING  -> IDLE
                     -> APPENDING -> IDLE
                     -> CREATING  -> IDLE

    FETCHING   read the day's current object.
    ROTATING   the object is larger than ``rotate_at_bytes``: copy it to the
               next archive key, delete it, write the batch alone.
    APPENDING  delete the object, write its previous body plus the batch.
    CREATING   the object could not be read (missing, or any storage error):
               write the batch alone.

A failure while rotating or appending falls back to CREATING so that at least
the new batch reaches the bucket. Only when that last write fails does
``export()`` raise, with a WriteError. After the write, the retention sweeper
(if any) runs once; a failed sweep is logged and never fails the export.

Appending is delete-then-put and rotation is copy-delete-put. Neither is
atomic: a crash between the delete and the put loses the previous body, and
two processes exporting to the same key can overwrite each other's batches.
One writer per directory and day is assumed.

Typical usage::

    from s3logger.exporter import S3Exporter
    from s3logger.storage import Boto3ObjectStore

    exporter = S3Exporter(Boto3ObjectStore(client), bucket="my-bucket", directory="_logs")
    exporter.write("2024-01-15 12:00:00 [ERROR][app] boom\\n")
"""

import enum
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional

from . import keys
from .buffer import LogEntry
from .errors import WriteError
from .retention import RetentionSweeper
from .storage import ObjectStore

logger = logging.getLogger(__name__)

DEFAULT_ROTATE_AT_BYTES = 10_000_000


class ExportState(enum.Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    ROTATING = "rotating"
    APPENDING = "appending"
    CREATING = "creating"


def format_message(lines: Iterable[str]) -> str:
    """Join ``lines`` into one text blob ending in exactly one newline.

    Trailing line terminators already present on a line are dropped so that
    each entry contributes exactly one line break.

    Example:
        >>> format_message(["first", "second"])
        'first\\nsecond\\n'
    """
    return "\n".join(line.rstrip("\r\n") for line in lines) + "\n"


class LogExporter(ABC):
    """Abstract base class for every batch destination.

    The exporter receives the batch drained from the handler's buffer and
    is responsible for persisting it. Exporters may raise; the handler
    catches and reports the failure without disturbing the application.

    Example:
        >>> class ListExporter(LogExporter):
        ...     def __init__(self):
        ...         self.batches = []
        ...     def export(self, entries):
        ...         self.batches.append([e.line for e in entries])
    """

    @abstractmethod
    def export(self, entries: List[LogEntry]) -> None:
        """Persist an ordered batch of log entries.

        Args:
            entries: LogEntry objects, oldest first. Consumed exactly once.
        """


class S3Exporter(LogExporter):
    """Append batches to the current daily object, rotating when it grows large.

    Attributes:
        store: ObjectStore used for every bucket operation.
        bucket: Name of the bucket holding the logs.
        directory: Key prefix for all log objects. May be empty.
        rotate_at_bytes: Objects strictly larger than this are archived
            before the next batch is written.
        sweeper: Optional RetentionSweeper run once after every export.
        state: The state of the cycle in progress; IDLE between calls.
    """

    def __init__(
        self,
        store: ObjectStore,
        bucket: str,
        directory: str = "",
        rotate_at_bytes: int = DEFAULT_ROTATE_AT_BYTES,
        sweeper: Optional[RetentionSweeper] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """Initialise the exporter.

        Args:
            store: ObjectStore implementation (see ``s3logger.storage``).
            bucket: Bucket name.
            directory: Key prefix. Leading and trailing slashes are ignored.
            rotate_at_bytes: Rotation threshold in bytes. Must be positive.
            sweeper: RetentionSweeper to run after each export, or None to
                keep every object.
            clock: Returns the current time; used to pick the day's key.
                Defaults to ``datetime.now(timezone.utc)``.

        Raises:
            ValueError: If ``rotate_at_bytes`` is not positive.
        """
        if rotate_at_bytes <= 0:
            raise ValueError(f"rotate_at_bytes must be > 0, got {rotate_at_bytes}")
        self.store = store
        self.bucket = bucket
        self.directory = directory.strip("/")
        self.rotate_at_bytes = rotate_at_bytes
        self.sweeper = sweeper
        self.state = ExportState.IDLE
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @classmethod
    def from_settings(cls, settings, store: ObjectStore) -> "S3Exporter":
        """Build an exporter, and its sweeper when retention is on, from Settings."""
        sweeper = None
        if settings.retention_days > 0:
            sweeper = RetentionSweeper(
                store,
                settings.bucket,
                settings.directory,
                settings.retention_days,
                min_interval=settings.sweep_interval_seconds,
            )
        return cls(
            store,
            settings.bucket,
            directory=settings.directory,
            rotate_at_bytes=settings.rotate_at_bytes,
            sweeper=sweeper,
        )

    def export(self, entries: List[LogEntry]) -> None:
        """Write the batch to the bucket. An empty batch is ignored.

        Raises:
            WriteError: If the batch could not be written at all.
        """
        if not entries:
            return
        self.write(format_message(entry.line for entry in entries))

    def write(self, message: str, now: Optional[datetime] = None) -> ExportState:
        """Run one export cycle for an already formatted ``message``.

        Args:
            message: Text to add to the current object.
            now: Time used to select the day's key. Defaults to the clock.

        Returns:
            The branch the cycle took: ROTATING, APPENDING or CREATING.

        Raises:
            WriteError: If the final write of ``message`` failed.
        """
        now = now or self._clock()
        day = keys.utc_day(now)
        key = keys.current_key(self.directory, day)

        try:
            branch = self._write_cycle(key, day, message)
        except WriteError:
            raise
        except Exception as exc:
            logger.warning(
                "export to s3://%s/%s failed while %s (%s); writing batch alone",
                self.bucket,
                key,
                self.state.value,
                exc,
            )
            branch = ExportState.CREATING
            self._create(key, message)
        finally:
            self.state = ExportState.IDLE

        if self.sweeper is not None:
            # The batch is stored at this point; sweep failures stay internal.
            try:
                self.sweeper.run(now)
            except Exception as exc:
                logger.warning(
                    "retention sweep of s3://%s/%s failed after export: %s",
                    self.bucket,
                    self.sweeper.prefix,
                    exc,
                )
        return branch

    def _write_cycle(self, key: str, day, message: str) -> ExportState:
        self.state = ExportState.FETCHING
        try:
            current = self.store.get_object(self.bucket, key)
        except Exception as exc:
            logger.debug("no readable object at s3://%s/%s (%s)", self.bucket, key, exc)
            self._create(key, message)
            return ExportState.CREATING

        if current.size > self.rotate_at_bytes:
            self.state = ExportState.ROTATING
            archive = self._rotate(key, day)
            logger.debug(
                "rotated s3://%s/%s (%d bytes) to %s",
                self.bucket,
                key,
                current.size,
                archive,
            )
            self.store.put_object(self.bucket, key, message)
            return ExportState.ROTATING

        self.state = ExportState.APPENDING
        self.store.delete_object(self.bucket, key)
        self.store.put_object(self.bucket, key, current.body + message)
        return ExportState.APPENDING

    def _rotate(self, key: str, day) -> str:
        prefix = keys.archive_prefix(self.directory, day)
        existing = [obj.key for obj in self.store.list_objects(self.bucket, prefix)]
        archive = keys.next_archive_key(self.directory, day, existing)
        self.store.copy_object(self.bucket, key, archive)
        self.store.delete_object(self.bucket, key)
        return archive

    def _create(self, key: str, message: str) -> None:
        self.state = ExportState.CREATING
        try:
            self.store.put_object(self.bucket, key, message)
        except Exception as exc:
            raise WriteError(self.bucket, key, message.count("\n")) from exc
