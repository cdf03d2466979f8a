"""retention.py - Age-based deletion of old log objects.

RetentionSweeper lists every object under the log directory and deletes the
ones whose ``last_modified`` timestamp is older than the retention window.
S3Exporter runs it once after each export when retention is enabled.

Deletes are independent of each other. A failure deleting one object is
logged and recorded in the returned ``SweepResult``; the sweep carries on with
the remaining objects. A failure listing the bucket is not recoverable and
propagates to the caller.

A bucket holding many stale objects pays the full listing cost on every
flush. ``min_interval`` throttles the sweep to at most one run per interval
without giving up eventual deletion.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Tuple

from .storage import ObjectStore

logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    """Outcome of one ``RetentionSweeper.run()`` call."""

    scanned: int = 0
    deleted: List[str] = field(default_factory=list)
    errors: List[Tuple[str, str]] = field(default_factory=list)
    skipped: bool = False


class RetentionSweeper:
    """Deletes objects under ``directory`` older than ``retention_days`` days.

    Attributes:
        store: ObjectStore used for listing and deleting.
        bucket: Bucket holding the logs.
        directory: Listing prefix. An empty directory sweeps the whole bucket.
        retention_days: Age limit in calendar days. 0 disables the sweep.
        min_interval: Minimum number of seconds between two sweeps. 0 sweeps
            every time ``run()`` is called.

    Example:
        >>> sweeper = RetentionSweeper(store, "my-bucket", "_logs", retention_days=90)
        >>> result = sweeper.run()
        >>> result.deleted
        ['_logs/2023-10-01.log']
    """

    def __init__(
        self,
        store: ObjectStore,
        bucket: str,
        directory: str,
        retention_days: int,
        min_interval: float = 0.0,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        if retention_days < 0:
            raise ValueError(f"retention_days must be >= 0, got {retention_days}")
        if min_interval < 0:
            raise ValueError(f"min_interval must be >= 0, got {min_interval}")
        self.store = store
        self.bucket = bucket
        self.directory = directory.strip("/")
        self.retention_days = retention_days
        self.min_interval = min_interval
        self._monotonic = monotonic
        self._last_run: Optional[float] = None

    @property
    def enabled(self) -> bool:
        return self.retention_days > 0

    @property
    def prefix(self) -> str:
        """Listing prefix: ``directory/``, or the whole bucket for an empty directory."""
        return f"{self.directory}/" if self.directory else ""

    def cutoff(self, now: Optional[datetime] = None) -> datetime:
        """Return the instant before which objects are considered expired."""
        return _as_utc(now or datetime.now(timezone.utc)) - timedelta(
            days=self.retention_days
        )

    def run(self, now: Optional[datetime] = None) -> SweepResult:
        """Delete every expired object under the directory.

        Args:
            now: Reference time for the age comparison. Defaults to the
                current UTC time.

        Returns:
            A SweepResult listing what was scanned, deleted and what failed.
            ``skipped`` is set when the sweep is disabled or throttled.
        """
        if not self.enabled or self._throttled():
            return SweepResult(skipped=True)

        limit = self.cutoff(now)
        result = SweepResult()

        for summary in self.store.list_objects(self.bucket, self.prefix):
            result.scanned += 1
            if _as_utc(summary.last_modified) >= limit:
                continue
            try:
                self.store.delete_object(self.bucket, summary.key)
            except Exception as exc:
                logger.warning(
                    "retention: could not delete s3://%s/%s: %s",
                    self.bucket,
                    summary.key,
                    exc,
                )
                result.errors.append((summary.key, str(exc)))
            else:
                result.deleted.append(summary.key)

        self._last_run = self._monotonic()
        if result.deleted:
            logger.debug(
                "retention: deleted %d of %d object(s) older than %s",
                len(result.deleted),
                result.scanned,
                limit.isoformat(),
            )
        return result

    def _throttled(self) -> bool:
        if not self.min_interval or self._last_run is None:
            return False
        return self._monotonic() - self._last_run < self.min_interval


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
