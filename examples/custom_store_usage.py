"""examples/custom_store_usage.py - Plug a custom ObjectStore into S3Exporter.

Implements ObjectStore on top of a local directory so the append / rotate /
retention cycle can be watched without a bucket. A small rotation threshold
makes the current object roll into numbered archives after a few batches.

Run:
    python examples/custom_store_usage.py
"""

import logging
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

from s3logger import ObjectNotFoundError, RetentionSweeper, S3Exporter, S3LogHandler
from s3logger.storage import ObjectStore, ObjectSummary, RemoteObject


class DirectoryObjectStore(ObjectStore):
    """Stores each object as a file under ``root/<bucket>/<key>``.

    Example:
        >>> store = DirectoryObjectStore(Path("/tmp/buckets"))
        >>> store.put_object("logs", "_logs/2024-01-15.log", "hello\\n")
    """

    def __init__(self, root: Path) -> None:
        self.root = root

    def _path(self, bucket: str, key: str) -> Path:
        return self.root / bucket / key

    def get_object(self, bucket: str, key: str) -> RemoteObject:
        path = self._path(bucket, key)
        if not path.is_file():
            raise ObjectNotFoundError(bucket, key)
        data = path.read_bytes()
        return RemoteObject(key, len(data), data.decode("utf-8", errors="replace"))

    def put_object(self, bucket: str, key: str, body: str) -> None:
        path = self._path(bucket, key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(body, encoding="utf-8")

    def delete_object(self, bucket: str, key: str) -> None:
        self._path(bucket, key).unlink(missing_ok=True)

    def copy_object(self, bucket: str, source_key: str, dest_key: str) -> None:
        self.put_object(bucket, dest_key, self.get_object(bucket, source_key).body)

    def list_objects(self, bucket: str, prefix: str) -> Iterator[ObjectSummary]:
        base = self.root / bucket
        for path in sorted(p for p in base.rglob("*") if p.is_file()):
            key = path.relative_to(base).as_posix()
            if key.startswith(prefix):
                stat = path.stat()
                modified = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)
                yield ObjectSummary(key, modified, stat.st_size)


if __name__ == "__main__":
    root = Path(tempfile.mkdtemp(prefix="s3logger-demo-"))
    store = DirectoryObjectStore(root)

    exporter = S3Exporter(
        store,
        "demo-bucket",
        directory="_logs",
        rotate_at_bytes=200,
        sweeper=RetentionSweeper(store, "demo-bucket", "_logs", retention_days=30),
    )
    handler = S3LogHandler(exporter, capacity=3)

    logger = logging.getLogger("demo")
    logger.addHandler(handler)
    logger.propagate = False

    for i in range(12):
        logger.warning(f"disk usage at {80 + i}%")
    handler.close()

    print(f"Objects written under {root / 'demo-bucket'}:")
    for summary in store.list_objects("demo-bucket", ""):
        print(f"  {summary.key:<32} {summary.size:>5} bytes")
