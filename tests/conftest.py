"""conftest.py - Shared fixtures: an in-memory ObjectStore with call recording."""

from datetime import datetime, timezone
from typing import Dict, Iterator, List, Optional, Set, Tuple

import pytest

from s3logger.errors import ObjectNotFoundError
from s3logger.storage import ObjectStore, ObjectSummary, RemoteObject

NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


class MemoryObjectStore(ObjectStore):
    """Dict-backed ObjectStore for tests.

    Attributes:
        objects: key -> (body, last_modified) per bucket.
        calls: Every operation as a tuple, e.g. ``("get", "_logs/2024-01-15.log")``.
        page_size: Number of objects per listing page.
        pages_listed: Number of listing pages served so far.
        fail_on: Operation names that raise, e.g. ``{"put"}`` or ``{"delete:key"}``.
    """

    def __init__(self, page_size: int = 1000, clock=lambda: NOW) -> None:
        self.objects: Dict[str, Dict[str, Tuple[str, datetime]]] = {}
        self.calls: List[Tuple[str, ...]] = []
        self.page_size = page_size
        self.pages_listed = 0
        self.fail_on: Set[str] = set()
        self.clock = clock

    # helpers ------------------------------------------------------------- #

    def seed(self, bucket: str, key: str, body: str, last_modified: Optional[datetime] = None) -> None:
        self.objects.setdefault(bucket, {})[key] = (body, last_modified or self.clock())

    def body(self, bucket: str, key: str) -> str:
        return self.objects[bucket][key][0]

    def keys(self, bucket: str) -> List[str]:
        return sorted(self.objects.get(bucket, {}))

    def _check(self, op: str, key: str = "") -> None:
        if op in self.fail_on or f"{op}:{key}" in self.fail_on:
            raise RuntimeError(f"injected {op} failure for {key}")

    # ObjectStore ---------------------------------------------------------- #

    def get_object(self, bucket: str, key: str) -> RemoteObject:
        self.calls.append(("get", key))
        self._check("get", key)
        try:
            body, modified = self.objects[bucket][key]
        except KeyError:
            raise ObjectNotFoundError(bucket, key) from None
        return RemoteObject(key, len(body.encode("utf-8")), body, modified)

    def put_object(self, bucket: str, key: str, body: str) -> None:
        self.calls.append(("put", key))
        self._check("put", key)
        self.objects.setdefault(bucket, {})[key] = (body, self.clock())

    def delete_object(self, bucket: str, key: str) -> None:
        self.calls.append(("delete", key))
        self._check("delete", key)
        self.objects.get(bucket, {}).pop(key, None)

    def copy_object(self, bucket: str, source_key: str, dest_key: str) -> None:
        self.calls.append(("copy", source_key, dest_key))
        self._check("copy", source_key)
        body, _ = self.objects[bucket][source_key]
        self.objects[bucket][dest_key] = (body, self.clock())

    def list_objects(self, bucket: str, prefix: str) -> Iterator[ObjectSummary]:
        self.calls.append(("list", prefix))
        self._check("list", prefix)
        matching = [
            ObjectSummary(key, modified, len(body))
            for key, (body, modified) in sorted(self.objects.get(bucket, {}).items())
            if key.startswith(prefix)
        ]
        for start in range(0, max(len(matching), 1), self.page_size):
            self.pages_listed += 1
            yield from matching[start:start + self.page_size]


@pytest.fixture
def store() -> MemoryObjectStore:
    return MemoryObjectStore()
