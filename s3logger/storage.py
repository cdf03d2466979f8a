"""storage.py - The narrow object-storage interface used by the exporter.

``ObjectStore`` is the only thing the export and retention logic knows about
storage. ``Boto3ObjectStore`` implements it on top of a boto3 S3 client, which
covers AWS S3 as well as S3-compatible stores such as MinIO when an
``endpoint_url`` is configured.

Log bodies are handled as text. They are encoded as UTF-8 on the way in and
decoded on the way out, with undecodable bytes replaced rather than failing
the whole read.

Typical usage::

    from s3logger.storage import Boto3ObjectStore

    store = Boto3ObjectStore.from_settings(settings)
    for summary in store.list_objects("my-bucket", "_logs"):
        print(summary.key, summary.last_modified)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Iterator, Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import ClientError

from .errors import ObjectNotFoundError

_NOT_FOUND_CODES = frozenset({"NoSuchKey", "404", "NotFound"})


@dataclass(frozen=True)
class RemoteObject:
    """Snapshot of one object as read from the bucket."""

    key: str
    size: int
    body: str
    last_modified: Optional[datetime] = None


@dataclass(frozen=True)
class ObjectSummary:
    """One entry of a bucket listing."""

    key: str
    last_modified: datetime
    size: int = 0


class ObjectStore(ABC):
    """Abstract bucket operations needed to keep a rolling log.

    Implementations must be blocking. Timeouts and retries belong to the
    implementation; callers never cancel an operation.
    """

    @abstractmethod
    def get_object(self, bucket: str, key: str) -> RemoteObject:
        """Read ``key`` and its size.

        Raises:
            ObjectNotFoundError: If ``key`` does not exist.
        """

    @abstractmethod
    def put_object(self, bucket: str, key: str, body: str) -> None:
        """Create or replace ``key`` with ``body``."""

    @abstractmethod
    def delete_object(self, bucket: str, key: str) -> None:
        """Delete ``key``. Deleting a missing key is not an error."""

    @abstractmethod
    def copy_object(self, bucket: str, source_key: str, dest_key: str) -> None:
        """Copy ``source_key`` to ``dest_key`` inside ``bucket``."""

    @abstractmethod
    def list_objects(self, bucket: str, prefix: str) -> Iterator[ObjectSummary]:
        """Yield every object under ``prefix``, following all result pages."""


class Boto3ObjectStore(ObjectStore):
    """ObjectStore backed by a boto3 S3 client.

    Attributes:
        client: The underlying ``boto3`` S3 client.

    Example:
        >>> import boto3
        >>> store = Boto3ObjectStore(boto3.client("s3", region_name="eu-west-1"))
    """

    CONTENT_TYPE = "text/plain; charset=utf-8"

    def __init__(self, client) -> None:
        self.client = client

    @classmethod
    def from_settings(cls, settings) -> "Boto3ObjectStore":
        """Build a client from ``Settings`` region, credentials and endpoint."""
        config = BotoConfig(
            retries={"max_attempts": 3, "mode": "standard"},
            connect_timeout=5,
            read_timeout=30,
        )
        client_kwargs = {
            "region_name": settings.region,
            "aws_access_key_id": settings.access_key_id,
            "aws_secret_access_key": settings.secret_access_key.get_secret_value(),
            "config": config,
        }
        if settings.endpoint_url:
            client_kwargs["endpoint_url"] = settings.endpoint_url
        return cls(boto3.client("s3", **client_kwargs))

    def get_object(self, bucket: str, key: str) -> RemoteObject:
        try:
            response = self.client.get_object(Bucket=bucket, Key=key)
        except ClientError as exc:
            code = str(exc.response.get("Error", {}).get("Code", ""))
            if code in _NOT_FOUND_CODES:
                raise ObjectNotFoundError(bucket, key) from exc
            raise

        stream = response["Body"]
        try:
            raw = stream.read()
        finally:
            stream.close()

        return RemoteObject(
            key=key,
            size=int(response.get("ContentLength", len(raw))),
            body=raw.decode("utf-8", errors="replace"),
            last_modified=response.get("LastModified"),
        )

    def put_object(self, bucket: str, key: str, body: str) -> None:
        self.client.put_object(
            Bucket=bucket,
            Key=key,
            Body=body.encode("utf-8"),
            ContentType=self.CONTENT_TYPE,
        )

    def delete_object(self, bucket: str, key: str) -> None:
        self.client.delete_object(Bucket=bucket, Key=key)

    def copy_object(self, bucket: str, source_key: str, dest_key: str) -> None:
        self.client.copy_object(
            Bucket=bucket,
            CopySource={"Bucket": bucket, "Key": source_key},
            Key=dest_key,
        )

    def list_objects(self, bucket: str, prefix: str) -> Iterator[ObjectSummary]:
        paginator = self.client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=bucket, Prefix=prefix):
            for obj in page.get("Contents", []):
                yield ObjectSummary(
                    key=obj["Key"],
                    last_modified=obj["LastModified"],
                    size=obj.get("Size", 0),
                )
