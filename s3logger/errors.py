"""errors.py - Exception types raised by s3logger.

Only two of these ever leave the package. ``ConfigurationError`` is raised by
``load_settings()`` when the settings cannot be parsed, and ``WriteError`` is
raised by ``S3Exporter`` when even the best-effort write of a batch fails.
``ObjectNotFoundError`` is raised by ``ObjectStore.get_object()`` and recovered
inside the exporter.
"""


class S3LoggerError(Exception):
    """Base class for every error raised by s3logger."""


class ObjectNotFoundError(S3LoggerError):
    """The requested key does not exist in the bucket."""

    def __init__(self, bucket: str, key: str) -> None:
        super().__init__(f"s3://{bucket}/{key} does not exist")
        self.bucket = bucket
        self.key = key


class WriteError(S3LoggerError):
    """A batch could not be written to the bucket.

    The storage exception that caused it is available as ``__cause__``.
    """

    def __init__(self, bucket: str, key: str, lines: int) -> None:
        super().__init__(f"could not write {lines} line(s) to s3://{bucket}/{key}")
        self.bucket = bucket
        self.key = key
        self.lines = lines


class ConfigurationError(S3LoggerError, ValueError):
    """Settings are missing or fail validation."""
