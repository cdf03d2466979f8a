"""s3logger/__init__.py - Public API for the s3logger package.

s3logger ships warning and error log records from the standard ``logging``
module to a rolling daily log object in an S3-compatible bucket. The current
object is rotated into numbered archives once it grows past a size threshold,
and objects older than a retention window are deleted.

Quick start:
    import logging
    import s3logger

    # 1. Configure through S3_LOGGER_* environment variables (or pass Settings)
    #    S3_LOGGER_BUCKET, S3_LOGGER_REGION, S3_LOGGER_ACCESS_KEY_ID, ...
    handler = s3logger.install()          # None when settings are incomplete

    # 2. Use standard logging as usual
    logger = logging.getLogger(__name__)
    logger.info("job started")            # ignored (below WARNING)
    logger.error("database timeout")      # buffered, exported on flush

    # 3. Buffered lines are exported when the buffer fills, on
    #    handler.flush(), and at interpreter exit.

Exported names:
    install / uninstall: Build the handler from Settings and attach/detach it.
    S3LogHandler:        logging.Handler that buffers records and exports batches.
    S3Exporter:          The append / rotate / create export cycle.
    RetentionSweeper:    Deletes objects older than the retention window.
    Settings:            pydantic-settings model of the configuration.
    Boto3ObjectStore:    ObjectStore implementation on top of boto3.
"""

from .config import Settings, load_settings
from .core import install, uninstall
from .errors import ConfigurationError, ObjectNotFoundError, S3LoggerError, WriteError
from .exporter import ExportState, LogExporter, S3Exporter, format_message
from .handler import S3LogHandler
from .retention import RetentionSweeper, SweepResult
from .storage import Boto3ObjectStore, ObjectStore, ObjectSummary, RemoteObject

__all__ = [
    "install",
    "uninstall",
    "Settings",
    "load_settings",
    "S3LogHandler",
    "LogExporter",
    "S3Exporter",
    "ExportState",
    "format_message",
    "RetentionSweeper",
    "SweepResult",
    "ObjectStore",
    "Boto3ObjectStore",
    "ObjectSummary",
    "RemoteObject",
    "S3LoggerError",
    "ObjectNotFoundError",
    "WriteError",
    "ConfigurationError",
]
__version__ = "0.1.0"
