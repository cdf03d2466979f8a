"""core.py - Wire settings, storage, exporter and handler together.

``install()`` is the one call an application makes at start-up. It checks the
settings and, only when they are complete, attaches an S3LogHandler to the
requested logger. With incomplete settings nothing is registered, so the
application never pays for (or fails on) exports that cannot succeed.
"""

import logging
from typing import Optional

from .config import Settings, load_settings
from .errors import ConfigurationError
from .exporter import S3Exporter
from .handler import S3LogHandler
from .storage import Boto3ObjectStore, ObjectStore

_log = logging.getLogger(__name__)


def install(
    settings: Optional[Settings] = None,
    logger: Optional[logging.Logger] = None,
    store: Optional[ObjectStore] = None,
) -> Optional[S3LogHandler]:
    """Attach a bucket log handler to ``logger`` (default: the root logger).

    Args:
        settings: Settings to use. Loaded from the environment when omitted.
        logger: Logger to attach the handler to.
        store: ObjectStore to use instead of a boto3-backed one built from
            ``settings``.

    Returns:
        The installed handler, or None when the settings are disabled,
        incomplete, or (when loaded from the environment) invalid.
    """
    if settings is None:
        try:
            settings = load_settings()
        except ConfigurationError as exc:
            _log.warning("bucket log target not installed: %s", exc)
            return None

    if not settings.is_valid:
        if settings.enabled:
            _log.info(
                "bucket log target not installed; missing settings: %s",
                ", ".join(settings.missing_fields()),
            )
        return None

    if store is None:
        store = Boto3ObjectStore.from_settings(settings)

    handler = S3LogHandler(
        S3Exporter.from_settings(settings, store),
        capacity=settings.flush_interval,
        max_age=settings.flush_max_age_seconds,
    )
    target = logger if logger is not None else logging.getLogger()
    target.addHandler(handler)
    _log.debug(
        "bucket log target installed: s3://%s/%s", settings.bucket, settings.directory
    )
    return handler


def uninstall(handler: S3LogHandler, logger: Optional[logging.Logger] = None) -> None:
    """Detach ``handler``, exporting anything still buffered."""
    target = logger if logger is not None else logging.getLogger()
    target.removeHandler(handler)
    handler.close()
