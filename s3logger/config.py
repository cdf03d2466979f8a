"""config.py - Settings for the bucket log target.

Settings are read once, when the log target is installed, and never change
afterwards. Values come from three places, highest priority first:

    1. Keyword arguments / the ``overrides`` mapping passed to ``load_settings``.
    2. ``S3_LOGGER_*`` environment variables (e.g. ``S3_LOGGER_BUCKET``).
    3. The defaults below.

Any value may also be an environment reference such as ``$LOG_BUCKET`` or
``${LOG_BUCKET}``; it is replaced by that variable's value (or an empty
string if it is unset) before validation.

Example:
    >>> settings = load_settings(bucket="my-logs", region="$AWS_REGION")
    >>> settings.is_valid
    False
    >>> settings.missing_fields()
    ['access_key_id', 'secret_access_key']
"""

import os
import re
from typing import Any, List, Mapping, Optional

from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError

MIN_ROTATE_AT_BYTES = 1_000_000

_ENV_REF_RE = re.compile(r"^\$(?:\{(\w+)\}|(\w+))$")


def resolve_env_reference(value: Any) -> Any:
    """Return the environment value for ``$NAME`` / ``${NAME}`` strings.

    Anything that is not an environment reference is returned unchanged.
    """
    if not isinstance(value, str):
        return value
    match = _ENV_REF_RE.match(value.strip())
    if match is None:
        return value
    return os.environ.get(match.group(1) or match.group(2), "")


class Settings(BaseSettings):
    """Configuration of the log target."""

    model_config = SettingsConfigDict(env_prefix="S3_LOGGER_", extra="ignore")

    enabled: bool = Field(default=True, description="Register the log target at all")
    directory: str = Field(default="_logs", description="Key prefix for log objects")
    retention_days: int = Field(
        default=90, ge=0, description="Delete objects older than this (0 = keep forever)"
    )
    rotate_at_bytes: int = Field(
        default=10_000_000,
        ge=MIN_ROTATE_AT_BYTES,
        description="Archive the current object once it is larger than this",
    )
    region: str = Field(default="", description="Bucket region")
    bucket: str = Field(default="", description="Bucket name")
    access_key_id: str = Field(default="", description="Access key id")
    secret_access_key: SecretStr = Field(default=SecretStr(""), description="Secret access key")
    endpoint_url: str = Field(
        default="", description="Custom endpoint for S3-compatible stores (MinIO etc.)"
    )

    flush_interval: int = Field(
        default=1000, ge=1, description="Export after this many buffered lines"
    )
    flush_max_age_seconds: float = Field(
        default=0.0, ge=0, description="Export buffered lines at most this old (0 = off)"
    )
    sweep_interval_seconds: float = Field(
        default=0.0, ge=0, description="Minimum seconds between retention sweeps"
    )

    @field_validator(
        "directory",
        "retention_days",
        "rotate_at_bytes",
        "region",
        "bucket",
        "access_key_id",
        "secret_access_key",
        "endpoint_url",
        mode="before",
    )
    @classmethod
    def _resolve_env(cls, value: Any) -> Any:
        return resolve_env_reference(value)

    @field_validator("directory")
    @classmethod
    def _strip_directory(cls, value: str) -> str:
        return value.strip("/")

    def missing_fields(self) -> List[str]:
        """Return the names of the required settings that are empty."""
        required = {
            "region": self.region,
            "bucket": self.bucket,
            "access_key_id": self.access_key_id,
            "secret_access_key": self.secret_access_key.get_secret_value(),
        }
        return [name for name, value in required.items() if not value]

    @property
    def is_valid(self) -> bool:
        """True when the target is enabled and every required setting is present."""
        return bool(self.enabled and self.rotate_at_bytes and not self.missing_fields())


def load_settings(overrides: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> Settings:
    """Load Settings from the environment, with explicit values taking priority.

    Args:
        overrides: Mapping of setting name to value, e.g. parsed from an
            application config file.
        **kwargs: Individual settings; these win over ``overrides``.

    Raises:
        ConfigurationError: If a value fails validation (for example a
            ``rotate_at_bytes`` below 1,000,000 or a negative retention).
    """
    values = dict(overrides or {})
    values.update(kwargs)
    try:
        return Settings(**values)
    except ValidationError as exc:
        raise ConfigurationError(f"invalid s3logger settings: {exc}") from exc
