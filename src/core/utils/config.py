"""Environment-driven configuration.

Configuration is read once per cold start by the factories that build the
object store and the lifecycle manager; nothing here caches global clients.
"""

import os

from aws_lambda_powertools import Logger
from pydantic import BaseModel, ConfigDict, Field, SecretStr

from core.utils.constants import (
    DEFAULT_AWS_REGION,
    DEFAULT_MAX_UPLOAD_BYTES,
    DEFAULT_OBJECT_STORE_BUCKET,
    ENV_AWS_REGION,
    ENV_MAX_UPLOAD_BYTES,
    ENV_OBJECT_STORE_ACCESS_KEY_ID,
    ENV_OBJECT_STORE_BUCKET,
    ENV_OBJECT_STORE_ENDPOINT_URL,
    ENV_OBJECT_STORE_REGION,
    ENV_OBJECT_STORE_SECRET_ACCESS_KEY,
    ENV_OBJECT_STORE_URL,
)

logger = Logger(UTC=True)


class ObjectStoreSettings(BaseModel):
    """Credentials and location of the remote object store."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    url: str = Field(..., min_length=1, description="Public base URL of the store")
    access_key_id: str = Field(..., min_length=1)
    secret_access_key: SecretStr
    bucket: str = Field(DEFAULT_OBJECT_STORE_BUCKET, min_length=1)
    endpoint_url: str | None = Field(
        None, description="S3-compatible API endpoint; boto3 default when unset"
    )
    region: str = DEFAULT_AWS_REGION


def _env(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def load_object_store_settings() -> ObjectStoreSettings | None:
    """Read object store settings from the environment.

    Returns:
        Settings, or None when the URL or either credential is missing.
    """
    url = _env(ENV_OBJECT_STORE_URL)
    access_key_id = _env(ENV_OBJECT_STORE_ACCESS_KEY_ID)
    secret_access_key = _env(ENV_OBJECT_STORE_SECRET_ACCESS_KEY)
    bucket = _env(ENV_OBJECT_STORE_BUCKET) or DEFAULT_OBJECT_STORE_BUCKET

    logger.info(
        "Object store configuration",
        extra={
            "url": "set" if url else "missing",
            "access_key_id": "set" if access_key_id else "missing",
            "secret_access_key": "set" if secret_access_key else "missing",
            "bucket": bucket,
        },
    )

    if not (url and access_key_id and secret_access_key):
        return None

    return ObjectStoreSettings(
        url=url,
        access_key_id=access_key_id,
        secret_access_key=SecretStr(secret_access_key),
        bucket=bucket,
        endpoint_url=_env(ENV_OBJECT_STORE_ENDPOINT_URL),
        region=(
            _env(ENV_OBJECT_STORE_REGION)
            or _env(ENV_AWS_REGION)
            or DEFAULT_AWS_REGION
        ),
    )


def get_max_upload_bytes() -> int:
    """Return the configured upload limit in bytes."""
    raw = _env(ENV_MAX_UPLOAD_BYTES)
    if raw is None:
        return DEFAULT_MAX_UPLOAD_BYTES

    try:
        value = int(raw)
    except ValueError as exc:
        raise RuntimeError(
            f"{ENV_MAX_UPLOAD_BYTES} must be an integer, got {raw!r}"
        ) from exc

    if value <= 0:
        raise RuntimeError(f"{ENV_MAX_UPLOAD_BYTES} must be positive, got {value}")

    return value
