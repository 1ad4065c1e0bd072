"""S3-backed implementation of ObjectStoreRepository.

The store is reached through its S3-compatible API (Supabase Storage exposes
one) while public URLs follow the ``/storage/v1/object/public/<bucket>/<key>``
layout served by the store's CDN.
"""

from urllib.parse import quote

from aws_lambda_powertools import Logger
from botocore.exceptions import ClientError

from core.infrastructure.adapters.s3_adapter import S3Adapter, S3AdapterProtocol
from core.models.errors import (
    ImageDownloadFailedError,
    NotFoundError,
    StoreUnavailableError,
    UploadFailedError,
)
from core.models.post import CleanupResult
from core.repositories.storage_repository import ObjectStoreRepository
from core.utils.config import ObjectStoreSettings, load_object_store_settings
from core.utils.constants import (
    DEFAULT_CONTENT_TYPE_BINARY,
    ERROR_CODE_IMAGE_NOT_FOUND,
    PUBLIC_OBJECT_PATH,
)

logger = Logger(UTC=True)

_MISSING_KEY_CODES = frozenset({"NoSuchKey", "404", "NotFound"})


def _error_code(exc: ClientError) -> str | None:
    return exc.response.get("Error", {}).get("Code")


class S3ObjectStore(ObjectStoreRepository):
    """Object store with credentials present."""

    configured = True

    def __init__(
        self,
        settings: ObjectStoreSettings,
        adapter: S3AdapterProtocol | None = None,
    ) -> None:
        """Create storage using the provided S3 adapter."""
        self._settings = settings
        self._s3: S3AdapterProtocol = adapter or S3Adapter(settings)

    @property
    def bucket(self) -> str:
        return self._settings.bucket

    def put(self, *, key: str, data: bytes, content_type: str) -> str:
        """Upload image bytes and return the public URL."""
        logger.debug(
            "Uploading image",
            extra={"key": key, "size": len(data), "content_type": content_type},
        )

        try:
            self._s3.put_object(key=key, body=data, content_type=content_type)

        except ClientError as exc:
            logger.error(
                "Object store upload failed",
                extra={"key": key, "error_code": _error_code(exc)},
            )
            raise UploadFailedError(
                message="Unable to upload image at this time",
                details={"key": key, "store_error": _error_code(exc)},
            ) from exc

        except Exception as exc:
            logger.exception("Unexpected error uploading image")
            raise UploadFailedError(
                message="Unable to upload image at this time",
                details={"key": key},
            ) from exc

        url = self.public_url(key)
        logger.info("Upload successful", extra={"key": key, "public_url": url})
        return url

    def public_url(self, key: str) -> str:
        base = self._settings.url.rstrip("/")
        return f"{base}/{PUBLIC_OBJECT_PATH}/{quote(self.bucket)}/{quote(key)}"

    def get(self, *, key: str) -> tuple[bytes, str]:
        """Download image bytes from the store."""
        logger.debug("Downloading image", extra={"key": key})

        try:
            response = self._s3.get_object(key=key)
            body = response["Body"].read()
            content_type = response.get("ContentType") or DEFAULT_CONTENT_TYPE_BINARY

        except ClientError as exc:
            logger.error(
                "Object store download failed",
                extra={"key": key, "error_code": _error_code(exc)},
            )

            if _error_code(exc) in _MISSING_KEY_CODES:
                raise NotFoundError(
                    message="Image not found",
                    error_code=ERROR_CODE_IMAGE_NOT_FOUND,
                    details={"key": key},
                ) from exc

            raise ImageDownloadFailedError(
                message="Unable to download image at this time",
                details={"key": key},
            ) from exc

        except Exception as exc:
            logger.exception("Unexpected error downloading image")
            raise ImageDownloadFailedError(
                message="Unable to download image at this time",
                details={"key": key},
            ) from exc

        return body, content_type

    def delete(self, *, key: str) -> CleanupResult:
        """Delete an image object; failures are returned, not raised."""
        logger.debug("Deleting image", extra={"key": key})

        try:
            self._s3.delete_object(key=key)
        except Exception as exc:
            return CleanupResult(key=key, ok=False, error=f"{type(exc).__name__}: {exc}")

        logger.info("Image deleted", extra={"key": key})
        return CleanupResult(key=key, ok=True)


class UnconfiguredObjectStore(ObjectStoreRepository):
    """Stand-in used when store credentials are missing.

    Every upload fails fast; deletions report failure without a network call.
    """

    configured = False

    def _unavailable(self) -> StoreUnavailableError:
        return StoreUnavailableError(
            message="Object store is not configured",
            details={"hint": "set OBJECT_STORE_URL and OBJECT_STORE_ACCESS_KEY_ID/SECRET"},
        )

    def put(self, *, key: str, data: bytes, content_type: str) -> str:
        raise self._unavailable()

    def public_url(self, key: str) -> str:
        raise self._unavailable()

    def get(self, *, key: str) -> tuple[bytes, str]:
        raise self._unavailable()

    def delete(self, *, key: str) -> CleanupResult:
        return CleanupResult(key=key, ok=False, error="Object store is not configured")


ObjectStore = S3ObjectStore | UnconfiguredObjectStore


def build_object_store(settings: ObjectStoreSettings | None = None) -> ObjectStore:
    """Build the store from explicit settings or the environment."""
    settings = settings or load_object_store_settings()

    if settings is None:
        logger.warning("Object store credentials missing; image uploads disabled")
        return UnconfiguredObjectStore()

    return S3ObjectStore(settings)
