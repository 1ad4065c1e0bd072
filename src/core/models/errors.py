"""Custom exception classes for the blog post service."""

from typing import Any

from core.utils.constants import (
    ERROR_CODE_FILE_SIZE_EXCEEDED,
    ERROR_CODE_IMAGE_DOWNLOAD_FAILED,
    ERROR_CODE_IMAGE_UPLOAD_FAILED,
    ERROR_CODE_POST_NOT_FOUND,
    ERROR_CODE_POST_PERSISTENCE_FAILED,
    ERROR_CODE_STORE_UNAVAILABLE,
    ERROR_CODE_VALIDATION_FAILED,
)


class BlogServiceError(Exception):
    """
    Base exception for all blog service errors.

    All custom errors must inherit from this class.
    Callers must explicitly provide a message and error code.
    Optional contextual information can be supplied via `details`.
    """

    message: str
    error_code: str
    details: dict[str, Any]

    def __init__(
        self,
        *,
        message: str,
        error_code: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}

        super().__init__(self.message)


class ValidationError(BlogServiceError):
    """Raised when user input is rejected.

    `field` names the form field the message belongs to.
    """

    def __init__(
        self,
        *,
        message: str,
        field: str = "body",
        error_code: str = ERROR_CODE_VALIDATION_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.field = field
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class FileSizeError(ValidationError):
    """Raised when an upload exceeds the configured maximum size."""

    def __init__(
        self,
        *,
        message: str,
        field: str = "file",
        error_code: str = ERROR_CODE_FILE_SIZE_EXCEEDED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            field=field,
            error_code=error_code,
            details=details,
        )


class NotFoundError(BlogServiceError):
    """Raised when a post does not exist or is not visible to the requester."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_POST_NOT_FOUND,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class StoreUnavailableError(BlogServiceError):
    """Raised when the object store was never configured."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_STORE_UNAVAILABLE,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class UploadFailedError(BlogServiceError):
    """Raised when the object store rejects or fails an upload."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_IMAGE_UPLOAD_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class ImageDownloadFailedError(BlogServiceError):
    """Raised when a stored image cannot be read back."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_IMAGE_DOWNLOAD_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class PostPersistenceError(BlogServiceError):
    """Raised when a post row cannot be written or read."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_POST_PERSISTENCE_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )
