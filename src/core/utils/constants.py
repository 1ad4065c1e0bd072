"""Global constants used throughout the application.

This module centralizes all magic numbers, string literals, and configuration
values that are used across multiple modules. Using constants prevents hardcoding
values and makes it easy to change them globally.
"""

from typing import Final

# ============================================================================
# Error Codes
# ============================================================================


# Validation Errors
ERROR_CODE_VALIDATION_FAILED = "VALIDATION_FAILED"
ERROR_CODE_FILE_SIZE_EXCEEDED = "FILE_SIZE_EXCEEDED"

# Not Found Errors
ERROR_CODE_POST_NOT_FOUND = "POST_NOT_FOUND"
ERROR_CODE_IMAGE_NOT_FOUND = "IMAGE_NOT_FOUND"

# Object Store Errors
ERROR_CODE_STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
ERROR_CODE_IMAGE_UPLOAD_FAILED = "IMAGE_UPLOAD_FAILED"
ERROR_CODE_IMAGE_DOWNLOAD_FAILED = "IMAGE_DOWNLOAD_FAILED"

# Post / DynamoDB Errors
ERROR_CODE_POST_PERSISTENCE_FAILED = "POST_PERSISTENCE_FAILED"
ERROR_CODE_POST_CREATE_FAILED = "POST_CREATE_FAILED"
ERROR_CODE_POST_FETCH_FAILED = "POST_FETCH_FAILED"
ERROR_CODE_POST_UPDATE_FAILED = "POST_UPDATE_FAILED"
ERROR_CODE_POST_DELETE_FAILED = "POST_DELETE_FAILED"
ERROR_CODE_POST_LIST_FAILED = "POST_LIST_FAILED"


# ============================================================================
# User-facing Messages
# ============================================================================

MESSAGE_IMAGE_REQUIRED = "Please choose an image to upload"
MESSAGE_NOT_AN_IMAGE = "The selected file is not an image"
MESSAGE_UPLOAD_FAILED = "Image upload failed. Please try again."
MESSAGE_POST_NOT_FOUND = "Post not found"
MESSAGE_TRY_AGAIN = "Something went wrong saving your post. Please try again."


# ============================================================================
# File Upload Constraints
# ============================================================================

DEFAULT_MAX_UPLOAD_BYTES: Final[int] = 10 * 1024 * 1024  # 10MB in bytes

# Images below this size are stored as uploaded
TRANSCODE_MIN_BYTES: Final[int] = 100_000
TRANSCODE_QUALITY: Final[int] = 85
PNG_COMPRESS_LEVEL: Final[int] = 9

DEFAULT_CONTENT_TYPE_BINARY = "application/octet-stream"


# ============================================================================
# Storage Layout
# ============================================================================

POST_KEY_PREFIX = "posts/"
PUBLIC_PATH_MARKER = "public"
PUBLIC_OBJECT_PATH = "storage/v1/object/public"
DEFAULT_OBJECT_STORE_BUCKET = "uploads"
DEFAULT_AWS_REGION = "us-east-1"

# Uploads younger than this may belong to a create or edit still in flight
ORPHAN_MIN_AGE_MINUTES: Final[int] = 60


# ============================================================================
# Post Constraints
# ============================================================================

POST_ID_PREFIX = "post_"
TITLE_MAX_LENGTH = 200
BODY_MAX_LENGTH = 20_000


# ============================================================================
# API Gateway Configuration
# ============================================================================

CORS_ORIGIN = "*"
CORS_METHODS = "GET,POST,PUT,DELETE,OPTIONS"
CORS_HEADERS = "Content-Type,Authorization,X-Api-Key"
EXPOSE_HEADERS = "Content-Type,Content-Length,Content-Disposition"
DEFAULT_CONTENT_TYPE = "application/json"

# ============================================================================
# Environment Variable Names
# ============================================================================

ENV_AWS_ENDPOINT_URL = "AWS_ENDPOINT_URL"
ENV_AWS_REGION = "AWS_REGION"
ENV_DYNAMODB_ENDPOINT_URL = "DYNAMODB_ENDPOINT_URL"
ENV_POSTS_TABLE_NAME = "POSTS_TABLE_NAME"
ENV_MAX_UPLOAD_BYTES = "MAX_UPLOAD_BYTES"
ENV_OBJECT_STORE_URL = "OBJECT_STORE_URL"
ENV_OBJECT_STORE_ACCESS_KEY_ID = "OBJECT_STORE_ACCESS_KEY_ID"
ENV_OBJECT_STORE_SECRET_ACCESS_KEY = "OBJECT_STORE_SECRET_ACCESS_KEY"
ENV_OBJECT_STORE_BUCKET = "OBJECT_STORE_BUCKET"
ENV_OBJECT_STORE_ENDPOINT_URL = "OBJECT_STORE_ENDPOINT_URL"
ENV_OBJECT_STORE_REGION = "OBJECT_STORE_REGION"

# ============================================================================
# Helper Functions
# ============================================================================


def format_file_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted file size string
    """
    size: float = float(size_bytes)

    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0

    return f"{size:.1f} TB"
