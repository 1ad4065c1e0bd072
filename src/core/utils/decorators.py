"""
Common decorators and helpers for API Gateway Lambda handlers.
"""

from __future__ import annotations

import traceback
from collections.abc import Callable
from functools import wraps
from http import HTTPStatus
from typing import Any

from aws_lambda_powertools import Logger

from core.models.errors import (
    BlogServiceError,
    FileSizeError,
    ImageDownloadFailedError,
    NotFoundError,
    StoreUnavailableError,
    UploadFailedError,
    ValidationError,
)
from core.utils.constants import (
    ERROR_CODE_VALIDATION_FAILED,
    MESSAGE_POST_NOT_FOUND,
    MESSAGE_TRY_AGAIN,
    MESSAGE_UPLOAD_FAILED,
)
from core.utils.response import ResponseBuilder

logger = Logger(service="api-gateway-handler", UTC=True)

JsonDict = dict[str, Any]


def domain_error_response(
    exc: BlogServiceError,
    *,
    form: dict[str, str] | None = None,
    request_id: str | None = None,
) -> JsonDict:
    """
    Translate a domain error into an HTTP response.

    Form input is echoed back under ``details.form`` so the client can
    re-render what the user typed. Upload and store failures share one
    generic message; an oversized file gets its own.
    """
    if isinstance(exc, FileSizeError):
        return ResponseBuilder.form_error(
            status=HTTPStatus.REQUEST_ENTITY_TOO_LARGE,
            error=exc.error_code,
            message=exc.message,
            field_errors=[{"field": exc.field, "message": exc.message}],
            form=form,
            request_id=request_id,
        )

    if isinstance(exc, ValidationError):
        return ResponseBuilder.form_error(
            status=HTTPStatus.UNPROCESSABLE_ENTITY,
            error=ERROR_CODE_VALIDATION_FAILED,
            message=exc.message,
            field_errors=[{"field": exc.field, "message": exc.message}],
            form=form,
            request_id=request_id,
        )

    if isinstance(exc, NotFoundError):
        return ResponseBuilder.not_found(
            exc.message or MESSAGE_POST_NOT_FOUND,
            request_id=request_id,
        )

    if isinstance(exc, (StoreUnavailableError, UploadFailedError)):
        status = (
            HTTPStatus.SERVICE_UNAVAILABLE
            if isinstance(exc, StoreUnavailableError)
            else HTTPStatus.BAD_GATEWAY
        )
        return ResponseBuilder.form_error(
            status=status,
            error=exc.error_code,
            message=MESSAGE_UPLOAD_FAILED,
            field_errors=[{"field": "file", "message": MESSAGE_UPLOAD_FAILED}],
            form=form,
            request_id=request_id,
        )

    if isinstance(exc, ImageDownloadFailedError):
        return ResponseBuilder.error(
            status=HTTPStatus.BAD_GATEWAY,
            error=exc.error_code,
            message=exc.message,
            request_id=request_id,
        )

    # PostPersistenceError and anything else unexpected
    return ResponseBuilder.form_error(
        status=HTTPStatus.INTERNAL_SERVER_ERROR,
        message=MESSAGE_TRY_AGAIN,
        form=form,
        request_id=request_id,
    )


def _get_user_friendly_message(exc: Exception) -> str:
    """
    Convert technical exception messages into user-friendly ones.

    Preserves specific validation messages while making generic errors friendly.
    """
    exc_str = str(exc)

    friendly_prefixes = (
        "Invalid",
        "Missing",
        "Required",
        "Must",
        "Cannot",
        "Unable to",
        "Please",
        "Post",
        "Image",
        "File",
    )

    if exc_str and any(exc_str.startswith(prefix) for prefix in friendly_prefixes):
        return exc_str

    if isinstance(exc, ValueError):
        return "The provided data is invalid. Please check your input and try again."

    if isinstance(exc, (KeyError, AttributeError)):
        return "A required field is missing. Please ensure all required fields are provided."

    if isinstance(exc, TypeError):
        return "The data format is incorrect. Please check the request format."

    return "We encountered an issue processing your request. Please try again."


def _log_error(
    message: str,
    *,
    handler_name: str,
    request_id: str | None,
    exc: Exception,
    level: str = "warning",
) -> None:
    """
    Log error with consistent structure and full context.

    Args:
        message: Log message
        handler_name: Name of the handler function
        request_id: AWS request ID
        exc: Exception that was raised
        level: Log level ('warning' or 'exception')
    """
    log_extra = {
        "handler": handler_name,
        "request_id": request_id,
        "error": str(exc),
        "error_type": type(exc).__name__,
    }

    if level == "exception":
        logger.exception(message, extra=log_extra)
    else:
        log_extra["traceback"] = traceback.format_exc()
        logger.warning(message, extra=log_extra)


def api_gateway_handler(
    func: Callable[..., JsonDict],
) -> Callable[..., JsonDict]:
    """
    Decorator for API Gateway Lambda handlers.

    Provides:
    - Automatic CORS preflight (OPTIONS) handling
    - Translation of domain errors that escape the handler
    - Centralized handling of unexpected exceptions
    - Request ID tracking and structured logging

    Example:
        @api_gateway_handler
        def lambda_handler(event, context):
            return {"statusCode": 200, "body": "Success"}
    """

    @wraps(func)
    def wrapper(
        event: Any,
        context: Any,
        *,
        cors_origin: str | None = None,
    ) -> JsonDict:
        if event.get("httpMethod") == "OPTIONS":
            return ResponseBuilder.preflight(cors_origin)

        request_id = getattr(context, "aws_request_id", None)

        try:
            return func(event, context)

        except BlogServiceError as exc:
            _log_error(
                "Domain error escaped handler",
                handler_name=func.__name__,
                request_id=request_id,
                exc=exc,
            )
            return domain_error_response(exc, request_id=request_id)

        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            _log_error(
                "Validation error in handler",
                handler_name=func.__name__,
                request_id=request_id,
                exc=exc,
            )
            return ResponseBuilder.bad_request(
                _get_user_friendly_message(exc),
                request_id=request_id,
                cors_origin=cors_origin,
            )

        except PermissionError as exc:
            _log_error(
                "Permission denied in handler",
                handler_name=func.__name__,
                request_id=request_id,
                exc=exc,
            )
            return ResponseBuilder.forbidden(
                "You don't have permission to perform this action.",
                request_id=request_id,
                cors_origin=cors_origin,
            )

        except TimeoutError as exc:
            _log_error(
                "Request timeout",
                handler_name=func.__name__,
                request_id=request_id,
                exc=exc,
                level="exception",
            )
            return ResponseBuilder.error(
                message="The request took too long to process. Please try again.",
                status=HTTPStatus.GATEWAY_TIMEOUT,
                request_id=request_id,
                cors_origin=cors_origin,
            )

        except Exception as exc:
            _log_error(
                "Unexpected error in handler",
                handler_name=func.__name__,
                request_id=request_id,
                exc=exc,
                level="exception",
            )
            return ResponseBuilder.internal_error(
                "We're experiencing technical difficulties. Please try again in a few moments.",
                request_id=request_id,
                cors_origin=cors_origin,
            )

    return wrapper
