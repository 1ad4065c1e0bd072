"""
API Gateway responses for the post endpoints.

Every response carries the CORS headers. JSON bodies may carry the request
id; error bodies add an error code, a message and a timestamp. Errors raised
while handling a submitted post form echo the field errors and the form
itself under ``details`` so the client can re-render what the user typed.
"""

from __future__ import annotations

import base64
import json
from http import HTTPStatus
from typing import Any
from urllib.parse import quote

from core.utils.constants import (
    CORS_HEADERS,
    CORS_METHODS,
    CORS_ORIGIN,
    DEFAULT_CONTENT_TYPE,
    ERROR_CODE_VALIDATION_FAILED,
    EXPOSE_HEADERS,
    MESSAGE_POST_NOT_FOUND,
)
from core.utils.time import utc_now_iso

JsonDict = dict[str, Any]
FieldError = dict[str, str]

CORS_RESPONSE_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": CORS_ORIGIN,
    "Access-Control-Allow-Headers": CORS_HEADERS,
    "Access-Control-Allow-Methods": CORS_METHODS,
    "Access-Control-Expose-Headers": EXPOSE_HEADERS,
}


def _headers(
    content_type: str | None,
    cors_origin: str | None = None,
    extra: dict[str, str] | None = None,
) -> dict[str, str]:
    headers = dict(CORS_RESPONSE_HEADERS)

    if content_type:
        headers["Content-Type"] = content_type
    if cors_origin:
        headers["Access-Control-Allow-Origin"] = cors_origin

    if extra:
        headers.update(extra)
    return headers


def content_disposition(filename: str) -> str:
    """Attachment header with an ASCII fallback and an RFC 5987 UTF-8 name."""
    fallback = filename.encode("ascii", "replace").decode("ascii").replace('"', "_")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


class ResponseBuilder:
    """Factory for API Gateway-compatible HTTP responses."""

    @staticmethod
    def json_response(
        status: HTTPStatus,
        body: JsonDict | None = None,
        *,
        request_id: str | None = None,
        cors_origin: str | None = None,
    ) -> JsonDict:
        payload: JsonDict = dict(body or {})
        if request_id:
            payload["request_id"] = request_id

        return {
            "statusCode": status.value,
            "headers": _headers(DEFAULT_CONTENT_TYPE, cors_origin),
            "body": json.dumps(payload),
        }

    @staticmethod
    def ok(body: JsonDict, **kwargs: Any) -> JsonDict:
        return ResponseBuilder.json_response(HTTPStatus.OK, body, **kwargs)

    @staticmethod
    def created(body: JsonDict, **kwargs: Any) -> JsonDict:
        return ResponseBuilder.json_response(HTTPStatus.CREATED, body, **kwargs)

    @staticmethod
    def preflight(cors_origin: str | None = None) -> JsonDict:
        """Empty 204 answer to a CORS OPTIONS request."""
        return {
            "statusCode": HTTPStatus.NO_CONTENT.value,
            "headers": _headers(DEFAULT_CONTENT_TYPE, cors_origin),
            "body": "",
        }

    # ------------------------------------------------------------------
    # Errors
    # ------------------------------------------------------------------

    @staticmethod
    def error(
        *,
        status: HTTPStatus,
        message: str,
        error: str | None = None,
        details: JsonDict | None = None,
        request_id: str | None = None,
        cors_origin: str | None = None,
    ) -> JsonDict:
        payload: JsonDict = {
            "error": error or status.name,
            "message": message,
            "timestamp": utc_now_iso(),
        }
        if details:
            payload["details"] = details

        return ResponseBuilder.json_response(
            status,
            payload,
            request_id=request_id,
            cors_origin=cors_origin,
        )

    @staticmethod
    def form_error(
        *,
        status: HTTPStatus,
        message: str,
        error: str | None = None,
        field_errors: list[FieldError] | None = None,
        form: dict[str, str] | None = None,
        request_id: str | None = None,
    ) -> JsonDict:
        """Error for a submitted post form.

        ``details.errors`` lists the failing fields and ``details.form``
        repeats the submitted title and body. Either may be omitted.
        """
        details: JsonDict = {}
        if field_errors:
            details["errors"] = field_errors
        if form is not None:
            details["form"] = form

        return ResponseBuilder.error(
            status=status,
            error=error,
            message=message,
            details=details,
            request_id=request_id,
        )

    @staticmethod
    def validation_error(
        *,
        message: str,
        details: JsonDict | None = None,
        request_id: str | None = None,
    ) -> JsonDict:
        """422 Unprocessable Entity validation error."""
        return ResponseBuilder.error(
            status=HTTPStatus.UNPROCESSABLE_ENTITY,
            error=ERROR_CODE_VALIDATION_FAILED,
            message=message,
            details=details,
            request_id=request_id,
        )

    @staticmethod
    def bad_request(message: str, **kwargs: Any) -> JsonDict:
        return ResponseBuilder.error(status=HTTPStatus.BAD_REQUEST, message=message, **kwargs)

    @staticmethod
    def unauthorized(message: str = "Please log in", **kwargs: Any) -> JsonDict:
        return ResponseBuilder.error(status=HTTPStatus.UNAUTHORIZED, message=message, **kwargs)

    @staticmethod
    def forbidden(message: str = "Forbidden", **kwargs: Any) -> JsonDict:
        return ResponseBuilder.error(status=HTTPStatus.FORBIDDEN, message=message, **kwargs)

    @staticmethod
    def not_found(message: str = MESSAGE_POST_NOT_FOUND, **kwargs: Any) -> JsonDict:
        return ResponseBuilder.error(status=HTTPStatus.NOT_FOUND, message=message, **kwargs)

    @staticmethod
    def internal_error(message: str = "Internal server error", **kwargs: Any) -> JsonDict:
        return ResponseBuilder.error(
            status=HTTPStatus.INTERNAL_SERVER_ERROR,
            message=message,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    @staticmethod
    def image(
        content: bytes,
        *,
        content_type: str,
        download_name: str | None = None,
        cors_origin: str | None = None,
    ) -> JsonDict:
        """Base64 image body; ``download_name`` makes it an attachment."""
        extra = {"Content-Length": str(len(content))}
        if download_name:
            extra["Content-Disposition"] = content_disposition(download_name)

        return {
            "statusCode": HTTPStatus.OK.value,
            "headers": _headers(content_type, cors_origin, extra),
            "body": base64.b64encode(content).decode("utf-8"),
            "isBase64Encoded": True,
        }
