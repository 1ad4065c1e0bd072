import base64
import json
from http import HTTPStatus
from typing import Any, cast

import pytest

from core.utils.response import ResponseBuilder, content_disposition


def parse_body(resp: dict[str, Any]) -> dict[str, Any]:
    body = resp.get("body")
    if not body:
        return {}

    return cast(dict[str, Any], json.loads(body))


def test_ok_response() -> None:
    resp = ResponseBuilder.ok({"foo": "bar"}, request_id="req-1", cors_origin="*")
    parsed = parse_body(resp)

    assert resp["statusCode"] == HTTPStatus.OK
    assert parsed["foo"] == "bar"
    assert parsed["request_id"] == "req-1"
    assert resp["headers"]["Access-Control-Allow-Origin"] == "*"


def test_created_response() -> None:
    resp = ResponseBuilder.created({"id": 1})
    parsed = parse_body(resp)

    assert resp["statusCode"] == HTTPStatus.CREATED
    assert parsed["id"] == 1


@pytest.mark.parametrize(
    "func,status,error_name",
    [
        (ResponseBuilder.bad_request, HTTPStatus.BAD_REQUEST, "BAD_REQUEST"),
        (ResponseBuilder.unauthorized, HTTPStatus.UNAUTHORIZED, "UNAUTHORIZED"),
        (ResponseBuilder.forbidden, HTTPStatus.FORBIDDEN, "FORBIDDEN"),
        (ResponseBuilder.not_found, HTTPStatus.NOT_FOUND, "NOT_FOUND"),
        (
            ResponseBuilder.internal_error,
            HTTPStatus.INTERNAL_SERVER_ERROR,
            "INTERNAL_SERVER_ERROR",
        ),
    ],
)
def test_error_responses_use_explicit_message(func, status, error_name) -> None:
    resp = func("bad", request_id="req-x", cors_origin="*")
    parsed = parse_body(resp)

    assert resp["statusCode"] == status
    assert parsed["error"] == error_name
    assert parsed["message"] == "bad"
    assert parsed["request_id"] == "req-x"
    assert "timestamp" in parsed


def test_default_error_messages() -> None:
    assert parse_body(ResponseBuilder.unauthorized())["message"] == "Please log in"
    assert parse_body(ResponseBuilder.forbidden())["message"] == "Forbidden"
    assert parse_body(ResponseBuilder.not_found())["message"] == "Post not found"
    assert (
        parse_body(ResponseBuilder.internal_error())["message"]
        == "Internal server error"
    )


def test_validation_error() -> None:
    resp = ResponseBuilder.validation_error(
        message="Invalid input",
        details={"field": "name"},
        request_id="req-val",
    )
    parsed = parse_body(resp)

    assert resp["statusCode"] == HTTPStatus.UNPROCESSABLE_ENTITY
    assert parsed["error"] == "VALIDATION_FAILED"
    assert parsed["message"] == "Invalid input"
    assert parsed["details"]["field"] == "name"
    assert parsed["request_id"] == "req-val"


def test_internal_error_with_details() -> None:
    resp = ResponseBuilder.internal_error(
        "Please try again",
        details={"form": {"title": "t", "body": "b"}},
    )
    parsed = parse_body(resp)

    assert resp["statusCode"] == HTTPStatus.INTERNAL_SERVER_ERROR
    assert parsed["details"]["form"] == {"title": "t", "body": "b"}


def test_form_error_echoes_fields_and_form() -> None:
    resp = ResponseBuilder.form_error(
        status=HTTPStatus.REQUEST_ENTITY_TOO_LARGE,
        error="FILE_SIZE_EXCEEDED",
        message="Image is too large",
        field_errors=[{"field": "file", "message": "Image is too large"}],
        form={"title": "t", "body": "b"},
        request_id="req-form",
    )
    parsed = parse_body(resp)

    assert resp["statusCode"] == HTTPStatus.REQUEST_ENTITY_TOO_LARGE
    assert parsed["error"] == "FILE_SIZE_EXCEEDED"
    assert parsed["details"] == {
        "errors": [{"field": "file", "message": "Image is too large"}],
        "form": {"title": "t", "body": "b"},
    }
    assert parsed["request_id"] == "req-form"


def test_form_error_without_form_or_fields_has_no_details() -> None:
    resp = ResponseBuilder.form_error(
        status=HTTPStatus.INTERNAL_SERVER_ERROR,
        message="Please try again",
    )

    assert "details" not in parse_body(resp)


def test_preflight() -> None:
    resp = ResponseBuilder.preflight("https://blog.example")

    assert resp["statusCode"] == HTTPStatus.NO_CONTENT
    assert resp["body"] == ""
    assert resp["headers"]["Access-Control-Allow-Origin"] == "https://blog.example"


def test_image_response() -> None:
    content = b"binary-data"

    resp = ResponseBuilder.image(content, content_type="image/png", cors_origin="*")

    assert resp["statusCode"] == HTTPStatus.OK
    assert resp["isBase64Encoded"] is True
    assert base64.b64decode(resp["body"]) == content
    assert resp["headers"]["Content-Type"] == "image/png"
    assert resp["headers"]["Content-Length"] == str(len(content))
    assert resp["headers"]["Access-Control-Allow-Origin"] == "*"
    assert "Content-Disposition" not in resp["headers"]


def test_image_as_attachment() -> None:
    resp = ResponseBuilder.image(
        b"jpeg",
        content_type="image/jpeg",
        download_name="My_Post.jpg",
    )

    assert resp["headers"]["Content-Disposition"] == (
        "attachment; filename=\"My_Post.jpg\"; filename*=UTF-8''My_Post.jpg"
    )


def test_content_disposition_non_ascii_name() -> None:
    header = content_disposition("Café.jpg")

    assert 'filename="Caf?.jpg"' in header
    assert "filename*=UTF-8''Caf%C3%A9.jpg" in header
