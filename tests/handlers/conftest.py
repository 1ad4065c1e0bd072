import base64
import json
from collections.abc import Callable
from types import SimpleNamespace
from typing import Any

import pytest

from core.models.post import UploadPayload


@pytest.fixture
def lambda_context(monkeypatch):
    context = SimpleNamespace(
        aws_request_id="test-request-id",
        function_name="test-function",
        memory_limit_in_mb=256,
        invoked_function_arn="arn:aws:lambda:us-east-1:000000000000:function:test",
        log_group_name="/aws/lambda/test-function",
        log_stream_name="2024/01/01/[$LATEST]test",
    )

    monkeypatch.setattr(
        "aws_lambda_powertools.utilities.typing.LambdaContext",
        lambda: context,
        raising=False,
    )

    return context


@pytest.fixture
def api_event() -> Callable[..., dict[str, Any]]:
    """
    Build an API Gateway proxy event.

    Usage:
        event = api_event(body={"title": "t"}, user_id="john", post_id="post_1")
    """

    def _event(
        *,
        body: Any = None,
        user_id: str | None = "john",
        post_id: str | None = None,
        query: dict[str, str] | None = None,
        method: str = "POST",
    ) -> dict[str, Any]:
        event: dict[str, Any] = {
            "httpMethod": method,
            "path": "/posts",
            "headers": {"Content-Type": "application/json"},
            "requestContext": {"authorizer": {"user_id": user_id} if user_id else {}},
        }
        if body is not None:
            event["body"] = body if isinstance(body, str) else json.dumps(body)
        if post_id is not None:
            event["pathParameters"] = {"post_id": post_id}
            event["path"] = f"/posts/{post_id}"
        if query is not None:
            event["queryStringParameters"] = query
        return event

    return _event


@pytest.fixture
def post_form(small_png) -> Callable[..., dict[str, Any]]:
    """JSON body for create/edit requests carrying a base64 image."""

    def _form(
        *,
        title: str = "My first post",
        body: str = "Hello world",
        image: bytes | None = small_png,
        file_name: str = "photo.png",
    ) -> dict[str, Any]:
        form: dict[str, Any] = {"title": title, "body": body}
        if image is not None:
            form["file"] = base64.b64encode(image).decode("utf-8")
            form["file_name"] = file_name
        return form

    return _form


@pytest.fixture
def stored_post(lifecycle, small_png):
    """A post owned by john with an image in the bucket."""
    return lifecycle.create_post(
        author_id="john",
        title="Stored post",
        body="Stored body",
        upload=UploadPayload(data=small_png, content_type="image/png", file_name="stored.png"),
    )
