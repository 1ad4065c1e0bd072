"""
Lambda handler responsible for creating an image-bearing post.
"""

import json
from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import ValidationError as PydanticValidationError

from core.models.api import submitted_form
from core.models.errors import BlogServiceError, ValidationError
from core.services.post_images import build_post_image_lifecycle
from core.utils.auth import get_requester_id
from core.utils.decorators import api_gateway_handler, domain_error_response
from core.utils.response import ResponseBuilder
from core.utils.validators import sanitize_validation_errors, validate_request

from .models import CreatePostRequest, CreatePostResponse

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics()


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle post creation requests.

    The handler validates the title, body and base64 image, then delegates
    to the lifecycle manager which uploads the image before inserting the
    post. When anything fails no post is created and the submitted text is
    echoed back under ``details.form``.

    Expected API Gateway event structure:
    {
        "body": "{...}",           # JSON: title, body, file, file_name, content_type
        "requestContext": {"authorizer": {"user_id": "..."}}
    }

    Args:
        event: API Gateway Lambda proxy event containing the post payload
        context: AWS Lambda execution context

    Returns:
        API Gateway-compatible HTTP response containing the created post
    """
    request_id = getattr(context, "aws_request_id", None)
    logger.info(
        "Received create post request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "request_id": request_id,
            "function_name": getattr(context, "function_name", None),
        },
    )

    requester_id = get_requester_id(event)
    if requester_id is None:
        return ResponseBuilder.unauthorized("Please log in to create a post")

    try:
        body = json.loads(event.get("body") or "{}")
    except json.JSONDecodeError as exc:
        logger.exception("Invalid JSON body received", exc_info=exc)
        return ResponseBuilder.bad_request(message="Invalid JSON body")

    form = submitted_form(body)

    try:
        request = validate_request(CreatePostRequest, body)
    except PydanticValidationError as exc:
        logger.warning(
            "Request validation failed",
            extra={"errors": exc.errors(include_input=False, include_url=False)},
        )
        return ResponseBuilder.validation_error(
            message="Invalid post",
            details={
                "errors": sanitize_validation_errors(exc.errors()),
                "form": form,
            },
        )

    try:
        upload = request.to_upload()
        lifecycle = build_post_image_lifecycle()
        post = lifecycle.create_post(
            author_id=requester_id,
            title=request.title,
            body=request.body,
            upload=upload,
        )

    except ValidationError as exc:
        logger.warning(
            "Post rejected",
            extra={"field": exc.field, "error_code": exc.error_code},
        )
        return domain_error_response(exc, form=form, request_id=request_id)

    except BlogServiceError as exc:
        logger.exception(
            "Post creation failed",
            extra={"author_id": requester_id, "error_code": exc.error_code},
        )
        return domain_error_response(exc, form=form, request_id=request_id)

    response = CreatePostResponse.from_post(
        post,
        requester_id=requester_id,
        message="Post created successfully",
    )

    return ResponseBuilder.created(response.model_dump())
