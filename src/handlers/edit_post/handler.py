"""
Lambda handler responsible for editing a post and replacing its image.
"""

import json
from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import ValidationError as PydanticValidationError

from core.models.api import submitted_form
from core.models.errors import BlogServiceError, NotFoundError, ValidationError
from core.services.post_images import build_post_image_lifecycle
from core.utils.auth import get_requester_id
from core.utils.constants import MESSAGE_TRY_AGAIN
from core.utils.decorators import api_gateway_handler, domain_error_response
from core.utils.response import ResponseBuilder
from core.utils.validators import sanitize_validation_errors, validate_request

from .models import EditPostRequest, EditPostResponse

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics()


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle post edit requests.

    The new image is uploaded first; title, body and image reference are
    only written once it is stored, and the previous image is removed after
    that write. Missing and foreign posts both answer 404.

    Args:
        event: API Gateway Lambda proxy event
        context: AWS Lambda execution context

    Returns:
        API Gateway-compatible HTTP response containing the updated post
    """
    request_id = getattr(context, "aws_request_id", None)
    path_params = event.get("pathParameters") or {}
    logger.info(
        "Received edit post request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "post_id": path_params.get("post_id"),
            "request_id": request_id,
        },
    )

    requester_id = get_requester_id(event)
    if requester_id is None:
        return ResponseBuilder.unauthorized("Please log in to edit a post")

    try:
        body = json.loads(event.get("body") or "{}")
    except json.JSONDecodeError as exc:
        logger.exception("Invalid JSON body received", exc_info=exc)
        return ResponseBuilder.bad_request(message="Invalid JSON body")

    form = submitted_form(body)
    params = {**body, "post_id": path_params.get("post_id")} if isinstance(body, dict) else body

    try:
        request = validate_request(EditPostRequest, params)
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
        lifecycle = build_post_image_lifecycle()
        post = lifecycle.edit_post(
            post_id=request.post_id,
            requester_id=requester_id,
            title=request.title,
            body=request.body,
            upload=request.to_upload(),
        )

    except (ValidationError, NotFoundError) as exc:
        logger.warning(
            "Edit rejected",
            extra={"post_id": request.post_id, "error_code": exc.error_code},
        )
        return domain_error_response(exc, form=form, request_id=request_id)

    except BlogServiceError as exc:
        logger.exception(
            "Post edit failed",
            extra={"post_id": request.post_id, "error_code": exc.error_code},
        )
        return domain_error_response(exc, form=form, request_id=request_id)

    except Exception:
        logger.exception(
            "Unexpected error while editing post",
            extra={"post_id": request.post_id},
        )
        return ResponseBuilder.internal_error(
            MESSAGE_TRY_AGAIN,
            details={"form": form},
            request_id=request_id,
        )

    response = EditPostResponse.from_post(
        post,
        requester_id=requester_id,
        message="Post updated successfully",
    )

    return ResponseBuilder.ok(response.model_dump())
