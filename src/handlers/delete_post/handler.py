"""
Lambda handler responsible for deleting a post.
"""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import ValidationError

from core.models.errors import BlogServiceError, NotFoundError
from core.services.post_images import build_post_image_lifecycle
from core.utils.auth import get_requester_id
from core.utils.decorators import api_gateway_handler, domain_error_response
from core.utils.response import ResponseBuilder
from core.utils.time import utc_now_iso
from core.utils.validators import sanitize_validation_errors, validate_request

from .models import DeletePostRequest, DeletePostResponse

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics()


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle post deletion requests.

    This function:
    - Extracts the post identifier from API Gateway path parameters
    - Checks the requester owns the post
    - Deletes the post, then makes a best-effort attempt at its image

    Args:
        event: API Gateway Lambda proxy event
        context: AWS Lambda execution context

    Returns:
        API Gateway-compatible HTTP response
    """
    request_id = getattr(context, "aws_request_id", None)
    logger.info(
        "Received post delete request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "request_id": request_id,
        },
    )

    requester_id = get_requester_id(event)
    if requester_id is None:
        return ResponseBuilder.unauthorized("Please log in to delete a post")

    path_params = event.get("pathParameters") or {}

    try:
        request = validate_request(
            DeletePostRequest,
            {"post_id": path_params.get("post_id")},
        )
    except ValidationError as exc:
        logger.error(
            "Request validation failed",
            extra={"errors": exc.errors(include_input=False, include_url=False)},
        )
        return ResponseBuilder.bad_request(
            message="Invalid request payload",
            details={"errors": sanitize_validation_errors(exc.errors())},
        )

    try:
        lifecycle = build_post_image_lifecycle()
        cleanup = lifecycle.delete_post(
            post_id=request.post_id,
            requester_id=requester_id,
        )

    except NotFoundError as exc:
        logger.warning("Post not deletable", extra={"post_id": request.post_id})
        return domain_error_response(exc, request_id=request_id)

    except BlogServiceError as exc:
        logger.exception("Deletion failed", extra={"post_id": request.post_id})
        return domain_error_response(exc, request_id=request_id)

    response = DeletePostResponse(
        post_id=request.post_id,
        message="Post deleted successfully",
        deleted_at=utc_now_iso(),
        image_removed=cleanup is not None and cleanup.ok,
    )

    return ResponseBuilder.ok(response.model_dump())
