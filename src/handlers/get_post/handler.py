"""
Lambda handler responsible for viewing a post or downloading its image.
"""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import ValidationError

from core.models.api import PostResponse
from core.models.errors import BlogServiceError, NotFoundError
from core.services.post_images import build_post_image_lifecycle
from core.utils.auth import get_requester_id
from core.utils.decorators import api_gateway_handler, domain_error_response
from core.utils.response import ResponseBuilder
from core.utils.validators import sanitize_validation_errors, validate_request

from .models import GetPostRequest

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics()


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle post view or image download requests.

    This function:
     - Default: return the post, flagging whether the requester wrote it
     - download=true: stream the stored image as an attachment

    Args:
        event: API Gateway event payload.
        context: AWS Lambda runtime context.

    Returns:
        API Gateway-compatible response dictionary.
    """
    request_id = getattr(context, "aws_request_id", None)
    logger.info(
        "Received post view/download request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "query_params": event.get("queryStringParameters"),
            "request_id": request_id,
        },
    )

    path_params = event.get("pathParameters") or {}
    query_params = event.get("queryStringParameters") or {}

    params = {
        "post_id": path_params.get("post_id"),
        "download": str(query_params.get("download", "false")).lower() == "true",
    }

    try:
        request = validate_request(GetPostRequest, params)
    except ValidationError as exc:
        logger.error(
            "Request validation failed",
            extra={"errors": exc.errors(include_input=False, include_url=False)},
        )
        return ResponseBuilder.bad_request(
            message="Invalid request params",
            details={"errors": sanitize_validation_errors(exc.errors())},
        )

    lifecycle = build_post_image_lifecycle()

    try:
        if request.download:
            content, content_type, filename = lifecycle.download_image(request.post_id)
            return ResponseBuilder.image(
                content,
                content_type=content_type,
                download_name=filename,
            )

        post = lifecycle.get_post(request.post_id)

    except NotFoundError as exc:
        logger.warning(
            "Post or image not found",
            extra={"post_id": request.post_id, "download": request.download},
        )
        return domain_error_response(exc, request_id=request_id)

    except BlogServiceError as exc:
        logger.exception(
            "Get post failed",
            extra={"post_id": request.post_id, "download": request.download},
        )
        return domain_error_response(exc, request_id=request_id)

    response = PostResponse.from_post(post, requester_id=get_requester_id(event))
    return ResponseBuilder.ok(response.model_dump())
