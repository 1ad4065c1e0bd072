"""DynamoDB-backed implementation of PostRepository."""

from typing import Any

from aws_lambda_powertools import Logger
from botocore.exceptions import ClientError
from pydantic import ValidationError as PydanticValidationError

from core.infrastructure.adapters.dynamodb_adapter import DynamoDBAdapter, DynamoDBAdapterProtocol
from core.models.errors import NotFoundError, PostPersistenceError
from core.models.post import Post
from core.repositories.post_repository import PostRepository
from core.services.storage_keys import extract_key
from core.utils.constants import (
    ERROR_CODE_POST_CREATE_FAILED,
    ERROR_CODE_POST_DELETE_FAILED,
    ERROR_CODE_POST_FETCH_FAILED,
    ERROR_CODE_POST_LIST_FAILED,
    ERROR_CODE_POST_UPDATE_FAILED,
    MESSAGE_POST_NOT_FOUND,
)

logger = Logger(UTC=True)

OWNED_POST_CONDITION = "attribute_exists(post_id) AND author_id = :author_id"


def _is_condition_failure(exc: ClientError) -> bool:
    return exc.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException"


class DynamoDBPostRepository(PostRepository):
    """DynamoDB-backed post storage with error handling.

    All boto3 errors are caught and translated into
    domain-specific errors with stable semantics.
    """

    def __init__(self, adapter: DynamoDBAdapterProtocol | None = None) -> None:
        """Initialize with DynamoDB adapter."""
        self._db: DynamoDBAdapterProtocol = adapter or DynamoDBAdapter()

    def create_post(self, *, post: Post) -> None:
        logger.debug(
            "Creating post",
            extra={"post_id": post.post_id, "author_id": post.author_id},
        )

        try:
            self._db.put_item(
                item=post.model_dump(),
                condition_expression="attribute_not_exists(post_id)",
            )
        except ClientError as exc:
            logger.error(
                "DynamoDB put_item failed",
                extra={"post_id": post.post_id, "conflict": _is_condition_failure(exc)},
            )
            raise PostPersistenceError(
                message="Unable to save post at this time",
                error_code=ERROR_CODE_POST_CREATE_FAILED,
                details={"post_id": post.post_id},
            ) from exc
        except Exception as exc:
            logger.exception("Unexpected error creating post")
            raise PostPersistenceError(
                message="Unable to save post at this time",
                error_code=ERROR_CODE_POST_CREATE_FAILED,
                details={"post_id": post.post_id},
            ) from exc

        logger.info("Post created", extra={"post_id": post.post_id})

    def fetch_post(self, *, post_id: str) -> Post | None:
        logger.debug("Fetching post", extra={"post_id": post_id})

        try:
            response = self._db.get_item(key={"post_id": post_id})
            item = response.get("Item")

            if item is None:
                return None

            return Post.model_validate(item)

        except (ClientError, PydanticValidationError) as exc:
            logger.error("Unable to read post", extra={"post_id": post_id})
            raise PostPersistenceError(
                message="Unable to retrieve post",
                error_code=ERROR_CODE_POST_FETCH_FAILED,
                details={"post_id": post_id},
            ) from exc

        except Exception as exc:
            logger.exception("Unexpected error fetching post")
            raise PostPersistenceError(
                message="Unable to retrieve post",
                error_code=ERROR_CODE_POST_FETCH_FAILED,
                details={"post_id": post_id},
            ) from exc

    def update_post(
        self,
        *,
        post_id: str,
        author_id: str,
        title: str,
        body: str,
        image_url: str,
        image_key: str,
        updated_at: str,
    ) -> Post:
        logger.debug("Updating post", extra={"post_id": post_id})

        try:
            response = self._db.update_item(
                Key={"post_id": post_id},
                UpdateExpression=(
                    "SET #title = :title, #body = :body, image_url = :image_url, "
                    "image_key = :image_key, updated_at = :updated_at"
                ),
                ConditionExpression=OWNED_POST_CONDITION,
                ExpressionAttributeNames={"#title": "title", "#body": "body"},
                ExpressionAttributeValues={
                    ":title": title,
                    ":body": body,
                    ":image_url": image_url,
                    ":image_key": image_key,
                    ":updated_at": updated_at,
                    ":author_id": author_id,
                },
                ReturnValues="ALL_NEW",
            )
            updated = Post.model_validate(response["Attributes"])

        except ClientError as exc:
            if _is_condition_failure(exc):
                logger.warning(
                    "Post missing or not owned during update",
                    extra={"post_id": post_id},
                )
                raise NotFoundError(
                    message=MESSAGE_POST_NOT_FOUND,
                    details={"post_id": post_id},
                ) from exc

            logger.error("DynamoDB update_item failed", extra={"post_id": post_id})
            raise PostPersistenceError(
                message="Unable to update post at this time",
                error_code=ERROR_CODE_POST_UPDATE_FAILED,
                details={"post_id": post_id},
            ) from exc

        except Exception as exc:
            logger.exception("Unexpected error updating post")
            raise PostPersistenceError(
                message="Unable to update post at this time",
                error_code=ERROR_CODE_POST_UPDATE_FAILED,
                details={"post_id": post_id},
            ) from exc

        logger.info("Post updated", extra={"post_id": post_id})
        return updated

    def remove_post(self, *, post_id: str, author_id: str) -> None:
        logger.debug("Removing post", extra={"post_id": post_id})

        try:
            self._db.delete_item(
                key={"post_id": post_id},
                ConditionExpression=OWNED_POST_CONDITION,
                ExpressionAttributeValues={":author_id": author_id},
            )

        except ClientError as exc:
            if _is_condition_failure(exc):
                raise NotFoundError(
                    message=MESSAGE_POST_NOT_FOUND,
                    details={"post_id": post_id},
                ) from exc

            logger.error("DynamoDB delete_item failed", extra={"post_id": post_id})
            raise PostPersistenceError(
                message="Unable to delete post at this time",
                error_code=ERROR_CODE_POST_DELETE_FAILED,
                details={"post_id": post_id},
            ) from exc

        except Exception as exc:
            logger.exception("Unexpected error deleting post")
            raise PostPersistenceError(
                message="Unable to delete post at this time",
                error_code=ERROR_CODE_POST_DELETE_FAILED,
                details={"post_id": post_id},
            ) from exc

        logger.info("Post removed", extra={"post_id": post_id})

    def list_image_keys(self) -> set[str]:
        keys: set[str] = set()
        kwargs: dict[str, Any] = {"ProjectionExpression": "image_key, image_url"}

        try:
            while True:
                response = self._db.scan(**kwargs)

                for item in response.get("Items", []):
                    key = item.get("image_key") or extract_key(item.get("image_url"))
                    if key:
                        keys.add(key)

                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    return keys
                kwargs["ExclusiveStartKey"] = last_key

        except ClientError as exc:
            logger.error("DynamoDB scan failed")
            raise PostPersistenceError(
                message="Unable to list post images",
                error_code=ERROR_CODE_POST_LIST_FAILED,
            ) from exc
