"""Post image lifecycle.

This module owns the ordering of every step that touches both the object
store and the posts table:

- create: transcode -> upload -> insert row
- edit:   transcode -> upload -> update row -> best-effort delete old object
- delete: delete row -> best-effort delete object

A row never references an object that failed to upload. Objects may be
orphaned when a best-effort deletion fails; seed/cleanup_orphans.py removes
those out of band.
"""

import re
import uuid
from collections.abc import Callable

from aws_lambda_powertools import Logger, Metrics
from aws_lambda_powertools.metrics import MetricUnit

from core.infrastructure.aws.dynamodb_posts import DynamoDBPostRepository
from core.infrastructure.aws.s3_object_store import (
    ObjectStore,
    UnconfiguredObjectStore,
    build_object_store,
)
from core.models.errors import (
    FileSizeError,
    NotFoundError,
    PostPersistenceError,
    StoreUnavailableError,
    ValidationError,
)
from core.models.post import CleanupResult, ImageReference, Post, TranscodedImage, UploadPayload
from core.repositories.post_repository import PostRepository
from core.services.storage_keys import derive_key, resolve_image_key
from core.services.transcoder import transcode_image
from core.utils.config import get_max_upload_bytes
from core.utils.constants import (
    ERROR_CODE_IMAGE_NOT_FOUND,
    MESSAGE_IMAGE_REQUIRED,
    MESSAGE_NOT_AN_IMAGE,
    MESSAGE_POST_NOT_FOUND,
    POST_ID_PREFIX,
    format_file_size,
)
from core.utils.time import utc_now_iso

logger = Logger(UTC=True)
metrics = Metrics()

Transcoder = Callable[[bytes, str], TranscodedImage]

DOWNLOAD_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
}


class PostImageLifecycle:
    """Application service coordinating post rows and their stored image.

    Collaborators are injected so that the configured/unconfigured store and
    the repository can be swapped in tests.
    """

    def __init__(
        self,
        *,
        posts: PostRepository,
        store: ObjectStore,
        max_upload_bytes: int,
        transcoder: Transcoder = transcode_image,
    ) -> None:
        self.posts = posts
        self.store = store
        self.max_upload_bytes = max_upload_bytes
        self.transcoder = transcoder

    @staticmethod
    def generate_post_id() -> str:
        """Generate a unique post identifier."""
        return f"{POST_ID_PREFIX}{uuid.uuid4().hex}"

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_post(
        self,
        *,
        author_id: str,
        title: str,
        body: str,
        upload: UploadPayload | None,
    ) -> Post:
        """Upload the image and insert a new post referencing it.

        Raises:
            ValidationError: If no usable image was supplied
            FileSizeError: If the image exceeds the upload limit
            StoreUnavailableError: If the object store is not configured
            UploadFailedError: If the upload fails; no post is created
            PostPersistenceError: If the insert fails; the upload is discarded
        """
        payload = self._validate_upload(upload)
        self._ensure_store_available()

        image = self._store_image(payload)

        post = Post(
            post_id=self.generate_post_id(),
            author_id=author_id,
            title=title,
            body=body,
            created_at=utc_now_iso(),
            image_url=image.url,
            image_key=image.key,
        )

        try:
            self.posts.create_post(post=post)
        except Exception as exc:
            logger.exception(
                "Post insert failed after upload",
                extra={"post_id": post.post_id, "key": image.key},
            )
            self._discard_upload(image)

            if isinstance(exc, PostPersistenceError):
                raise
            raise PostPersistenceError(
                message="Unable to save post at this time",
                details={"post_id": post.post_id},
            ) from exc

        metrics.add_metric(name="PostCreated", unit=MetricUnit.Count, value=1)
        logger.info(
            "Post created",
            extra={"post_id": post.post_id, "author_id": author_id, "key": image.key},
        )
        return post

    def edit_post(
        self,
        *,
        post_id: str,
        requester_id: str,
        title: str,
        body: str,
        upload: UploadPayload | None,
    ) -> Post:
        """Replace a post's text and image.

        Nothing is written unless the new image uploads. The previous object
        is removed only after the row update succeeds.

        Raises:
            NotFoundError: If the post is missing or not owned by the requester
            ValidationError: If no usable image was supplied
            FileSizeError: If the image exceeds the upload limit
            StoreUnavailableError: If the object store is not configured
            UploadFailedError: If the upload fails; the post is unchanged
            PostPersistenceError: If the update fails; the upload is discarded
        """
        current = self._get_owned_post(post_id, requester_id)
        payload = self._validate_upload(upload)
        self._ensure_store_available()

        image = self._store_image(payload)

        try:
            updated = self.posts.update_post(
                post_id=post_id,
                author_id=requester_id,
                title=title,
                body=body,
                image_url=image.url,
                image_key=image.key,
                updated_at=utc_now_iso(),
            )
        except Exception as exc:
            logger.exception(
                "Post update failed after upload",
                extra={"post_id": post_id, "key": image.key},
            )
            self._discard_upload(image)

            if isinstance(exc, (NotFoundError, PostPersistenceError)):
                raise
            raise PostPersistenceError(
                message="Unable to update post at this time",
                details={"post_id": post_id},
            ) from exc

        metrics.add_metric(name="PostUpdated", unit=MetricUnit.Count, value=1)

        old_key = resolve_image_key(current)
        if old_key is None:
            if current.image_url:
                logger.warning(
                    "Previous image key not recoverable, skipping cleanup",
                    extra={"post_id": post_id, "image_url": current.image_url},
                )
        elif old_key != image.key:
            self._report_cleanup(self.store.delete(key=old_key), post_id=post_id)

        return updated

    def delete_post(self, *, post_id: str, requester_id: str) -> CleanupResult | None:
        """Delete a post row, then its stored image.

        Returns:
            The cleanup outcome, or None when the post had no resolvable image

        Raises:
            NotFoundError: If the post is missing or not owned by the requester
            PostPersistenceError: If the row cannot be deleted
        """
        post = self._get_owned_post(post_id, requester_id)

        self.posts.remove_post(post_id=post_id, author_id=requester_id)
        metrics.add_metric(name="PostDeleted", unit=MetricUnit.Count, value=1)
        logger.info("Post deleted", extra={"post_id": post_id})

        key = resolve_image_key(post)
        if key is None:
            if post.image_url:
                logger.warning(
                    "Image key not recoverable, skipping cleanup",
                    extra={"post_id": post_id, "image_url": post.image_url},
                )
            return None

        result = self.store.delete(key=key)
        self._report_cleanup(result, post_id=post_id)
        return result

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_post(self, post_id: str) -> Post:
        """Fetch a post for display.

        Raises:
            NotFoundError: If the post does not exist
        """
        post = self.posts.fetch_post(post_id=post_id)
        if post is None:
            raise NotFoundError(
                message=MESSAGE_POST_NOT_FOUND,
                details={"post_id": post_id},
            )
        return post

    def download_image(self, post_id: str) -> tuple[bytes, str, str]:
        """Read a post's image back from the store.

        Returns:
            Tuple of (content_bytes, content_type, download_filename)

        Raises:
            NotFoundError: If the post or its image does not exist
            StoreUnavailableError: If the object store is not configured
            ImageDownloadFailedError: If the download fails
        """
        post = self.get_post(post_id)

        key = resolve_image_key(post)
        if key is None:
            raise NotFoundError(
                message="Image not found",
                error_code=ERROR_CODE_IMAGE_NOT_FOUND,
                details={"post_id": post_id},
            )

        data, content_type = self.store.get(key=key)
        extension = DOWNLOAD_EXTENSIONS.get(content_type, "jpg")
        filename = f"{re.sub(r'[^a-zA-Z0-9]', '_', post.title)}.{extension}"

        return data, content_type, filename

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _get_owned_post(self, post_id: str, requester_id: str) -> Post:
        post = self.posts.fetch_post(post_id=post_id)

        if post is None or not post.is_owned_by(requester_id):
            # Same answer for missing and foreign posts
            logger.warning(
                "Post missing or not owned by requester",
                extra={"post_id": post_id, "requester_id": requester_id},
            )
            raise NotFoundError(
                message=MESSAGE_POST_NOT_FOUND,
                details={"post_id": post_id},
            )

        return post

    def _validate_upload(self, upload: UploadPayload | None) -> UploadPayload:
        if upload is None:
            raise ValidationError(message=MESSAGE_IMAGE_REQUIRED, field="file")

        if upload.size > self.max_upload_bytes:
            logger.warning(
                "Upload exceeds size limit",
                extra={"size": upload.size, "limit": self.max_upload_bytes},
            )
            raise FileSizeError(
                message=(
                    "Image is too large. Maximum size is "
                    f"{format_file_size(self.max_upload_bytes)}."
                ),
                details={"size": upload.size, "limit": self.max_upload_bytes},
            )

        if not upload.is_image:
            raise ValidationError(
                message=MESSAGE_NOT_AN_IMAGE,
                field="file",
                details={"content_type": upload.content_type},
            )

        return upload

    def _ensure_store_available(self) -> None:
        if isinstance(self.store, UnconfiguredObjectStore):
            logger.error("Image upload requested but object store is not configured")
            raise StoreUnavailableError(message="Object store is not configured")

    def _store_image(self, payload: UploadPayload) -> ImageReference:
        logger.info(
            "Processing image",
            extra={
                "file_name": payload.file_name,
                "original_size": payload.size,
                "content_type": payload.content_type,
            },
        )

        transcoded = self.transcoder(payload.data, payload.content_type)
        key = derive_key(payload.file_name)

        url = self.store.put(
            key=key,
            data=transcoded.data,
            content_type=transcoded.content_type,
        )

        metrics.add_metric(name="ImageUploaded", unit=MetricUnit.Count, value=1)
        return ImageReference(url=url, key=key)

    def _discard_upload(self, image: ImageReference) -> None:
        """Remove an object whose row was never written."""
        result = self.store.delete(key=image.key)
        self._report_cleanup(result, post_id=None)

    @staticmethod
    def _report_cleanup(result: CleanupResult, *, post_id: str | None) -> None:
        if result.ok:
            logger.debug("Image cleanup succeeded", extra={"key": result.key})
            return

        metrics.add_metric(name="ImageCleanupFailed", unit=MetricUnit.Count, value=1)
        logger.warning(
            "Image cleanup failed, object left orphaned",
            extra={"key": result.key, "post_id": post_id, "error": result.error},
        )


def build_post_image_lifecycle() -> PostImageLifecycle:
    """Wire the lifecycle manager from the environment."""
    return PostImageLifecycle(
        posts=DynamoDBPostRepository(),
        store=build_object_store(),
        max_upload_bytes=get_max_upload_bytes(),
    )
