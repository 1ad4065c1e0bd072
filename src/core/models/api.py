"""Request/response models shared by the post handlers."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictStr

from core.models.post import Post, UploadPayload
from core.utils.constants import BODY_MAX_LENGTH, TITLE_MAX_LENGTH


class PostForm(BaseModel):
    """Title, body and image submitted to create or edit a post."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: StrictStr = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    body: StrictStr = Field(..., min_length=1, max_length=BODY_MAX_LENGTH)
    file: StrictStr | None = Field(None, description="Base64 encoded image file")
    file_name: StrictStr | None = Field(
        None, max_length=255, description="Original image filename"
    )
    content_type: StrictStr | None = Field(
        None, max_length=255, description="Declared MIME type; sniffed when absent"
    )

    def to_upload(self) -> UploadPayload | None:
        """Decode the attached file, or None when no file was sent.

        Raises:
            ValidationError: If the file is not valid base64
        """
        if not self.file:
            return None

        return UploadPayload.from_base64(
            self.file,
            file_name=self.file_name,
            content_type=self.content_type,
        )


def submitted_form(body: Any) -> dict[str, str]:
    """Text fields exactly as submitted, for re-rendering after an error."""
    if not isinstance(body, dict):
        return {"title": "", "body": ""}

    return {
        field: value if isinstance(value, str) else ""
        for field, value in (("title", body.get("title")), ("body", body.get("body")))
    }


class PostResponse(BaseModel):
    """Post as returned to API clients."""

    post_id: str = Field(..., description="Post ID")
    author_id: str = Field(..., description="Author user ID")
    title: str = Field(..., description="Post title")
    body: str = Field(..., description="Post content")
    created_at: str = Field(..., description="Creation timestamp")
    updated_at: str | None = Field(None, description="Last update timestamp")
    image_url: str | None = Field(None, description="Public image URL")
    is_author: bool = Field(False, description="Whether the requester wrote the post")
    message: str | None = Field(None, description="Success message")

    @classmethod
    def from_post(
        cls,
        post: Post,
        *,
        requester_id: str | None,
        message: str | None = None,
    ) -> "PostResponse":
        return cls(
            post_id=post.post_id,
            author_id=post.author_id,
            title=post.title,
            body=post.body,
            created_at=post.created_at,
            updated_at=post.updated_at,
            image_url=post.image_url,
            is_author=post.is_owned_by(requester_id),
            message=message,
        )
