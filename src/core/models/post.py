"""Shared post and image models."""

import base64
import binascii

from pydantic import BaseModel, ConfigDict, Field, StrictStr

from core.models.errors import ValidationError
from core.utils.mime import detect_mime_type, normalize_mime_type


class Post(BaseModel):
    """A blog post as stored in the posts table."""

    post_id: StrictStr = Field(..., description="Unique post identifier")
    author_id: StrictStr = Field(..., description="Owner user identifier")
    title: StrictStr = Field(..., description="Post title")
    body: StrictStr = Field(..., description="Post content")

    created_at: StrictStr = Field(..., description="ISO-8601 creation timestamp (UTC)")
    updated_at: StrictStr | None = Field(None, description="ISO-8601 last update timestamp (UTC)")

    image_url: StrictStr | None = Field(None, description="Public URL of the post image")
    image_key: StrictStr | None = Field(None, description="Object store key of the post image")

    def is_owned_by(self, user_id: str | None) -> bool:
        return user_id is not None and self.author_id == user_id


class ImageReference(BaseModel):
    """Location of an uploaded image in the object store."""

    model_config = ConfigDict(frozen=True)

    url: StrictStr
    key: StrictStr


class UploadPayload(BaseModel):
    """A file received with a create or edit request.

    Lives for the duration of one request; only the derived
    ImageReference is ever persisted.
    """

    model_config = ConfigDict(frozen=True)

    data: bytes
    content_type: StrictStr
    file_name: StrictStr

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def is_image(self) -> bool:
        return self.content_type.startswith("image/")

    @classmethod
    def from_base64(
        cls,
        encoded: str,
        *,
        file_name: str | None,
        content_type: str | None = None,
    ) -> "UploadPayload":
        """Decode a base64 upload, sniffing the type when none is declared.

        Raises:
            ValidationError: If the content is not valid base64 or is empty
        """
        try:
            data = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValidationError(
                message="File must be a valid Base64-encoded string",
                field="file",
            ) from exc

        if not data:
            raise ValidationError(message="The selected file is empty", field="file")

        declared = normalize_mime_type(content_type) if content_type else ""
        return cls(
            data=data,
            content_type=declared or detect_mime_type(data),
            file_name=file_name or "image",
        )


class TranscodedImage(BaseModel):
    """Bytes ready for upload together with their content type."""

    model_config = ConfigDict(frozen=True)

    data: bytes
    content_type: StrictStr


class CleanupResult(BaseModel):
    """Outcome of a best-effort object deletion.

    Returned to the caller for logging; it is never raised.
    """

    model_config = ConfigDict(frozen=True)

    key: StrictStr
    ok: bool
    error: StrictStr | None = None
