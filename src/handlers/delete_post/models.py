"""Pydantic models for delete post request/response."""

from pydantic import BaseModel, ConfigDict, Field


class DeletePostRequest(BaseModel):
    """Validation model for delete post request."""

    model_config = ConfigDict(str_strip_whitespace=True)
    post_id: str = Field(
        ...,
        min_length=1,
        description="Post ID to delete",
    )


class DeletePostResponse(BaseModel):
    """Response model for successful post deletion."""

    post_id: str = Field(..., description="Deleted post ID")
    message: str = Field(..., description="Success message")
    deleted_at: str = Field(..., description="Deletion timestamp")
    image_removed: bool = Field(
        ..., description="Whether the stored image was removed as well"
    )
