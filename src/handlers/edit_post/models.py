"""Pydantic models for edit post request/response."""

from pydantic import Field, StrictStr

from core.models.api import PostForm, PostResponse


class EditPostRequest(PostForm):
    """Validation model for edit post request.

    A new image must be supplied with every edit.
    """

    post_id: StrictStr = Field(..., min_length=1, description="Post ID to edit")


class EditPostResponse(PostResponse):
    """Response model for a successfully edited post."""
