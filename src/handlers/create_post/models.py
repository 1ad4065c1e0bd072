"""Pydantic models for create post request/response."""

from core.models.api import PostForm, PostResponse


class CreatePostRequest(PostForm):
    """Validation model for create post request.

    The image is required; a missing file is reported by the lifecycle
    manager as a field error rather than a schema error so the message
    matches the edit flow.
    """


class CreatePostResponse(PostResponse):
    """Response model for a successfully created post."""
