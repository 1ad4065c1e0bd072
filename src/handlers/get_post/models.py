from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictStr,
    field_validator,
)


class GetPostRequest(BaseModel):
    """Validation model for get post request."""

    model_config = ConfigDict(str_strip_whitespace=True)

    post_id: StrictStr = Field(
        ...,
        min_length=1,
        description="Post ID to retrieve",
    )

    download: StrictBool = Field(
        default=False,
        description=(
            "If true, returns the post image as an attachment "
            "instead of the post itself."
        ),
    )

    @field_validator("post_id")
    @classmethod
    def validate_post_id_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("post_id must not be blank")
        return value
