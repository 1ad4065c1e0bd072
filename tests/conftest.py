"""
Pytest configuration and fixtures for post image service tests.
Provides AWS mocking, DynamoDB and S3 fixtures with proper cleanup,
and helpers to synthesise image payloads.
"""

import io
import os
import random
from collections.abc import Callable
from typing import Any

os.environ.update(
    {
        "AWS_REGION": "us-east-1",
        "AWS_DEFAULT_REGION": "us-east-1",
        "AWS_ACCESS_KEY_ID": "testing",
        "AWS_SECRET_ACCESS_KEY": "testing",
        "POSTS_TABLE_NAME": "posts-test",
        "OBJECT_STORE_URL": "https://project.supabase.co",
        "OBJECT_STORE_ACCESS_KEY_ID": "testing",
        "OBJECT_STORE_SECRET_ACCESS_KEY": "testing",
        "OBJECT_STORE_BUCKET": "uploads",
        "POWERTOOLS_TRACE_DISABLED": "true",
        "POWERTOOLS_METRICS_NAMESPACE": "PostImageService",
        "POWERTOOLS_SERVICE_NAME": "post-image-service",
    }
)
for _name in (
    "AWS_ENDPOINT_URL",
    "DYNAMODB_ENDPOINT_URL",
    "OBJECT_STORE_ENDPOINT_URL",
    "OBJECT_STORE_REGION",
    "MAX_UPLOAD_BYTES",
):
    os.environ.pop(_name, None)

import boto3  # noqa: E402
import pytest  # noqa: E402
from botocore.exceptions import ClientError  # noqa: E402
from moto import mock_aws  # noqa: E402
from PIL import Image  # noqa: E402

from core.infrastructure.aws.dynamodb_posts import DynamoDBPostRepository  # noqa: E402
from core.infrastructure.aws.s3_object_store import build_object_store  # noqa: E402
from core.services.post_images import PostImageLifecycle  # noqa: E402
from core.utils.constants import DEFAULT_MAX_UPLOAD_BYTES  # noqa: E402


@pytest.fixture(scope="function")
def aws_mock():
    with mock_aws():
        yield


@pytest.fixture(scope="function")
def dynamodb_resource(aws_mock):
    return boto3.resource("dynamodb", region_name=os.getenv("AWS_REGION"))


@pytest.fixture(scope="function")
def posts_table(dynamodb_resource):
    """
    Create the posts table for testing.

    moto discards the table when the mock context exits.
    """
    table = dynamodb_resource.create_table(
        TableName=os.getenv("POSTS_TABLE_NAME"),
        BillingMode="PAY_PER_REQUEST",
        KeySchema=[{"AttributeName": "post_id", "KeyType": "HASH"}],
        AttributeDefinitions=[{"AttributeName": "post_id", "AttributeType": "S"}],
    )
    table.wait_until_exists()
    return table


@pytest.fixture
def posts_put_item(posts_table) -> Callable[[dict[str, Any]], dict[str, Any]]:
    """
    Helper to insert a single post row.

    Usage:
        item = posts_put_item({"post_id": "post_1", "author_id": "john", ...})
    """

    def _put(item: dict[str, Any]) -> dict[str, Any]:
        posts_table.put_item(Item=item)
        return item

    return _put


@pytest.fixture
def posts_get_item(posts_table) -> Callable[[str], dict[str, Any] | None]:
    """Helper to read a post row back."""

    def _get(post_id: str) -> dict[str, Any] | None:
        response: dict[str, Any] = posts_table.get_item(Key={"post_id": post_id})
        return response.get("Item")

    return _get


@pytest.fixture(scope="function")
def s3_client(aws_mock):
    """S3 client for bucket operations."""
    return boto3.client("s3", region_name=os.getenv("AWS_REGION"))


@pytest.fixture(scope="function")
def s3_bucket(s3_client):
    """Create the uploads bucket; moto discards it on context exit."""
    bucket_name = os.getenv("OBJECT_STORE_BUCKET")

    try:
        s3_client.create_bucket(Bucket=bucket_name)
    except ClientError as e:
        if e.response["Error"]["Code"] != "BucketAlreadyOwnedByYou":
            raise

    return s3_client


@pytest.fixture
def s3_put_object(s3_bucket) -> Callable[..., dict[str, Any]]:
    """
    Helper to upload an object to S3.

    Usage:
        response = s3_put_object("posts/1_a.jpg", image_bytes, "image/jpeg")
    """

    def _put(key: str, body: bytes, content_type: str = "application/octet-stream"):
        return s3_bucket.put_object(
            Bucket=os.getenv("OBJECT_STORE_BUCKET"),
            Key=key,
            Body=body,
            ContentType=content_type,
        )

    return _put


@pytest.fixture
def s3_get_object(s3_bucket) -> Callable[[str], bytes]:
    """Helper to get an object's bytes from S3."""

    def _get(key: str) -> bytes:
        response: dict[str, Any] = s3_bucket.get_object(
            Bucket=os.getenv("OBJECT_STORE_BUCKET"),
            Key=key,
        )
        data: bytes = response["Body"].read()
        return data

    return _get


@pytest.fixture
def s3_object_exists(s3_bucket) -> Callable[[str], bool]:
    def _exists(key: str) -> bool:
        try:
            s3_bucket.head_object(Bucket=os.getenv("OBJECT_STORE_BUCKET"), Key=key)
        except ClientError:
            return False
        return True

    return _exists


@pytest.fixture
def s3_list_keys(s3_bucket) -> Callable[[], list[str]]:
    def _list() -> list[str]:
        response = s3_bucket.list_objects_v2(Bucket=os.getenv("OBJECT_STORE_BUCKET"))
        return [obj["Key"] for obj in response.get("Contents", [])]

    return _list


@pytest.fixture
def object_store(s3_bucket):
    return build_object_store()


@pytest.fixture
def post_repository(posts_table):
    return DynamoDBPostRepository()


@pytest.fixture
def lifecycle(post_repository, object_store) -> PostImageLifecycle:
    return PostImageLifecycle(
        posts=post_repository,
        store=object_store,
        max_upload_bytes=DEFAULT_MAX_UPLOAD_BYTES,
    )


def make_image(fmt: str, size: tuple[int, int] = (400, 400), mode: str = "RGB", **save: Any) -> bytes:
    """Encode seeded random noise; noise keeps files from compressing away."""
    width, height = size
    channels = {"RGB": 3, "RGBA": 4, "L": 1, "P": 1}[mode]
    noise = random.Random(0).randbytes(width * height * channels)

    img = Image.frombytes(mode, size, noise)
    buffer = io.BytesIO()
    img.save(buffer, format=fmt, **save)
    return buffer.getvalue()


@pytest.fixture
def image_bytes() -> Callable[..., bytes]:
    """
    Factory for encoded images.

    Usage:
        data = image_bytes("PNG", size=(400, 400))
    """
    return make_image


@pytest.fixture
def small_png() -> bytes:
    """A PNG well under the transcoding threshold."""
    return make_image("PNG", size=(16, 16))


@pytest.fixture
def large_png() -> bytes:
    """A PNG above the transcoding threshold."""
    return make_image("PNG", size=(300, 300))
