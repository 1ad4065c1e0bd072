from datetime import datetime, timezone

import pytest
from botocore.exceptions import ClientError

from core.infrastructure.adapters.s3_adapter import S3Adapter
from core.utils.config import load_object_store_settings

MODIFIED = datetime(2024, 1, 15, 10, 42, tzinfo=timezone.utc)


@pytest.fixture
def adapter(s3_bucket) -> S3Adapter:
    settings = load_object_store_settings()
    assert settings is not None
    return S3Adapter(settings)


class TestS3Adapter:
    def test_bucket_from_settings(self, adapter):
        assert adapter.bucket == "uploads"

    def test_put_and_get_object_success(self, adapter, s3_get_object):
        key = "posts/1700000000000_photo.jpg"
        data = b"image-bytes"

        adapter.put_object(key=key, body=data, content_type="image/jpeg")

        assert s3_get_object(key) == data

        response = adapter.get_object(key=key)
        assert response["Body"].read() == data
        assert response["ContentType"] == "image/jpeg"

    def test_put_object_never_overwrites(self, adapter, s3_get_object):
        key = "posts/1700000000000_photo.jpg"
        adapter.put_object(key=key, body=b"first", content_type="image/jpeg")

        with pytest.raises(ClientError):
            adapter.put_object(key=key, body=b"second", content_type="image/jpeg")

        assert s3_get_object(key) == b"first"

    def test_get_object_missing_key_raises_client_error(self, adapter):
        with pytest.raises(ClientError) as exc:
            adapter.get_object(key="posts/missing.jpg")

        assert exc.value.response["Error"]["Code"] == "NoSuchKey"

    def test_delete_object_success(self, adapter, s3_put_object, s3_object_exists):
        key = "posts/1_delete.jpg"
        s3_put_object(key, b"data", "image/jpeg")

        adapter.delete_object(key=key)

        assert not s3_object_exists(key)

    def test_list_objects_filters_by_prefix(self, adapter, s3_put_object):
        s3_put_object("posts/1_a.jpg", b"a")
        s3_put_object("posts/2_b.jpg", b"b")
        s3_put_object("avatars/c.jpg", b"c")

        objects = adapter.list_objects(prefix="posts/")

        assert sorted(key for key, _ in objects) == ["posts/1_a.jpg", "posts/2_b.jpg"]
        assert all(isinstance(modified, datetime) for _, modified in objects)

    def test_list_objects_follows_continuation_tokens(self, adapter, monkeypatch):
        pages = iter(
            [
                {
                    "Contents": [{"Key": "posts/1_a.jpg", "LastModified": MODIFIED}],
                    "IsTruncated": True,
                    "NextContinuationToken": "t1",
                },
                {"Contents": [{"Key": "posts/2_b.jpg", "LastModified": MODIFIED}], "IsTruncated": False},
            ]
        )
        calls = []

        def list_objects_v2(**kwargs):
            calls.append(kwargs)
            return next(pages)

        monkeypatch.setattr(adapter._client, "list_objects_v2", list_objects_v2)

        assert adapter.list_objects(prefix="posts/") == [
            ("posts/1_a.jpg", MODIFIED),
            ("posts/2_b.jpg", MODIFIED),
        ]
        assert "ContinuationToken" not in calls[0]
        assert calls[1]["ContinuationToken"] == "t1"

    def test_put_object_bubbles_client_error(self, adapter, monkeypatch):
        def raise_error(**_):
            raise ClientError(
                {"Error": {"Code": "InternalError"}},
                "PutObject",
            )

        monkeypatch.setattr(adapter._client, "put_object", raise_error)

        with pytest.raises(ClientError):
            adapter.put_object(key="posts/x.jpg", body=b"data", content_type="image/jpeg")

    def test_delete_object_bubbles_client_error(self, adapter, monkeypatch):
        def raise_error(**_):
            raise ClientError(
                {"Error": {"Code": "InternalError"}},
                "DeleteObject",
            )

        monkeypatch.setattr(adapter._client, "delete_object", raise_error)

        with pytest.raises(ClientError):
            adapter.delete_object(key="posts/x.jpg")
