import pytest

from core.infrastructure.aws.s3_object_store import S3ObjectStore
from core.models.post import Post
from core.services.storage_keys import (
    derive_key,
    extract_key,
    key_timestamp_ms,
    resolve_image_key,
)
from core.utils.config import load_object_store_settings


class TestDeriveKey:
    @pytest.mark.parametrize(
        "filename,expected",
        [
            ("photo.jpg", "posts/1700000000000_photo.jpg"),
            ("Holiday Pic.JPEG", "posts/1700000000000_Holiday_Pic.jpeg"),
            ("my-file_v2.png", "posts/1700000000000_my-file_v2.png"),
            ("café (1).webp", "posts/1700000000000_caf___1_.webp"),
            ("archive.tar.gz", "posts/1700000000000_archive_tar.gz"),
            ("no_extension", "posts/1700000000000_no_extension"),
            (".hidden", "posts/1700000000000__hidden"),
            ("../../etc/passwd.png", "posts/1700000000000_passwd.png"),
            ("C:\\Users\\me\\shot.PNG", "posts/1700000000000_shot.png"),
        ],
    )
    def test_sanitizes_name_and_lowercases_extension(self, filename, expected) -> None:
        assert derive_key(filename, timestamp_ms=1_700_000_000_000) == expected

    def test_uses_current_millis(self, monkeypatch) -> None:
        monkeypatch.setattr(
            "core.services.storage_keys.utc_now_millis", lambda: 1234567890123
        )

        assert derive_key("a.png") == "posts/1234567890123_a.png"


class TestExtractKey:
    def test_supabase_public_url(self) -> None:
        url = (
            "https://project.supabase.co/storage/v1/object/public/"
            "uploads/posts/1700000000000_photo.jpg"
        )

        assert extract_key(url) == "posts/1700000000000_photo.jpg"

    def test_percent_encoding_is_decoded(self) -> None:
        url = "https://cdn.example.com/object/public/uploads/posts/a%20b.png"

        assert extract_key(url) == "posts/a b.png"

    def test_query_string_ignored(self) -> None:
        url = "https://x.example.com/object/public/uploads/posts/1_a.png?t=1"

        assert extract_key(url) == "posts/1_a.png"

    @pytest.mark.parametrize(
        "url",
        [
            None,
            "",
            "not a url",
            "https://cdn.example.com/images/posts/1_a.png",
            "https://cdn.example.com/object/public/uploads",
            "https://cdn.example.com/object/public/",
            "https://cdn.example.com/object/publicity/uploads/posts/1_a.png",
        ],
    )
    def test_unrecoverable_urls_return_none(self, url) -> None:
        assert extract_key(url) is None

    @pytest.mark.parametrize(
        "filename",
        ["photo.jpg", "Holiday Pic.JPEG", "café (1).webp", "x", "weird%name#.png"],
    )
    def test_round_trip_through_public_url(self, filename) -> None:
        settings = load_object_store_settings()
        assert settings is not None
        store = S3ObjectStore(settings, adapter=object())  # no network used

        key = derive_key(filename)

        assert extract_key(store.public_url(key)) == key


class TestResolveImageKey:
    def make_post(self, **overrides) -> Post:
        fields = {
            "post_id": "post_1",
            "author_id": "john",
            "title": "t",
            "body": "b",
            "created_at": "2024-01-01T00:00:00+00:00",
        }
        fields.update(overrides)
        return Post(**fields)

    def test_prefers_stored_key(self) -> None:
        post = self.make_post(
            image_url="https://x/object/public/uploads/posts/from_url.png",
            image_key="posts/stored.png",
        )

        assert resolve_image_key(post) == "posts/stored.png"

    def test_falls_back_to_url(self) -> None:
        post = self.make_post(
            image_url="https://x/object/public/uploads/posts/from_url.png",
        )

        assert resolve_image_key(post) == "posts/from_url.png"

    def test_no_image(self) -> None:
        assert resolve_image_key(self.make_post()) is None


class TestKeyTimestamp:
    def test_reads_millis_from_derived_key(self) -> None:
        key = derive_key("photo.jpg", timestamp_ms=1700000000000)

        assert key_timestamp_ms(key) == 1700000000000

    @pytest.mark.parametrize(
        "key",
        ["posts/legacy.jpg", "avatars/1700000000000_a.png", "posts/17000x_a.png"],
    )
    def test_keys_without_millis_return_none(self, key) -> None:
        assert key_timestamp_ms(key) is None
