"""Thin adapter for interacting with an S3-compatible object store."""

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Protocol

import boto3

from core.utils.config import ObjectStoreSettings


class _Boto3S3Client(Protocol):
    """Internal typing for boto3 S3 client (store-facing only)."""

    def put_object(
        self,
        *,
        Bucket: str,
        Key: str,
        Body: bytes,
        ContentType: str,
        IfNoneMatch: str,
    ) -> Any: ...

    def get_object(
        self,
        *,
        Bucket: str,
        Key: str,
    ) -> Mapping[str, Any]: ...

    def delete_object(
        self,
        *,
        Bucket: str,
        Key: str,
    ) -> Any: ...

    def list_objects_v2(self, **kwargs: Any) -> Mapping[str, Any]: ...


class S3AdapterProtocol(Protocol):
    """Minimal S3 adapter protocol (repository-facing)."""

    def put_object(self, *, key: str, body: bytes, content_type: str) -> None: ...

    def get_object(self, *, key: str) -> Mapping[str, Any]: ...

    def delete_object(self, *, key: str) -> None: ...

    def list_objects(self, *, prefix: str) -> list[tuple[str, datetime]]: ...


class S3Adapter:
    """Low-level S3 operations (mechanical, no error handling).

    This adapter:
    - Wraps boto3 S3 client
    - Does NOT handle errors (lets them bubble up)
    - Domain implementations catch and translate errors
    """

    def __init__(self, settings: ObjectStoreSettings) -> None:
        """Create S3 client for the configured bucket."""
        self._bucket = settings.bucket
        self._client: _Boto3S3Client = boto3.client(
            "s3",
            endpoint_url=settings.endpoint_url,
            region_name=settings.region,
            aws_access_key_id=settings.access_key_id,
            aws_secret_access_key=settings.secret_access_key.get_secret_value(),
        )

    @property
    def bucket(self) -> str:
        return self._bucket

    def put_object(self, *, key: str, body: bytes, content_type: str) -> None:
        """Store a new object; never replaces an existing key.
        Raises boto3 exceptions - caught by domain implementation.
        """
        self._client.put_object(
            Bucket=self._bucket,
            Key=key,
            Body=body,
            ContentType=content_type,
            IfNoneMatch="*",
        )

    def get_object(self, *, key: str) -> Mapping[str, Any]:
        """Fetch object from S3.
        Raises boto3 exceptions - caught by domain implementation.
        """
        return self._client.get_object(
            Bucket=self._bucket,
            Key=key,
        )

    def delete_object(self, *, key: str) -> None:
        """Delete object from S3.
        Raises boto3 exceptions - caught by domain implementation.
        """
        self._client.delete_object(
            Bucket=self._bucket,
            Key=key,
        )

    def list_objects(self, *, prefix: str) -> list[tuple[str, datetime]]:
        """List (key, last modified) for every object under a prefix.
        Follows continuation tokens.
        """
        objects: list[tuple[str, datetime]] = []
        kwargs: dict[str, Any] = {"Bucket": self._bucket, "Prefix": prefix}

        while True:
            response = self._client.list_objects_v2(**kwargs)
            objects.extend(
                (obj["Key"], obj["LastModified"]) for obj in response.get("Contents", [])
            )

            token = response.get("NextContinuationToken")
            if not response.get("IsTruncated") or not token:
                return objects
            kwargs["ContinuationToken"] = token
