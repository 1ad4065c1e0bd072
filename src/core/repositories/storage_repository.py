"""Abstract contract for post image storage."""

from abc import ABC, abstractmethod

from core.models.post import CleanupResult


class ObjectStoreRepository(ABC):
    """Contract for storing and removing post images.

    Implementations could be S3, Supabase Storage, GCS, local disk, etc.
    The lifecycle manager depends on this interface, not the implementation.
    """

    configured: bool

    @abstractmethod
    def put(self, *, key: str, data: bytes, content_type: str) -> str:
        """Upload a new object and return its public URL.

        Args:
            key: Storage key, expected to be unused
            data: Binary image content
            content_type: MIME type sent with the object

        Returns:
            Public URL of the stored object

        Raises:
            StoreUnavailableError: If the store is not configured
            UploadFailedError: If the upload fails or the key exists
        """

    @abstractmethod
    def public_url(self, key: str) -> str:
        """Derive the public URL of a key without a network call.

        Raises:
            StoreUnavailableError: If the store is not configured
        """

    @abstractmethod
    def get(self, *, key: str) -> tuple[bytes, str]:
        """Download an object.

        Returns:
            Tuple of (content_bytes, content_type)

        Raises:
            StoreUnavailableError: If the store is not configured
            NotFoundError: If the object does not exist
            ImageDownloadFailedError: If the download fails
        """

    @abstractmethod
    def delete(self, *, key: str) -> CleanupResult:
        """Request removal of an object.

        Never raises; the outcome is reported in the returned result.
        """
