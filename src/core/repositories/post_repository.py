"""Abstract contract for post persistence."""

from abc import ABC, abstractmethod

from core.models.post import Post


class PostRepository(ABC):
    """Contract for storing and retrieving posts.

    Implementations could be DynamoDB, PostgreSQL, MongoDB, etc.
    The lifecycle manager depends on this interface, not the implementation.
    """

    @abstractmethod
    def create_post(self, *, post: Post) -> None:
        """Insert a new post.

        Raises:
            PostPersistenceError: If the write fails or the id is taken
        """

    @abstractmethod
    def fetch_post(self, *, post_id: str) -> Post | None:
        """Fetch a single post.

        Returns:
            The post or None if not found

        Raises:
            PostPersistenceError: If the read fails
        """

    @abstractmethod
    def update_post(
        self,
        *,
        post_id: str,
        author_id: str,
        title: str,
        body: str,
        image_url: str,
        image_key: str,
        updated_at: str,
    ) -> Post:
        """Update text and image reference in a single write.

        The write only applies while the post exists and belongs to
        `author_id`.

        Returns:
            The updated post

        Raises:
            NotFoundError: If the post is gone or owned by someone else
            PostPersistenceError: If the write fails
        """

    @abstractmethod
    def remove_post(self, *, post_id: str, author_id: str) -> None:
        """Delete a post owned by `author_id`.

        Raises:
            NotFoundError: If the post is gone or owned by someone else
            PostPersistenceError: If the delete fails
        """

    @abstractmethod
    def list_image_keys(self) -> set[str]:
        """Return the storage keys referenced by any post.

        Raises:
            PostPersistenceError: If the scan fails
        """
