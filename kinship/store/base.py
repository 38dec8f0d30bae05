from abc import ABC, abstractmethod
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict

from kinship.models.comment import Comment
from kinship.models.post import Post, PostFilter
from kinship.models.relationship import EdgeKind
from kinship.models.user import User


class StoreError(Exception):
    """Base exception for record store failures."""

    pass


class RecordNotFoundError(StoreError):
    """Exception raised when the record an operation targets does not exist."""

    pass


class UniqueViolationError(StoreError):
    """Exception raised when a write would break a uniqueness constraint."""

    pass


class BlockedEdgeError(StoreError):
    """Exception raised when a block between two users forbids the edge."""

    pass


class BlockOutcome(BaseModel):
    """Result of the combined block write.

    Attributes:
        removed_forward_follow: Whether a follow from blocker to blocked was removed
        removed_reverse_follow: Whether a follow from blocked to blocker was removed
    """

    model_config = ConfigDict(frozen=True)

    removed_forward_follow: bool
    removed_reverse_follow: bool


class RecordStore(ABC):
    """Transactional access to users, posts, comments and relationship edges.

    Every method runs in its own transaction. Lookups return None for a
    missing record; writes that target a missing record raise
    RecordNotFoundError; writes that would duplicate a unique record or edge
    raise UniqueViolationError. Any other failure is a StoreError.

    For LIKE edges the object is a post id; for FOLLOW and BLOCK it is a
    user id.
    """

    # Users

    @abstractmethod
    async def find_user(self, user_id: int) -> User | None: ...

    @abstractmethod
    async def find_user_by_username(self, username: str) -> User | None: ...

    @abstractmethod
    async def find_user_by_email(self, email: str) -> User | None: ...

    @abstractmethod
    async def create_user(
        self, email: str, username: str, password_hash: str
    ) -> User: ...

    @abstractmethod
    async def update_user(
        self, user_id: int, fields: dict[str, str | None]
    ) -> User: ...

    @abstractmethod
    async def get_password_hash(self, user_id: int) -> str | None: ...

    @abstractmethod
    async def set_password_hash(self, user_id: int, password_hash: str) -> None: ...

    @abstractmethod
    async def delete_user(self, user_id: int) -> None:
        """Delete a user with their edges, comments and posts.

        Every like the user held on a surviving post decrements that
        post's like_count in the same transaction.
        """

    # Posts

    @abstractmethod
    async def find_post(self, post_id: int) -> Post | None: ...

    @abstractmethod
    async def find_posts(
        self, post_filter: PostFilter, limit: int, offset: int
    ) -> list[Post]:
        """List posts matching the filter, newest first."""

    @abstractmethod
    async def count_posts(self, post_filter: PostFilter) -> int: ...

    @abstractmethod
    async def create_post(
        self, author_id: int, title: str, description: str, content: str
    ) -> Post: ...

    @abstractmethod
    async def update_post(self, post_id: int, fields: dict[str, str]) -> Post: ...

    @abstractmethod
    async def delete_post(self, post_id: int) -> None:
        """Delete a post with its comments and likes."""

    # Comments

    @abstractmethod
    async def find_comment(self, comment_id: int) -> Comment | None: ...

    @abstractmethod
    async def find_comments(self, post_id: int) -> list[Comment]:
        """List the comments on a post, oldest first."""

    @abstractmethod
    async def create_comment(
        self, post_id: int, user_id: int, content: str
    ) -> Comment: ...

    @abstractmethod
    async def delete_comment(self, comment_id: int) -> None: ...

    # Edges

    @abstractmethod
    async def edge_exists(
        self, kind: EdgeKind, subject_id: int, object_id: int
    ) -> bool: ...

    @abstractmethod
    async def existing_edges(
        self, kind: EdgeKind, pairs: Iterable[tuple[int, int]]
    ) -> set[tuple[int, int]]:
        """Return the subset of (subject, object) pairs that have an edge."""

    @abstractmethod
    async def edge_objects(self, kind: EdgeKind, subject_id: int) -> list[int]:
        """Return the objects of every edge of a kind leaving a subject."""

    @abstractmethod
    async def create_edge(
        self, kind: EdgeKind, subject_id: int, object_id: int
    ) -> None:
        """Create a FOLLOW or BLOCK edge.

        Raises:
            UniqueViolationError: If the edge already exists
            RecordNotFoundError: If either endpoint does not exist
            BlockedEdgeError: If a FOLLOW is requested while either user
                blocks the other
        """

    @abstractmethod
    async def delete_edge(
        self, kind: EdgeKind, subject_id: int, object_id: int
    ) -> bool:
        """Delete a FOLLOW or BLOCK edge, returning whether it existed."""

    @abstractmethod
    async def block_user(self, blocker_id: int, blocked_id: int) -> BlockOutcome:
        """Remove follows in both directions and upsert the block edge."""

    @abstractmethod
    async def like_post(self, user_id: int, post_id: int) -> Post:
        """Create a LIKE edge and increment like_count together.

        Raises:
            UniqueViolationError: If the user already likes the post
            RecordNotFoundError: If the user or post does not exist
        """

    @abstractmethod
    async def unlike_post(self, user_id: int, post_id: int) -> Post:
        """Delete a LIKE edge and decrement like_count together.

        Raises:
            RecordNotFoundError: If the post or the edge does not exist
        """

    async def close(self) -> None:
        return None
