import asyncio
from collections.abc import Iterable

from kinship.models.relationship import EdgeKind, RelationshipView
from kinship.store.base import RecordStore


class RelationshipResolver:
    """Service answering relationship questions between identities.

    Every answer is read from the record store at call time; nothing is
    cached. Absence of an edge is False, never an error. Store failures
    propagate unchanged.

    Attributes:
        store: Record store holding the relationship edges
    """

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    async def is_following(self, follower_id: int, followed_id: int) -> bool:
        return await self.store.edge_exists(EdgeKind.FOLLOW, follower_id, followed_id)

    async def is_blocked(self, blocker_id: int, blocked_id: int) -> bool:
        """Check whether one user blocks another.

        Args:
            blocker_id: ID of the user who may have blocked
            blocked_id: ID of the user who may be blocked

        Returns:
            True if a block edge blocker -> blocked exists
        """
        return await self.store.edge_exists(EdgeKind.BLOCK, blocker_id, blocked_id)

    async def is_liked(self, user_id: int, post_id: int) -> bool:
        return await self.store.edge_exists(EdgeKind.LIKE, user_id, post_id)

    async def resolve_pair(self, observer_id: int, subject_id: int) -> RelationshipView:
        """Compute the relationship view of a subject as seen by an observer.

        Args:
            observer_id: ID of the viewing user
            subject_id: ID of the user being viewed

        Returns:
            The four relationship flags between the two users
        """
        following, followed, blocking, blocked = await asyncio.gather(
            self.is_following(observer_id, subject_id),
            self.is_following(subject_id, observer_id),
            self.is_blocked(observer_id, subject_id),
            self.is_blocked(subject_id, observer_id),
        )
        return RelationshipView(
            followed=followed,
            following=following,
            blocked=blocked,
            blocking=blocking,
        )

    async def resolve_many(
        self, observer_id: int, subject_ids: Iterable[int]
    ) -> dict[int, RelationshipView]:
        """Compute relationship views for many subjects at once.

        Issues one batched existence query per edge direction instead of
        four queries per subject. Results are identical to calling
        resolve_pair for each subject.

        Args:
            observer_id: ID of the viewing user
            subject_ids: IDs of the users being viewed

        Returns:
            Mapping of subject ID to its relationship view
        """
        subjects = list(dict.fromkeys(subject_ids))
        if not subjects:
            return {}

        outgoing = [(observer_id, subject_id) for subject_id in subjects]
        incoming = [(subject_id, observer_id) for subject_id in subjects]
        following, followed, blocking, blocked = await asyncio.gather(
            self.store.existing_edges(EdgeKind.FOLLOW, outgoing),
            self.store.existing_edges(EdgeKind.FOLLOW, incoming),
            self.store.existing_edges(EdgeKind.BLOCK, outgoing),
            self.store.existing_edges(EdgeKind.BLOCK, incoming),
        )
        return {
            subject_id: RelationshipView(
                followed=(subject_id, observer_id) in followed,
                following=(observer_id, subject_id) in following,
                blocked=(subject_id, observer_id) in blocked,
                blocking=(observer_id, subject_id) in blocking,
            )
            for subject_id in subjects
        }

    async def liked_posts(self, user_id: int, post_ids: Iterable[int]) -> set[int]:
        """Return which of the given posts the user likes."""
        pairs = [(user_id, post_id) for post_id in dict.fromkeys(post_ids)]
        if not pairs:
            return set()
        edges = await self.store.existing_edges(EdgeKind.LIKE, pairs)
        return {post_id for _, post_id in edges}
