import logging

from kinship.errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from kinship.models.comment import Comment
from kinship.models.post import Post, PostUpdate
from kinship.models.relationship import EdgeKind, RelationshipView
from kinship.services.relationship import RelationshipResolver
from kinship.store.base import (
    BlockedEdgeError,
    RecordNotFoundError,
    RecordStore,
    UniqueViolationError,
)

logger = logging.getLogger(__name__)


class MutationGuard:
    """Service gating every relationship and content write.

    Each action checks its preconditions in a fixed order and raises the
    error of the first one that fails. Only then is the write dispatched
    to the record store. A uniqueness violation reported by the store
    (a concurrent duplicate that slipped past the checks) becomes a
    ConflictError, and a block that committed after the checks turns a
    follow into a ForbiddenError.

    Attributes:
        store: Record store receiving the writes
        resolver: Source of relationship state for the checks
    """

    def __init__(self, store: RecordStore, resolver: RelationshipResolver) -> None:
        self.store = store
        self.resolver = resolver

    async def _require_user(self, user_id: int) -> None:
        if await self.store.find_user(user_id) is None:
            raise NotFoundError("User not found")

    async def _require_post(self, post_id: int) -> Post:
        post = await self.store.find_post(post_id)
        if post is None:
            raise NotFoundError("Post not found")
        return post

    async def _require_not_blocked_by_author(self, post: Post, user_id: int) -> None:
        if await self.resolver.is_blocked(post.author_id, user_id):
            raise ForbiddenError("You are blocked by the author of this post")

    # Follows and blocks

    async def follow(self, actor_id: int, target_id: int) -> RelationshipView:
        """Make one user follow another.

        Args:
            actor_id: ID of the user who follows
            target_id: ID of the user to follow

        Returns:
            The relationship view of the target as seen by the actor

        Raises:
            BadRequestError: If the actor targets themself
            NotFoundError: If the target does not exist
            ConflictError: If the actor already follows the target
            ForbiddenError: If either user blocks the other
        """
        if actor_id == target_id:
            raise BadRequestError("You cannot follow yourself")
        await self._require_user(target_id)
        if await self.resolver.is_following(actor_id, target_id):
            raise ConflictError("You are already following this user")
        if await self.resolver.is_blocked(target_id, actor_id):
            raise ForbiddenError("You are blocked by this user")
        if await self.resolver.is_blocked(actor_id, target_id):
            raise ForbiddenError("You are blocking this user")

        try:
            await self.store.create_edge(EdgeKind.FOLLOW, actor_id, target_id)
        except UniqueViolationError as e:
            raise ConflictError("You are already following this user") from e
        except RecordNotFoundError as e:
            raise NotFoundError("User not found") from e
        except BlockedEdgeError as e:
            raise ForbiddenError("A block exists between you and this user") from e

        logger.info("User %d followed user %d", actor_id, target_id)
        return await self.resolver.resolve_pair(actor_id, target_id)

    async def unfollow(self, actor_id: int, target_id: int) -> RelationshipView:
        if actor_id == target_id:
            raise BadRequestError("You cannot unfollow yourself")
        await self._require_user(target_id)
        if not await self.resolver.is_following(actor_id, target_id):
            raise NotFoundError("You are not following this user")

        if not await self.store.delete_edge(EdgeKind.FOLLOW, actor_id, target_id):
            raise NotFoundError("You are not following this user")

        logger.info("User %d unfollowed user %d", actor_id, target_id)
        return await self.resolver.resolve_pair(actor_id, target_id)

    async def block(self, actor_id: int, target_id: int) -> RelationshipView:
        """Block a user, removing follows in both directions.

        Args:
            actor_id: ID of the user who blocks
            target_id: ID of the user to block

        Returns:
            The relationship view of the target as seen by the actor

        Raises:
            BadRequestError: If the actor targets themself
            NotFoundError: If the target does not exist
            ConflictError: If the actor already blocks the target
        """
        if actor_id == target_id:
            raise BadRequestError("You cannot block yourself")
        await self._require_user(target_id)
        if await self.resolver.is_blocked(actor_id, target_id):
            raise ConflictError("You are already blocking this user")

        try:
            outcome = await self.store.block_user(actor_id, target_id)
        except RecordNotFoundError as e:
            raise NotFoundError("User not found") from e

        logger.info(
            "User %d blocked user %d (removed follows: forward=%s, reverse=%s)",
            actor_id,
            target_id,
            outcome.removed_forward_follow,
            outcome.removed_reverse_follow,
        )
        return await self.resolver.resolve_pair(actor_id, target_id)

    async def unblock(self, actor_id: int, target_id: int) -> RelationshipView:
        if actor_id == target_id:
            raise BadRequestError("You cannot unblock yourself")
        await self._require_user(target_id)
        if not await self.resolver.is_blocked(actor_id, target_id):
            raise NotFoundError("You are not blocking this user")

        if not await self.store.delete_edge(EdgeKind.BLOCK, actor_id, target_id):
            raise NotFoundError("You are not blocking this user")

        logger.info("User %d unblocked user %d", actor_id, target_id)
        return await self.resolver.resolve_pair(actor_id, target_id)

    # Likes

    async def like(self, user_id: int, post_id: int) -> Post:
        """Like a post and increment its like count.

        Args:
            user_id: ID of the user liking the post
            post_id: ID of the post to like

        Returns:
            The post with its updated like count

        Raises:
            NotFoundError: If the post does not exist
            ForbiddenError: If the post's author blocks the user
            ConflictError: If the user already likes the post
        """
        post = await self._require_post(post_id)
        await self._require_not_blocked_by_author(post, user_id)
        if await self.resolver.is_liked(user_id, post_id):
            raise ConflictError("You have already liked this post")

        try:
            post = await self.store.like_post(user_id, post_id)
        except UniqueViolationError as e:
            raise ConflictError("You have already liked this post") from e
        except RecordNotFoundError as e:
            raise NotFoundError("Post not found") from e

        logger.info("User %d liked post %d", user_id, post_id)
        return post

    async def unlike(self, user_id: int, post_id: int) -> Post:
        post = await self._require_post(post_id)
        await self._require_not_blocked_by_author(post, user_id)
        if not await self.resolver.is_liked(user_id, post_id):
            raise NotFoundError("You have not liked this post")

        try:
            post = await self.store.unlike_post(user_id, post_id)
        except RecordNotFoundError as e:
            raise NotFoundError("You have not liked this post") from e

        logger.info("User %d unliked post %d", user_id, post_id)
        return post

    # Comments

    async def create_comment(self, user_id: int, post_id: int, content: str) -> Comment:
        post = await self._require_post(post_id)
        await self._require_not_blocked_by_author(post, user_id)

        try:
            comment = await self.store.create_comment(post_id, user_id, content)
        except RecordNotFoundError as e:
            raise NotFoundError("Post not found") from e

        logger.info(
            "User %d commented %d on post %d", user_id, comment.comment_id, post_id
        )
        return comment

    async def delete_comment(self, user_id: int, post_id: int, comment_id: int) -> None:
        """Delete a comment written by the acting user.

        Args:
            user_id: ID of the acting user
            post_id: ID of the post the comment must belong to
            comment_id: ID of the comment to delete

        Raises:
            NotFoundError: If the comment does not exist on that post
            ForbiddenError: If the acting user did not write the comment
        """
        comment = await self.store.find_comment(comment_id)
        if comment is None or comment.post_id != post_id:
            raise NotFoundError("Comment not found")
        if comment.user_id != user_id:
            raise ForbiddenError("You can only delete your own comments")

        try:
            await self.store.delete_comment(comment_id)
        except RecordNotFoundError as e:
            raise NotFoundError("Comment not found") from e

        logger.info("User %d deleted comment %d", user_id, comment_id)

    # Posts

    async def update_post(self, user_id: int, post_id: int, update: PostUpdate) -> Post:
        post = await self._require_post(post_id)
        if post.author_id != user_id:
            raise ForbiddenError("You can only edit your own posts")

        changes = update.changes()
        if not changes:
            return post

        try:
            post = await self.store.update_post(post_id, changes)
        except RecordNotFoundError as e:
            raise NotFoundError("Post not found") from e

        logger.info("User %d updated post %d: %s", user_id, post_id, sorted(changes))
        return post

    async def delete_post(self, user_id: int, post_id: int) -> None:
        post = await self._require_post(post_id)
        if post.author_id != user_id:
            raise ForbiddenError("You can only delete your own posts")

        try:
            await self.store.delete_post(post_id)
        except RecordNotFoundError as e:
            raise NotFoundError("Post not found") from e

        logger.info("User %d deleted post %d", user_id, post_id)
