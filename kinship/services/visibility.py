import asyncio
from datetime import datetime, timezone
from typing import Any

from kinship.models.comment import Comment
from kinship.models.post import Post
from kinship.models.relationship import NEUTRAL_VIEW, RelationshipView
from kinship.models.user import User
from kinship.schemas.responses import CommentView, PostView, Profile
from kinship.services.relationship import RelationshipResolver


def is_identified(viewer: Any) -> bool:
    """Check whether a viewer value names a real user.

    None, booleans, non-integers and non-positive integers are all
    treated as anonymous.
    """
    return isinstance(viewer, int) and not isinstance(viewer, bool) and viewer > 0


class VisibilityProjector:
    """Service turning stored entities into viewer-relative payloads.

    For an anonymous viewer every relationship flag is False and the
    resolver is never called. Otherwise the viewer's relationship to each
    referenced user is resolved and merged into that user's profile.

    Attributes:
        resolver: Source of relationship flags
        tz: Fixed offset every timestamp is rendered in
    """

    def __init__(self, resolver: RelationshipResolver, tz: timezone) -> None:
        self.resolver = resolver
        self.tz = tz

    def _localize(self, value: datetime) -> datetime:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(self.tz)

    @staticmethod
    def build_profile(user: User, view: RelationshipView) -> Profile:
        return Profile(
            username=user.username,
            intro=user.intro,
            avatar=user.avatar,
            followed=view.followed,
            following=view.following,
            blocked=view.blocked,
            blocking=view.blocking,
        )

    def _post(self, post: Post, view: RelationshipView, liked: bool) -> PostView:
        return PostView(
            post_id=post.post_id,
            title=post.title,
            description=post.description,
            content=post.content,
            created_at=self._localize(post.created_at),
            updated_at=self._localize(post.updated_at),
            liked=liked,
            liked_count=post.like_count,
            author=self.build_profile(post.author, view),
        )

    def _comment(self, comment: Comment, view: RelationshipView) -> CommentView:
        return CommentView(
            comment_id=comment.comment_id,
            content=comment.content,
            created_at=self._localize(comment.created_at),
            user=self.build_profile(comment.user, view),
        )

    async def project_profile(self, user: User, viewer: int | None) -> Profile:
        if not is_identified(viewer):
            return self.build_profile(user, NEUTRAL_VIEW)
        view = await self.resolver.resolve_pair(viewer, user.user_id)
        return self.build_profile(user, view)

    async def project_post(self, post: Post, viewer: int | None) -> PostView:
        """Project a single post for a viewer.

        Args:
            post: The stored post with its author
            viewer: ID of the viewing user, or None for anonymous access

        Returns:
            The post with the viewer's like flag and author relationship
        """
        if not is_identified(viewer):
            return self._post(post, NEUTRAL_VIEW, liked=False)
        view, liked = await asyncio.gather(
            self.resolver.resolve_pair(viewer, post.author_id),
            self.resolver.is_liked(viewer, post.post_id),
        )
        return self._post(post, view, liked)

    async def project_posts(
        self, posts: list[Post], viewer: int | None
    ) -> list[PostView]:
        """Project a list of posts using batched relationship lookups.

        Args:
            posts: The stored posts, in display order
            viewer: ID of the viewing user, or None for anonymous access

        Returns:
            The projected posts in the same order
        """
        if not is_identified(viewer):
            return [self._post(post, NEUTRAL_VIEW, liked=False) for post in posts]
        if not posts:
            return []
        views, liked = await asyncio.gather(
            self.resolver.resolve_many(viewer, (post.author_id for post in posts)),
            self.resolver.liked_posts(viewer, (post.post_id for post in posts)),
        )
        return [
            self._post(post, views[post.author_id], post.post_id in liked)
            for post in posts
        ]

    async def project_comment(
        self, comment: Comment, viewer: int | None
    ) -> CommentView:
        if not is_identified(viewer):
            return self._comment(comment, NEUTRAL_VIEW)
        view = await self.resolver.resolve_pair(viewer, comment.user_id)
        return self._comment(comment, view)

    async def project_comments(
        self, comments: list[Comment], viewer: int | None
    ) -> list[CommentView]:
        if not is_identified(viewer):
            return [self._comment(comment, NEUTRAL_VIEW) for comment in comments]
        if not comments:
            return []
        views = await self.resolver.resolve_many(
            viewer, (comment.user_id for comment in comments)
        )
        return [self._comment(comment, views[comment.user_id]) for comment in comments]
