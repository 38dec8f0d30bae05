import logging

from kinship.errors import NotFoundError, UnauthorizedError
from kinship.models.post import PostCreate, PostFilter, PostUpdate
from kinship.models.relationship import EdgeKind
from kinship.schemas.responses import PostsResponse, PostView
from kinship.services.guard import MutationGuard
from kinship.services.visibility import VisibilityProjector, is_identified
from kinship.store.base import RecordNotFoundError, RecordStore

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class PostService:
    """Service for reading and writing posts and their likes.

    Reads go through the visibility projector, writes through the
    mutation guard.

    Attributes:
        store: Record store holding the posts
        guard: Gate for post writes
        projector: Renders posts for a viewer
    """

    def __init__(
        self,
        store: RecordStore,
        guard: MutationGuard,
        projector: VisibilityProjector,
    ) -> None:
        self.store = store
        self.guard = guard
        self.projector = projector

    async def list_posts(
        self,
        viewer: int | None,
        author: str | None = None,
        liked_by: str | None = None,
        following: bool = False,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> PostsResponse:
        """List posts newest first with the total count for the filter.

        Args:
            viewer: ID of the viewing user, or None for anonymous access
            author: Only posts written by this username
            liked_by: Only posts liked by this username
            following: Only posts by users the viewer follows
            limit: Maximum number of posts to return
            offset: Number of matching posts to skip

        Returns:
            The page of posts and the number of posts matching the filter

        Raises:
            UnauthorizedError: If following is requested anonymously
        """
        author_ids = None
        if following:
            if not is_identified(viewer):
                raise UnauthorizedError("Log in to list posts from followed users")
            author_ids = await self.store.edge_objects(EdgeKind.FOLLOW, viewer)

        post_filter = PostFilter(author=author, liked_by=liked_by, author_ids=author_ids)
        posts = await self.store.find_posts(post_filter, limit, offset)
        post_count = await self.store.count_posts(post_filter)
        logger.debug(
            "Listed %d of %d posts for viewer %s", len(posts), post_count, viewer
        )
        return PostsResponse(
            posts=await self.projector.project_posts(posts, viewer),
            post_count=post_count,
        )

    async def get_post(self, post_id: int, viewer: int | None) -> PostView:
        post = await self.store.find_post(post_id)
        if post is None:
            raise NotFoundError("Post not found")
        logger.debug("Fetched post %d for viewer %s", post_id, viewer)
        return await self.projector.project_post(post, viewer)

    async def create_post(self, user_id: int, data: PostCreate) -> PostView:
        try:
            post = await self.store.create_post(
                user_id, data.title, data.description, data.content
            )
        except RecordNotFoundError as e:
            raise NotFoundError("User not found") from e

        logger.info("User %d created post %d", user_id, post.post_id)
        return await self.projector.project_post(post, user_id)

    async def update_post(
        self, user_id: int, post_id: int, data: PostUpdate
    ) -> PostView:
        post = await self.guard.update_post(user_id, post_id, data)
        return await self.projector.project_post(post, user_id)

    async def delete_post(self, user_id: int, post_id: int) -> None:
        await self.guard.delete_post(user_id, post_id)

    async def like(self, user_id: int, post_id: int) -> PostView:
        post = await self.guard.like(user_id, post_id)
        return await self.projector.project_post(post, user_id)

    async def unlike(self, user_id: int, post_id: int) -> PostView:
        post = await self.guard.unlike(user_id, post_id)
        return await self.projector.project_post(post, user_id)
