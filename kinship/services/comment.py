import logging

from kinship.errors import NotFoundError
from kinship.models.comment import CommentCreate
from kinship.schemas.responses import CommentView
from kinship.services.guard import MutationGuard
from kinship.services.visibility import VisibilityProjector
from kinship.store.base import RecordStore

logger = logging.getLogger(__name__)


class CommentService:
    """Service for the comments under a post.

    Attributes:
        store: Record store holding the comments
        guard: Gate for comment writes
        projector: Renders comments for a viewer
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

    async def list_comments(self, post_id: int, viewer: int | None) -> list[CommentView]:
        """List a post's comments oldest first.

        Raises:
            NotFoundError: If the post does not exist
        """
        if await self.store.find_post(post_id) is None:
            raise NotFoundError("Post not found")
        comments = await self.store.find_comments(post_id)
        logger.debug("Fetched %d comments on post %d", len(comments), post_id)
        return await self.projector.project_comments(comments, viewer)

    async def create_comment(
        self, user_id: int, post_id: int, data: CommentCreate
    ) -> CommentView:
        comment = await self.guard.create_comment(user_id, post_id, data.content)
        return await self.projector.project_comment(comment, user_id)

    async def delete_comment(self, user_id: int, post_id: int, comment_id: int) -> None:
        await self.guard.delete_comment(user_id, post_id, comment_id)
