import logging

from kinship.errors import NotFoundError
from kinship.models.user import User
from kinship.schemas.responses import Profile
from kinship.services.guard import MutationGuard
from kinship.services.visibility import VisibilityProjector
from kinship.store.base import RecordStore

logger = logging.getLogger(__name__)


class ProfileService:
    """Service for public profiles and the follow/block actions on them.

    Profiles are addressed by username. The relationship flags returned
    after a follow or block action come from the mutation guard and
    reflect the state right after the write.

    Attributes:
        store: Record store holding the users
        guard: Gate for follow and block writes
        projector: Renders profiles for a viewer
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

    async def _get_user(self, username: str) -> User:
        user = await self.store.find_user_by_username(username)
        if user is None:
            raise NotFoundError(f"No user named {username}")
        return user

    async def get_profile(self, username: str, viewer: int | None) -> Profile:
        user = await self._get_user(username)
        logger.debug("Fetched profile %s for viewer %s", username, viewer)
        return await self.projector.project_profile(user, viewer)

    async def follow(self, actor_id: int, username: str) -> Profile:
        user = await self._get_user(username)
        view = await self.guard.follow(actor_id, user.user_id)
        return self.projector.build_profile(user, view)

    async def unfollow(self, actor_id: int, username: str) -> Profile:
        user = await self._get_user(username)
        view = await self.guard.unfollow(actor_id, user.user_id)
        return self.projector.build_profile(user, view)

    async def block(self, actor_id: int, username: str) -> Profile:
        user = await self._get_user(username)
        view = await self.guard.block(actor_id, user.user_id)
        return self.projector.build_profile(user, view)

    async def unblock(self, actor_id: int, username: str) -> Profile:
        user = await self._get_user(username)
        view = await self.guard.unblock(actor_id, user.user_id)
        return self.projector.build_profile(user, view)
