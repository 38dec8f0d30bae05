import logging
from datetime import timezone

from fastapi.concurrency import run_in_threadpool

from kinship.errors import ConflictError, NotFoundError, UnauthorizedError
from kinship.models.user import User, UserCreate, UserLogin, UserUpdate
from kinship.schemas.responses import UserView
from kinship.services.auth import Authenticator
from kinship.services.credentials import CredentialStore
from kinship.store.base import RecordNotFoundError, RecordStore, UniqueViolationError

logger = logging.getLogger(__name__)


class UserService:
    """Service for account registration, login and maintenance.

    Attributes:
        store: Record store holding the users
        credentials: Password hashing
        authenticator: Token issuance
        tz: Fixed offset timestamps are rendered in
    """

    def __init__(
        self,
        store: RecordStore,
        credentials: CredentialStore,
        authenticator: Authenticator,
        tz: timezone,
    ) -> None:
        self.store = store
        self.credentials = credentials
        self.authenticator = authenticator
        self.tz = tz

    def _view(self, user: User) -> UserView:
        return UserView(
            user_id=user.user_id,
            email=user.email,
            username=user.username,
            intro=user.intro,
            avatar=user.avatar,
            created_at=user.created_at.astimezone(self.tz),
            token=self.authenticator.issue_token(user.user_id),
        )

    async def _get_user(self, user_id: int) -> User:
        user = await self.store.find_user(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def register(self, data: UserCreate) -> UserView:
        """Register a new account.

        Args:
            data: Email, username and plaintext password

        Returns:
            The new account with an access token

        Raises:
            ConflictError: If the email or username is already taken
        """
        password_hash = await run_in_threadpool(self.credentials.hash, data.password)
        try:
            user = await self.store.create_user(data.email, data.username, password_hash)
        except UniqueViolationError as e:
            logger.debug("Registration rejected by the store: %s", e)
            raise ConflictError("Email or username is already taken") from e

        logger.info("Registered user %d (%s)", user.user_id, user.username)
        return self._view(user)

    async def login(self, data: UserLogin) -> UserView:
        """Log in by email and password.

        Args:
            data: Email and plaintext password

        Returns:
            The account with a fresh access token

        Raises:
            NotFoundError: If no account uses the email
            UnauthorizedError: If the password does not match
        """
        user = await self.store.find_user_by_email(data.email)
        if user is None:
            raise NotFoundError("No account is registered with this email")

        password_hash = await self.store.get_password_hash(user.user_id)
        if password_hash is None or not await run_in_threadpool(
            self.credentials.verify, data.password, password_hash
        ):
            raise UnauthorizedError("Incorrect password")

        logger.info("User %d logged in", user.user_id)
        return self._view(user)

    async def current(self, user_id: int) -> UserView:
        logger.debug("Fetching account %d", user_id)
        return self._view(await self._get_user(user_id))

    async def update(self, user_id: int, data: UserUpdate) -> UserView:
        """Change the supplied fields of an account.

        Args:
            user_id: ID of the account to change
            data: Fields to change; unset fields keep their value

        Returns:
            The updated account with a fresh access token

        Raises:
            NotFoundError: If the account does not exist
            ConflictError: If the new email or username is taken
        """
        user = await self._get_user(user_id)
        fields = data.model_dump(exclude_none=True, exclude={"password"})

        if "email" in fields and fields["email"] != user.email:
            if await self.store.find_user_by_email(fields["email"]) is not None:
                raise ConflictError("Email is already registered")
        if "username" in fields and fields["username"] != user.username:
            if await self.store.find_user_by_username(fields["username"]) is not None:
                raise ConflictError("Username is already taken")

        try:
            if fields:
                user = await self.store.update_user(user_id, fields)
            if data.password is not None:
                password_hash = await run_in_threadpool(
                    self.credentials.hash, data.password
                )
                await self.store.set_password_hash(user_id, password_hash)
        except UniqueViolationError as e:
            raise ConflictError("Email or username is already taken") from e
        except RecordNotFoundError as e:
            raise NotFoundError("User not found") from e

        changed = sorted(fields) + (["password"] if data.password is not None else [])
        logger.info("Updated user %d: %s", user_id, changed)
        return self._view(user)

    async def delete(self, user_id: int) -> None:
        try:
            await self.store.delete_user(user_id)
        except RecordNotFoundError as e:
            raise NotFoundError("User not found") from e

        logger.info("Deleted user %d", user_id)
