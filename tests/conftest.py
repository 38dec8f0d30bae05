from collections.abc import Generator

import pytest
import pytest_asyncio
from argon2 import PasswordHasher
from fastapi.testclient import TestClient

from kinship.config import Settings
from kinship.main import create_app
from kinship.models.post import Post
from kinship.models.user import User
from kinship.services.auth import Authenticator
from kinship.services.comment import CommentService
from kinship.services.credentials import CredentialStore
from kinship.services.guard import MutationGuard
from kinship.services.post import PostService
from kinship.services.profile import ProfileService
from kinship.services.relationship import RelationshipResolver
from kinship.services.user import UserService
from kinship.services.visibility import VisibilityProjector
from fakes import InMemoryRecordStore

TEST_JWT_SECRET = "test-secret-for-hs256-signing"


@pytest.fixture
def settings() -> Settings:
    return Settings(jwt_secret=TEST_JWT_SECRET, tz_east_offset_in_hours=8)


@pytest.fixture
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def credentials() -> CredentialStore:
    # Minimal argon2 cost so hashing does not dominate the test run
    return CredentialStore(
        PasswordHasher(time_cost=1, memory_cost=8, parallelism=1, hash_len=16)
    )


# Service fixtures
@pytest.fixture
def resolver(store: InMemoryRecordStore) -> RelationshipResolver:
    return RelationshipResolver(store)


@pytest.fixture
def projector(
    resolver: RelationshipResolver, settings: Settings
) -> VisibilityProjector:
    return VisibilityProjector(resolver, settings.timezone)


@pytest.fixture
def guard(store: InMemoryRecordStore, resolver: RelationshipResolver) -> MutationGuard:
    return MutationGuard(store, resolver)


@pytest.fixture
def authenticator(settings: Settings) -> Authenticator:
    return Authenticator(settings)


@pytest.fixture
def user_service(
    store: InMemoryRecordStore,
    credentials: CredentialStore,
    authenticator: Authenticator,
    settings: Settings,
) -> UserService:
    return UserService(store, credentials, authenticator, settings.timezone)


@pytest.fixture
def post_service(
    store: InMemoryRecordStore, guard: MutationGuard, projector: VisibilityProjector
) -> PostService:
    return PostService(store, guard, projector)


@pytest.fixture
def comment_service(
    store: InMemoryRecordStore, guard: MutationGuard, projector: VisibilityProjector
) -> CommentService:
    return CommentService(store, guard, projector)


@pytest.fixture
def profile_service(
    store: InMemoryRecordStore, guard: MutationGuard, projector: VisibilityProjector
) -> ProfileService:
    return ProfileService(store, guard, projector)


# Record fixtures
@pytest_asyncio.fixture
async def alice(store: InMemoryRecordStore) -> User:
    return await store.create_user("alice@example.com", "alice", "unused-hash")


@pytest_asyncio.fixture
async def bob(store: InMemoryRecordStore) -> User:
    return await store.create_user("bob@example.com", "bob", "unused-hash")


@pytest_asyncio.fixture
async def carol(store: InMemoryRecordStore) -> User:
    return await store.create_user("carol@example.com", "carol", "unused-hash")


@pytest_asyncio.fixture
async def bob_post(store: InMemoryRecordStore, bob: User) -> Post:
    return await store.create_post(
        bob.user_id, "Hello", "First post", "Hello from bob"
    )


# HTTP fixtures
@pytest.fixture
def client(
    settings: Settings, store: InMemoryRecordStore, credentials: CredentialStore
) -> Generator[TestClient, None, None]:
    app = create_app(settings=settings, store=store, credentials=credentials)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def auth_headers(authenticator: Authenticator):
    def make(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {authenticator.issue_token(user.user_id)}"}

    return make
