from datetime import timedelta

import pytest

from fakes import InMemoryRecordStore
from kinship.models.post import Post
from kinship.models.relationship import EdgeKind
from kinship.models.user import User
from kinship.services.visibility import VisibilityProjector, is_identified


@pytest.mark.unit
class TestVisibilityProjector:
    @pytest.mark.parametrize("viewer", [None, 0, -3, True, False, "7", 1.5])
    def test_anonymous_sentinels(self, viewer):
        assert is_identified(viewer) is False

    def test_identified_viewer(self):
        assert is_identified(7) is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("viewer", [None, 0, -1, True])
    async def test_anonymous_post_is_neutral(
        self,
        projector: VisibilityProjector,
        store: InMemoryRecordStore,
        alice: User,
        bob_post: Post,
        viewer,
        mocker,
    ):
        # Arrange: edges exist, but an anonymous viewer must not see them
        await store.create_edge(EdgeKind.FOLLOW, alice.user_id, bob_post.author_id)
        await store.like_post(alice.user_id, bob_post.post_id)
        resolve_pair = mocker.spy(projector.resolver, "resolve_pair")
        is_liked = mocker.spy(projector.resolver, "is_liked")
        post = await store.find_post(bob_post.post_id)

        # Act
        view = await projector.project_post(post, viewer)

        # Assert
        assert view.liked is False
        assert view.liked_count == 1
        assert view.author.following is False
        assert view.author.followed is False
        assert view.author.blocked is False
        assert view.author.blocking is False
        resolve_pair.assert_not_called()
        is_liked.assert_not_called()

    @pytest.mark.asyncio
    async def test_anonymous_collections_skip_resolver(
        self, projector: VisibilityProjector, store: InMemoryRecordStore, bob_post, mocker
    ):
        # Arrange
        comment = await store.create_comment(bob_post.post_id, bob_post.author_id, "hi")
        resolve_many = mocker.spy(projector.resolver, "resolve_many")
        liked_posts = mocker.spy(projector.resolver, "liked_posts")

        # Act
        posts = await projector.project_posts([bob_post], None)
        comments = await projector.project_comments([comment], None)

        # Assert
        assert posts[0].liked is False
        assert comments[0].user.following is False
        resolve_many.assert_not_called()
        liked_posts.assert_not_called()

    @pytest.mark.asyncio
    async def test_viewer_sees_relationship_and_like(
        self,
        projector: VisibilityProjector,
        store: InMemoryRecordStore,
        alice: User,
        bob: User,
        bob_post: Post,
    ):
        # Arrange
        await store.create_edge(EdgeKind.FOLLOW, alice.user_id, bob.user_id)
        post = await store.like_post(alice.user_id, bob_post.post_id)

        # Act
        view = await projector.project_post(post, alice.user_id)

        # Assert
        assert view.liked is True
        assert view.liked_count == 1
        assert view.author.username == "bob"
        assert view.author.following is True
        assert view.author.followed is False

    @pytest.mark.asyncio
    async def test_project_profile_blocked_by_subject(
        self,
        projector: VisibilityProjector,
        store: InMemoryRecordStore,
        alice: User,
        bob: User,
    ):
        # Arrange
        await store.block_user(bob.user_id, alice.user_id)

        # Act
        profile = await projector.project_profile(bob, alice.user_id)

        # Assert
        assert profile.blocked is True
        assert profile.blocking is False

    @pytest.mark.asyncio
    async def test_collection_matches_single_projection(
        self,
        projector: VisibilityProjector,
        store: InMemoryRecordStore,
        alice: User,
        bob: User,
        carol: User,
    ):
        # Arrange
        first = await store.create_post(bob.user_id, "One", "d", "c")
        second = await store.create_post(carol.user_id, "Two", "d", "c")
        third = await store.create_post(bob.user_id, "Three", "d", "c")
        await store.create_edge(EdgeKind.FOLLOW, alice.user_id, bob.user_id)
        await store.block_user(carol.user_id, alice.user_id)
        await store.like_post(alice.user_id, third.post_id)
        posts = [await store.find_post(p.post_id) for p in (third, second, first)]

        # Act
        batched = await projector.project_posts(posts, alice.user_id)
        single = [await projector.project_post(p, alice.user_id) for p in posts]

        # Assert
        assert batched == single
        assert [p.title for p in batched] == ["Three", "Two", "One"]

    @pytest.mark.asyncio
    async def test_comments_project_commenter(
        self,
        projector: VisibilityProjector,
        store: InMemoryRecordStore,
        alice: User,
        carol: User,
        bob_post: Post,
    ):
        # Arrange
        await store.create_edge(EdgeKind.FOLLOW, carol.user_id, alice.user_id)
        comment = await store.create_comment(bob_post.post_id, carol.user_id, "hi")

        # Act
        batched = await projector.project_comments([comment], alice.user_id)
        single = await projector.project_comment(comment, alice.user_id)

        # Assert
        assert batched == [single]
        assert single.user.username == "carol"
        assert single.user.followed is True

    @pytest.mark.asyncio
    async def test_timestamps_use_configured_offset(
        self, projector: VisibilityProjector, bob_post: Post
    ):
        # Act
        view = await projector.project_post(bob_post, None)

        # Assert
        assert view.created_at.utcoffset() == timedelta(hours=8)
        assert view.created_at == bob_post.created_at
        assert view.created_at.hour == (bob_post.created_at.hour + 8) % 24

    @pytest.mark.asyncio
    async def test_serializes_camel_case(
        self, projector: VisibilityProjector, bob_post: Post
    ):
        # Act
        payload = (await projector.project_post(bob_post, None)).model_dump(
            by_alias=True
        )

        # Assert
        assert {"postId", "createdAt", "updatedAt", "likedCount", "liked"} <= set(
            payload
        )
        assert payload["author"]["username"] == "bob"
