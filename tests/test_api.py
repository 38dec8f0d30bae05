import pytest
from fastapi.testclient import TestClient


def register(client: TestClient, username: str) -> dict[str, str]:
    response = client.post(
        "/api/users/create",
        json={
            "user": {
                "email": f"{username}@example.com",
                "username": username,
                "password": "password123",
            }
        },
    )
    assert response.status_code == 201
    return {"Authorization": f"Bearer {response.json()['user']['token']}"}


def create_post(client: TestClient, headers: dict[str, str], title: str) -> int:
    response = client.post(
        "/api/posts",
        json={"post": {"title": title, "description": "d", "content": "c"}},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()["post"]["postId"]


@pytest.mark.unit
class TestApi:
    def test_health(self, client: TestClient):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"success": True}

    def test_register_login_and_current_user(self, client: TestClient):
        # Arrange
        register(client, "alice")

        # Act
        login = client.post(
            "/api/users",
            json={"user": {"email": "alice@example.com", "password": "password123"}},
        )
        headers = {"Authorization": f"Bearer {login.json()['user']['token']}"}
        current = client.get("/api/users", headers=headers)

        # Assert
        assert login.status_code == 200
        assert current.status_code == 200
        user = current.json()["user"]
        assert user["username"] == "alice"
        assert "createdAt" in user
        assert "password" not in user

    def test_register_duplicate_is_conflict(self, client: TestClient):
        # Arrange
        register(client, "alice")

        # Act
        response = client.post(
            "/api/users/create",
            json={
                "user": {
                    "email": "alice@example.com",
                    "username": "alice2",
                    "password": "password123",
                }
            },
        )

        # Assert
        assert response.status_code == 409
        assert response.json()["error"]["kind"] == "conflict"

    def test_missing_token_is_unauthorized(self, client: TestClient):
        response = client.get("/api/users")
        assert response.status_code == 401
        assert response.json()["error"]["kind"] == "unauthorized"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_invalid_token_on_optional_route(self, client: TestClient):
        # Arrange
        register(client, "bob")

        # Act
        anonymous = client.get("/api/profiles/bob")
        invalid = client.get(
            "/api/profiles/bob", headers={"Authorization": "Bearer garbage"}
        )

        # Assert
        assert anonymous.status_code == 200
        assert invalid.status_code == 401

    def test_follow_and_profile_flags(self, client: TestClient):
        # Arrange
        alice = register(client, "alice")
        register(client, "bob")

        # Act
        followed = client.post("/api/profiles/bob/follow", headers=alice)
        again = client.post("/api/profiles/bob/follow", headers=alice)
        seen = client.get("/api/profiles/bob", headers=alice)
        anonymous = client.get("/api/profiles/bob")

        # Assert
        assert followed.status_code == 200
        assert followed.json()["profile"]["following"] is True
        assert again.status_code == 409
        assert seen.json()["profile"] == {
            "username": "bob",
            "intro": None,
            "avatar": None,
            "followed": False,
            "following": True,
            "blocked": False,
            "blocking": False,
        }
        assert anonymous.json()["profile"]["following"] is False

    def test_follow_self_is_bad_request(self, client: TestClient):
        alice = register(client, "alice")
        response = client.post("/api/profiles/alice/follow", headers=alice)
        assert response.status_code == 400

    def test_block_removes_follow(self, client: TestClient):
        # Arrange
        alice = register(client, "alice")
        bob = register(client, "bob")
        client.post("/api/profiles/bob/follow", headers=alice)

        # Act
        blocked = client.post("/api/profiles/alice/block", headers=bob)
        follow_back = client.post("/api/profiles/bob/follow", headers=alice)
        seen = client.get("/api/profiles/bob", headers=alice)

        # Assert
        assert blocked.json()["profile"]["blocking"] is True
        assert follow_back.status_code == 403
        assert seen.json()["profile"]["following"] is False
        assert seen.json()["profile"]["blocked"] is True

    def test_like_flow(self, client: TestClient):
        # Arrange
        alice = register(client, "alice")
        bob = register(client, "bob")
        post_id = create_post(client, bob, "Hello")

        # Act
        liked = client.post(f"/api/posts/{post_id}/like", headers=alice)
        duplicate = client.post(f"/api/posts/{post_id}/like", headers=alice)
        unliked = client.delete(f"/api/posts/{post_id}/like", headers=alice)
        missing = client.delete(f"/api/posts/{post_id}/like", headers=alice)

        # Assert
        assert liked.json()["post"]["liked"] is True
        assert liked.json()["post"]["likedCount"] == 1
        assert duplicate.status_code == 409
        assert unliked.json()["post"]["likedCount"] == 0
        assert missing.status_code == 404

    def test_list_posts(self, client: TestClient):
        # Arrange
        alice = register(client, "alice")
        bob = register(client, "bob")
        register(client, "carol")
        create_post(client, bob, "First")
        create_post(client, bob, "Second")
        client.post("/api/profiles/bob/follow", headers=alice)

        # Act
        feed = client.get("/api/posts", params={"following": "true"}, headers=alice)
        by_carol = client.get("/api/posts", params={"author": "carol"})
        paged = client.get("/api/posts", params={"limit": 1})
        anonymous_feed = client.get("/api/posts", params={"following": "true"})
        too_many = client.get("/api/posts", params={"limit": 101})

        # Assert
        assert [p["title"] for p in feed.json()["posts"]] == ["Second", "First"]
        assert feed.json()["postCount"] == 2
        assert feed.json()["posts"][0]["author"]["following"] is True
        assert by_carol.json() == {"posts": [], "postCount": 0}
        assert len(paged.json()["posts"]) == 1
        assert paged.json()["postCount"] == 2
        assert anonymous_feed.status_code == 401
        assert too_many.status_code == 422

    def test_post_update_and_delete_ownership(self, client: TestClient):
        # Arrange
        alice = register(client, "alice")
        bob = register(client, "bob")
        post_id = create_post(client, bob, "Mine")

        # Act
        forbidden = client.put(
            f"/api/posts/{post_id}", json={"post": {"title": "Stolen"}}, headers=alice
        )
        updated = client.put(
            f"/api/posts/{post_id}", json={"post": {"title": "Renamed"}}, headers=bob
        )
        deleted = client.delete(f"/api/posts/{post_id}", headers=bob)
        gone = client.get(f"/api/posts/{post_id}")

        # Assert
        assert forbidden.status_code == 403
        assert updated.json()["post"]["title"] == "Renamed"
        assert updated.json()["post"]["content"] == "c"
        assert deleted.json() == {"message": "Post deleted"}
        assert gone.status_code == 404

    def test_comment_flow(self, client: TestClient):
        # Arrange
        alice = register(client, "alice")
        bob = register(client, "bob")
        post_id = create_post(client, bob, "Hello")

        # Act
        created = client.post(
            f"/api/posts/{post_id}/comments",
            json={"comment": {"content": "Nice post"}},
            headers=alice,
        )
        comment_id = created.json()["comment"]["commentId"]
        listed = client.get(f"/api/posts/{post_id}/comments")
        forbidden = client.delete(
            f"/api/posts/{post_id}/comments/{comment_id}", headers=bob
        )
        deleted = client.delete(
            f"/api/posts/{post_id}/comments/{comment_id}", headers=alice
        )

        # Assert
        assert created.status_code == 201
        assert created.json()["comment"]["user"]["username"] == "alice"
        assert [c["content"] for c in listed.json()["comments"]] == ["Nice post"]
        assert forbidden.status_code == 403
        assert deleted.status_code == 200

    def test_delete_account(self, client: TestClient):
        # Arrange
        alice = register(client, "alice")

        # Act
        deleted = client.delete("/api/users", headers=alice)
        after = client.get("/api/users", headers=alice)

        # Assert
        assert deleted.json() == {"message": "User deleted"}
        assert after.status_code == 404

    def test_validation_errors_keep_fastapi_shape(self, client: TestClient):
        response = client.post(
            "/api/users/create",
            json={"user": {"email": "not-an-email", "username": "x", "password": "p"}},
        )
        assert response.status_code == 422
        assert "detail" in response.json()
