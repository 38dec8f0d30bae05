import logging
from collections.abc import Awaitable, Callable, Iterable
from datetime import UTC, datetime
from typing import Any, TypeVar

from neo4j import AsyncManagedTransaction
from neo4j.exceptions import ConstraintError, DriverError, Neo4jError
from neo4j.graph import Node
from neo4j.time import DateTime

from kinship.db import DatabaseManager
from kinship.models.comment import Comment
from kinship.models.post import Post, PostFilter
from kinship.models.relationship import EdgeKind
from kinship.models.user import User
from kinship.store.base import (
    BlockedEdgeError,
    BlockOutcome,
    RecordNotFoundError,
    RecordStore,
    StoreError,
    UniqueViolationError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Relationship type, object label and object key per edge kind
EDGE_PATTERNS: dict[EdgeKind, tuple[str, str, str]] = {
    EdgeKind.FOLLOW: ("FOLLOWS", "User", "user_id"),
    EdgeKind.BLOCK: ("BLOCKS", "User", "user_id"),
    EdgeKind.LIKE: ("LIKED", "Post", "post_id"),
}


def _properties(node: Node | dict[str, Any]) -> dict[str, Any]:
    """Convert a node's properties to plain Python values."""
    return {
        key: value.to_native() if isinstance(value, DateTime) else value
        for key, value in dict(node).items()
    }


def _to_user(node: Node) -> User:
    props = _properties(node)
    props.pop("password_hash", None)
    return User(**props)


def _to_post(post: Node, author: Node) -> Post:
    return Post(**_properties(post), author=_to_user(author))


def _to_comment(comment: Node, user: Node) -> Comment:
    return Comment(**_properties(comment), user=_to_user(user))


def _edge_match(kind: EdgeKind, subject: str, object_: str) -> str:
    """Build the MATCH pattern for one edge between two parameters."""
    rel_type, label, key = EDGE_PATTERNS[kind]
    return (
        f"(subject:User {{user_id: {subject}}})"
        f"-[edge:{rel_type}]->"
        f"(object:{label} {{{key}: {object_}}})"
    )


def _post_filter_clause(post_filter: PostFilter) -> tuple[str, dict[str, Any]]:
    """Translate a post filter into a WHERE clause and its parameters."""
    conditions: list[str] = []
    params: dict[str, Any] = {}
    if post_filter.author is not None:
        conditions.append("author.username = $author")
        params["author"] = post_filter.author
    if post_filter.liked_by is not None:
        conditions.append(
            "EXISTS { MATCH (:User {username: $liked_by})-[:LIKED]->(post) }"
        )
        params["liked_by"] = post_filter.liked_by
    if post_filter.author_ids is not None:
        conditions.append("author.user_id IN $author_ids")
        params["author_ids"] = list(post_filter.author_ids)
    if not conditions:
        return "", params
    return "WHERE " + " AND ".join(conditions), params


class Neo4jRecordStore(RecordStore):
    """Record store backed by a Neo4j graph.

    Users, posts and comments are nodes; follows, blocks and likes are
    relationships. Integer ids come from Sequence nodes incremented inside
    the creating transaction.

    Writes that must not race on the same key start by taking a write lock
    on the node they hang off, then re-check the edge inside the same
    transaction.
    """

    def __init__(self, db_manager: DatabaseManager) -> None:
        self._db = db_manager

    async def _read(
        self, work: Callable[..., Awaitable[T]], *args: Any
    ) -> T:
        try:
            async with self._db.driver.session(database=self._db.database) as session:
                return await session.execute_read(work, *args)
        except StoreError:
            raise
        except (Neo4jError, DriverError) as e:
            raise StoreError(f"Failed to read from the record store: {str(e)}") from e

    async def _write(
        self, work: Callable[..., Awaitable[T]], *args: Any
    ) -> T:
        try:
            async with self._db.driver.session(database=self._db.database) as session:
                return await session.execute_write(work, *args)
        except StoreError:
            raise
        except ConstraintError as e:
            logger.debug("Write rejected by a uniqueness constraint: %s", e)
            raise UniqueViolationError(str(e)) from e
        except (Neo4jError, DriverError) as e:
            raise StoreError(f"Failed to write to the record store: {str(e)}") from e

    @staticmethod
    async def _next_id(tx: AsyncManagedTransaction, name: str) -> int:
        query = """
        MERGE (seq:Sequence {name: $name})
        ON CREATE SET seq.value = 0
        SET seq.value = seq.value + 1
        RETURN seq.value AS value
        """
        result = await tx.run(query, name=name)
        record = await result.single()
        return record["value"]

    # Users

    async def find_user(self, user_id: int) -> User | None:
        return await self._read(self._find_user, "user_id", user_id)

    async def find_user_by_username(self, username: str) -> User | None:
        return await self._read(self._find_user, "username", username)

    async def find_user_by_email(self, email: str) -> User | None:
        return await self._read(self._find_user, "email", email)

    async def _find_user(
        self, tx: AsyncManagedTransaction, key: str, value: Any
    ) -> User | None:
        query = f"""
        MATCH (user:User {{{key}: $value}})
        RETURN user
        """
        result = await tx.run(query, value=value)
        if record := await result.single():
            return _to_user(record["user"])
        return None

    async def create_user(self, email: str, username: str, password_hash: str) -> User:
        return await self._write(self._create_user, email, username, password_hash)

    async def _create_user(
        self,
        tx: AsyncManagedTransaction,
        email: str,
        username: str,
        password_hash: str,
    ) -> User:
        """Create a user node.

        Args:
            tx: The database transaction
            email: Email address of the new user
            username: Username of the new user
            password_hash: Hash of the user's password

        Returns:
            The created user

        Raises:
            UniqueViolationError: If the email or username is taken
        """
        check_query = """
        OPTIONAL MATCH (by_email:User {email: $email})
        OPTIONAL MATCH (by_username:User {username: $username})
        RETURN by_email IS NOT NULL AS email_taken,
               by_username IS NOT NULL AS username_taken
        """
        result = await tx.run(check_query, email=email, username=username)
        status = await result.single()
        if status["email_taken"]:
            raise UniqueViolationError("Email is already registered")
        if status["username_taken"]:
            raise UniqueViolationError("Username is already taken")

        query = """
        CREATE (user:User {
            user_id: $user_id,
            email: $email,
            username: $username,
            password_hash: $password_hash,
            created_at: $created_at
        })
        RETURN user
        """
        result = await tx.run(
            query,
            user_id=await self._next_id(tx, "User"),
            email=email,
            username=username,
            password_hash=password_hash,
            created_at=datetime.now(UTC),
        )
        record = await result.single()
        return _to_user(record["user"])

    async def update_user(self, user_id: int, fields: dict[str, str | None]) -> User:
        return await self._write(self._update_user, user_id, fields)

    async def _update_user(
        self,
        tx: AsyncManagedTransaction,
        user_id: int,
        fields: dict[str, str | None],
    ) -> User:
        query = """
        MATCH (user:User {user_id: $user_id})
        SET user += $fields
        RETURN user
        """
        result = await tx.run(query, user_id=user_id, fields=fields)
        if record := await result.single():
            return _to_user(record["user"])
        raise RecordNotFoundError("User not found")

    async def get_password_hash(self, user_id: int) -> str | None:
        return await self._read(self._get_password_hash, user_id)

    async def _get_password_hash(
        self, tx: AsyncManagedTransaction, user_id: int
    ) -> str | None:
        query = """
        MATCH (user:User {user_id: $user_id})
        RETURN user.password_hash AS password_hash
        """
        result = await tx.run(query, user_id=user_id)
        if record := await result.single():
            return record["password_hash"]
        return None

    async def set_password_hash(self, user_id: int, password_hash: str) -> None:
        await self._write(self._set_password_hash, user_id, password_hash)

    async def _set_password_hash(
        self, tx: AsyncManagedTransaction, user_id: int, password_hash: str
    ) -> None:
        query = """
        MATCH (user:User {user_id: $user_id})
        SET user.password_hash = $password_hash
        RETURN count(user) AS updated
        """
        result = await tx.run(query, user_id=user_id, password_hash=password_hash)
        record = await result.single()
        if not record["updated"]:
            raise RecordNotFoundError("User not found")

    async def delete_user(self, user_id: int) -> None:
        await self._write(self._delete_user, user_id)

    async def _delete_user(self, tx: AsyncManagedTransaction, user_id: int) -> None:
        """Delete a user and everything they own.

        Likes the user gave to other authors' posts are released first so
        those posts' like_count stays equal to their LIKED edges.

        Args:
            tx: The database transaction
            user_id: ID of the user to delete

        Raises:
            RecordNotFoundError: If the user does not exist
        """
        release_query = """
        MATCH (user:User {user_id: $user_id})
        OPTIONAL MATCH (user)-[like:LIKED]->(post:Post)
        WHERE post.author_id <> $user_id
        SET post.like_count = post.like_count - 1
        DELETE like
        RETURN count(DISTINCT user) AS found
        """
        result = await tx.run(release_query, user_id=user_id)
        record = await result.single()
        if not record["found"]:
            raise RecordNotFoundError("User not found")

        delete_query = """
        MATCH (user:User {user_id: $user_id})
        OPTIONAL MATCH (user)-[:AUTHORED]->(owned)
        OPTIONAL MATCH (owned)<-[:ON_POST]-(reply:Comment)
        WITH user, collect(DISTINCT owned) + collect(DISTINCT reply) AS doomed
        FOREACH (node IN doomed | DETACH DELETE node)
        DETACH DELETE user
        """
        result = await tx.run(delete_query, user_id=user_id)
        await result.consume()

    # Posts

    async def find_post(self, post_id: int) -> Post | None:
        return await self._read(self._find_post, post_id)

    async def _find_post(
        self, tx: AsyncManagedTransaction, post_id: int
    ) -> Post | None:
        query = """
        MATCH (author:User)-[:AUTHORED]->(post:Post {post_id: $post_id})
        RETURN post, author
        """
        result = await tx.run(query, post_id=post_id)
        if record := await result.single():
            return _to_post(record["post"], record["author"])
        return None

    async def find_posts(
        self, post_filter: PostFilter, limit: int, offset: int
    ) -> list[Post]:
        return await self._read(self._find_posts, post_filter, limit, offset)

    async def _find_posts(
        self,
        tx: AsyncManagedTransaction,
        post_filter: PostFilter,
        limit: int,
        offset: int,
    ) -> list[Post]:
        where, params = _post_filter_clause(post_filter)
        query = f"""
        MATCH (author:User)-[:AUTHORED]->(post:Post)
        {where}
        RETURN post, author
        ORDER BY post.created_at DESC, post.post_id DESC
        SKIP $offset
        LIMIT $limit
        """
        result = await tx.run(query, offset=offset, limit=limit, **params)
        return [_to_post(record["post"], record["author"]) async for record in result]

    async def count_posts(self, post_filter: PostFilter) -> int:
        return await self._read(self._count_posts, post_filter)

    async def _count_posts(
        self, tx: AsyncManagedTransaction, post_filter: PostFilter
    ) -> int:
        where, params = _post_filter_clause(post_filter)
        query = f"""
        MATCH (author:User)-[:AUTHORED]->(post:Post)
        {where}
        RETURN count(post) AS total
        """
        result = await tx.run(query, **params)
        record = await result.single()
        return record["total"]

    async def create_post(
        self, author_id: int, title: str, description: str, content: str
    ) -> Post:
        return await self._write(
            self._create_post, author_id, title, description, content
        )

    async def _create_post(
        self,
        tx: AsyncManagedTransaction,
        author_id: int,
        title: str,
        description: str,
        content: str,
    ) -> Post:
        query = """
        MATCH (author:User {user_id: $author_id})
        CREATE (post:Post {
            post_id: $post_id,
            author_id: $author_id,
            title: $title,
            description: $description,
            content: $content,
            like_count: 0,
            created_at: $current_time,
            updated_at: $current_time
        })
        CREATE (author)-[:AUTHORED {created_at: $current_time}]->(post)
        RETURN post, author
        """
        result = await tx.run(
            query,
            post_id=await self._next_id(tx, "Post"),
            author_id=author_id,
            title=title,
            description=description,
            content=content,
            current_time=datetime.now(UTC),
        )
        if record := await result.single():
            return _to_post(record["post"], record["author"])
        raise RecordNotFoundError("User not found")

    async def update_post(self, post_id: int, fields: dict[str, str]) -> Post:
        return await self._write(self._update_post, post_id, fields)

    async def _update_post(
        self, tx: AsyncManagedTransaction, post_id: int, fields: dict[str, str]
    ) -> Post:
        query = """
        MATCH (author:User)-[:AUTHORED]->(post:Post {post_id: $post_id})
        SET post += $fields,
            post.updated_at = $current_time
        RETURN post, author
        """
        result = await tx.run(
            query, post_id=post_id, fields=fields, current_time=datetime.now(UTC)
        )
        if record := await result.single():
            return _to_post(record["post"], record["author"])
        raise RecordNotFoundError("Post not found")

    async def delete_post(self, post_id: int) -> None:
        await self._write(self._delete_post, post_id)

    async def _delete_post(self, tx: AsyncManagedTransaction, post_id: int) -> None:
        query = """
        MATCH (post:Post {post_id: $post_id})
        OPTIONAL MATCH (post)<-[:ON_POST]-(comment:Comment)
        WITH post, collect(comment) AS comments
        FOREACH (comment IN comments | DETACH DELETE comment)
        DETACH DELETE post
        RETURN count(*) AS deleted
        """
        result = await tx.run(query, post_id=post_id)
        record = await result.single()
        if not record["deleted"]:
            raise RecordNotFoundError("Post not found")

    # Comments

    async def find_comment(self, comment_id: int) -> Comment | None:
        return await self._read(self._find_comment, comment_id)

    async def _find_comment(
        self, tx: AsyncManagedTransaction, comment_id: int
    ) -> Comment | None:
        query = """
        MATCH (user:User)-[:AUTHORED]->(comment:Comment {comment_id: $comment_id})
        RETURN comment, user
        """
        result = await tx.run(query, comment_id=comment_id)
        if record := await result.single():
            return _to_comment(record["comment"], record["user"])
        return None

    async def find_comments(self, post_id: int) -> list[Comment]:
        return await self._read(self._find_comments, post_id)

    async def _find_comments(
        self, tx: AsyncManagedTransaction, post_id: int
    ) -> list[Comment]:
        query = """
        MATCH (user:User)-[:AUTHORED]->(comment:Comment)
              -[:ON_POST]->(:Post {post_id: $post_id})
        RETURN comment, user
        ORDER BY comment.created_at, comment.comment_id
        """
        result = await tx.run(query, post_id=post_id)
        return [
            _to_comment(record["comment"], record["user"]) async for record in result
        ]

    async def create_comment(self, post_id: int, user_id: int, content: str) -> Comment:
        return await self._write(self._create_comment, post_id, user_id, content)

    async def _create_comment(
        self,
        tx: AsyncManagedTransaction,
        post_id: int,
        user_id: int,
        content: str,
    ) -> Comment:
        query = """
        MATCH (user:User {user_id: $user_id})
        MATCH (post:Post {post_id: $post_id})
        CREATE (comment:Comment {
            comment_id: $comment_id,
            post_id: $post_id,
            user_id: $user_id,
            content: $content,
            created_at: $current_time
        })
        CREATE (user)-[:AUTHORED {created_at: $current_time}]->(comment)
        CREATE (comment)-[:ON_POST]->(post)
        RETURN comment, user
        """
        result = await tx.run(
            query,
            comment_id=await self._next_id(tx, "Comment"),
            post_id=post_id,
            user_id=user_id,
            content=content,
            current_time=datetime.now(UTC),
        )
        if record := await result.single():
            return _to_comment(record["comment"], record["user"])
        raise RecordNotFoundError("User or post not found")

    async def delete_comment(self, comment_id: int) -> None:
        await self._write(self._delete_comment, comment_id)

    async def _delete_comment(
        self, tx: AsyncManagedTransaction, comment_id: int
    ) -> None:
        query = """
        MATCH (comment:Comment {comment_id: $comment_id})
        DETACH DELETE comment
        RETURN count(*) AS deleted
        """
        result = await tx.run(query, comment_id=comment_id)
        record = await result.single()
        if not record["deleted"]:
            raise RecordNotFoundError("Comment not found")

    # Edges

    async def edge_exists(self, kind: EdgeKind, subject_id: int, object_id: int) -> bool:
        return await self._read(self._edge_exists, kind, subject_id, object_id)

    async def _edge_exists(
        self,
        tx: AsyncManagedTransaction,
        kind: EdgeKind,
        subject_id: int,
        object_id: int,
    ) -> bool:
        query = f"""
        RETURN EXISTS {{
            MATCH {_edge_match(kind, "$subject_id", "$object_id")}
        }} AS edge_exists
        """
        result = await tx.run(query, subject_id=subject_id, object_id=object_id)
        if record := await result.single():
            return record["edge_exists"]
        return False

    async def existing_edges(
        self, kind: EdgeKind, pairs: Iterable[tuple[int, int]]
    ) -> set[tuple[int, int]]:
        pair_list = [[subject_id, object_id] for subject_id, object_id in pairs]
        if not pair_list:
            return set()
        return await self._read(self._existing_edges, kind, pair_list)

    async def _existing_edges(
        self,
        tx: AsyncManagedTransaction,
        kind: EdgeKind,
        pairs: list[list[int]],
    ) -> set[tuple[int, int]]:
        query = f"""
        UNWIND $pairs AS pair
        MATCH {_edge_match(kind, "pair[0]", "pair[1]")}
        RETURN DISTINCT pair[0] AS subject_id, pair[1] AS object_id
        """
        result = await tx.run(query, pairs=pairs)
        return {(record["subject_id"], record["object_id"]) async for record in result}

    async def edge_objects(self, kind: EdgeKind, subject_id: int) -> list[int]:
        return await self._read(self._edge_objects, kind, subject_id)

    async def _edge_objects(
        self, tx: AsyncManagedTransaction, kind: EdgeKind, subject_id: int
    ) -> list[int]:
        rel_type, label, key = EDGE_PATTERNS[kind]
        query = f"""
        MATCH (:User {{user_id: $subject_id}})-[:{rel_type}]->(object:{label})
        RETURN object.{key} AS object_id
        """
        result = await tx.run(query, subject_id=subject_id)
        return [record["object_id"] async for record in result]

    async def create_edge(self, kind: EdgeKind, subject_id: int, object_id: int) -> None:
        await self._write(self._create_edge, kind, subject_id, object_id)

    async def _create_edge(
        self,
        tx: AsyncManagedTransaction,
        kind: EdgeKind,
        subject_id: int,
        object_id: int,
    ) -> None:
        """Create a user-to-user edge after locking both endpoints.

        Block writes lock the same two nodes, so a follow and a block
        between the same pair never interleave.

        Args:
            tx: The database transaction
            kind: FOLLOW or BLOCK
            subject_id: ID of the acting user
            object_id: ID of the target user

        Raises:
            RecordNotFoundError: If either user does not exist
            UniqueViolationError: If the edge already exists
            BlockedEdgeError: If a FOLLOW is requested while either user
                blocks the other
        """
        rel_type, _, _ = EDGE_PATTERNS[kind]
        lock_query = f"""
        MATCH (subject:User {{user_id: $subject_id}})
        MATCH (object:User {{user_id: $object_id}})
        SET subject._lock = true, object._lock = true
        REMOVE subject._lock, object._lock
        RETURN
            EXISTS {{ (subject)-[:{rel_type}]->(object) }} AS edge_exists,
            EXISTS {{ (subject)-[:BLOCKS]-(object) }} AS block_exists
        """
        result = await tx.run(lock_query, subject_id=subject_id, object_id=object_id)
        status = await result.single()
        if status is None:
            raise RecordNotFoundError("User not found")
        if status["edge_exists"]:
            raise UniqueViolationError(
                f"{rel_type} edge {subject_id}->{object_id} already exists"
            )
        if kind is EdgeKind.FOLLOW and status["block_exists"]:
            raise BlockedEdgeError(
                f"A block between {subject_id} and {object_id} forbids following"
            )

        create_query = f"""
        MATCH (subject:User {{user_id: $subject_id}})
        MATCH (object:User {{user_id: $object_id}})
        CREATE (subject)-[:{rel_type} {{created_at: $current_time}}]->(object)
        """
        result = await tx.run(
            create_query,
            subject_id=subject_id,
            object_id=object_id,
            current_time=datetime.now(UTC),
        )
        await result.consume()

    async def delete_edge(self, kind: EdgeKind, subject_id: int, object_id: int) -> bool:
        return await self._write(self._delete_edge, kind, subject_id, object_id)

    async def _delete_edge(
        self,
        tx: AsyncManagedTransaction,
        kind: EdgeKind,
        subject_id: int,
        object_id: int,
    ) -> bool:
        query = f"""
        MATCH {_edge_match(kind, "$subject_id", "$object_id")}
        DELETE edge
        RETURN count(*) AS deleted
        """
        result = await tx.run(query, subject_id=subject_id, object_id=object_id)
        record = await result.single()
        return record["deleted"] > 0

    async def block_user(self, blocker_id: int, blocked_id: int) -> BlockOutcome:
        return await self._write(self._create_block_relationship, blocker_id, blocked_id)

    async def _create_block_relationship(
        self, tx: AsyncManagedTransaction, blocker_id: int, blocked_id: int
    ) -> BlockOutcome:
        # language=cypher
        query = """
        MATCH (blocker:User {user_id: $blocker_id})
        MATCH (blockee:User {user_id: $blocked_id})
        WHERE blocker <> blockee
        SET blocker._lock = true, blockee._lock = true
        REMOVE blocker._lock, blockee._lock

        // Find any existing follow relationships in both directions
        WITH blocker, blockee
        OPTIONAL MATCH (blocker)-[f1:FOLLOWS]->(blockee)
        OPTIONAL MATCH (blockee)-[f2:FOLLOWS]->(blocker)
        WITH blocker, blockee, f1, f2,
            f1 IS NOT NULL AS f1_exists,
            f2 IS NOT NULL AS f2_exists
        DELETE f1, f2

        MERGE (blocker)-[r:BLOCKS]->(blockee)
        ON CREATE
            SET r.created_at = $current_time

        RETURN {
            removed_forward_follow: f1_exists,
            removed_reverse_follow: f2_exists
        } AS result
        """
        result = await tx.run(
            query,
            blocker_id=blocker_id,
            blocked_id=blocked_id,
            current_time=datetime.now(UTC),
        )
        if record := await result.single():
            return BlockOutcome(**record["result"])
        raise RecordNotFoundError("User not found")

    async def like_post(self, user_id: int, post_id: int) -> Post:
        return await self._write(self._create_post_like, user_id, post_id)

    async def _create_post_like(
        self, tx: AsyncManagedTransaction, user_id: int, post_id: int
    ) -> Post:
        """Create a like and bump the post's counter in one transaction.

        The post node is write-locked before the existence check, so a
        concurrent duplicate waits here and then sees the edge.

        Args:
            tx: The database transaction
            user_id: ID of the user liking the post
            post_id: ID of the post to like

        Returns:
            The post with its new like_count

        Raises:
            RecordNotFoundError: If the user or post does not exist
            UniqueViolationError: If the user already likes the post
        """
        lock_query = """
        MATCH (post:Post {post_id: $post_id})
        MATCH (user:User {user_id: $user_id})
        SET post._lock = true
        REMOVE post._lock
        RETURN EXISTS { (user)-[:LIKED]->(post) } AS like_exists
        """
        result = await tx.run(lock_query, post_id=post_id, user_id=user_id)
        status = await result.single()
        if status is None:
            raise RecordNotFoundError("User or post not found")
        if status["like_exists"]:
            raise UniqueViolationError("You have already liked this post")

        query = """
        MATCH (user:User {user_id: $user_id})
        MATCH (author:User)-[:AUTHORED]->(post:Post {post_id: $post_id})
        CREATE (user)-[:LIKED {created_at: $current_time}]->(post)
        SET post.like_count = coalesce(post.like_count, 0) + 1
        RETURN post, author
        """
        result = await tx.run(
            query, user_id=user_id, post_id=post_id, current_time=datetime.now(UTC)
        )
        record = await result.single()
        return _to_post(record["post"], record["author"])

    async def unlike_post(self, user_id: int, post_id: int) -> Post:
        return await self._write(self._remove_post_like, user_id, post_id)

    async def _remove_post_like(
        self, tx: AsyncManagedTransaction, user_id: int, post_id: int
    ) -> Post:
        lock_query = """
        MATCH (post:Post {post_id: $post_id})
        SET post._lock = true
        REMOVE post._lock
        RETURN count(post) AS found
        """
        result = await tx.run(lock_query, post_id=post_id)
        status = await result.single()
        if not status["found"]:
            raise RecordNotFoundError("Post not found")

        query = """
        MATCH (user:User {user_id: $user_id})-[like:LIKED]->(post:Post {post_id: $post_id})
        MATCH (author:User)-[:AUTHORED]->(post)
        DELETE like
        SET post.like_count = post.like_count - 1
        RETURN post, author
        """
        result = await tx.run(query, user_id=user_id, post_id=post_id)
        if record := await result.single():
            return _to_post(record["post"], record["author"])
        raise RecordNotFoundError("You have not liked this post")
