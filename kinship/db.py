import logging

from neo4j import AsyncDriver, AsyncGraphDatabase

from kinship.config import Settings

logger = logging.getLogger(__name__)

CONSTRAINTS = (
    "CREATE CONSTRAINT user_id_unique IF NOT EXISTS "
    "FOR (user:User) REQUIRE user.user_id IS UNIQUE",
    "CREATE CONSTRAINT user_email_unique IF NOT EXISTS "
    "FOR (user:User) REQUIRE user.email IS UNIQUE",
    "CREATE CONSTRAINT user_username_unique IF NOT EXISTS "
    "FOR (user:User) REQUIRE user.username IS UNIQUE",
    "CREATE CONSTRAINT post_id_unique IF NOT EXISTS "
    "FOR (post:Post) REQUIRE post.post_id IS UNIQUE",
    "CREATE CONSTRAINT comment_id_unique IF NOT EXISTS "
    "FOR (comment:Comment) REQUIRE comment.comment_id IS UNIQUE",
    "CREATE CONSTRAINT sequence_name_unique IF NOT EXISTS "
    "FOR (seq:Sequence) REQUIRE seq.name IS UNIQUE",
)


class DatabaseManager:
    """Manager for the Neo4j driver.

    Owns the lifecycle of one async driver per process. Built from the
    process settings at startup and closed on shutdown.

    Attributes:
        _driver: The Neo4j driver instance, created lazily
        _uri: URI of the Neo4j database
        _auth: Tuple of username and password for authentication
        _database: Name of the Neo4j database to connect to
        _pool_size: Maximum number of pooled connections
    """

    def __init__(self, settings: Settings) -> None:
        self._driver: AsyncDriver | None = None
        self._uri: str = settings.neo4j_uri
        self._auth: tuple[str, str] = (settings.neo4j_user, settings.neo4j_password)
        self._database: str = settings.neo4j_database
        self._pool_size: int = settings.neo4j_max_connection_pool_size

    @property
    def driver(self) -> AsyncDriver:
        """Get or create the Neo4j driver instance.

        Returns:
            The Neo4j driver instance that can be used for database operations
        """
        if not self._driver:
            self._driver = AsyncGraphDatabase.driver(
                self._uri,
                auth=self._auth,
                max_connection_pool_size=self._pool_size,
                connection_timeout=30,  # Seconds
            )
        return self._driver

    @property
    def database(self) -> str:
        return self._database

    async def verify_connectivity(self) -> None:
        """Verify the database is reachable with the configured credentials.

        Raises:
            neo4j.exceptions.ServiceUnavailable: If database is not reachable
            neo4j.exceptions.AuthError: If credentials are invalid
        """
        await self.driver.verify_connectivity()
        logger.info("Connected to Neo4j at %s", self._uri)

    async def ensure_constraints(self) -> None:
        """Create the uniqueness constraints the record store relies on."""
        async with self.driver.session(database=self._database) as session:
            for statement in CONSTRAINTS:
                result = await session.run(statement)
                await result.consume()
        logger.info("Ensured %d uniqueness constraints", len(CONSTRAINTS))

    async def close(self) -> None:
        """Close the database connection.

        If no connection exists, this is a no-op.
        """
        if self._driver:
            await self._driver.close()
            self._driver = None
