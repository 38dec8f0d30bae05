import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from kinship.api import posts, profiles, users
from kinship.config import Settings
from kinship.db import DatabaseManager
from kinship.errors import KinshipError, UnauthorizedError
from kinship.log import configure_logging
from kinship.schemas.responses import HealthCheckResponseSchema
from kinship.services.auth import Authenticator
from kinship.services.comment import CommentService
from kinship.services.credentials import CredentialStore
from kinship.services.guard import MutationGuard
from kinship.services.post import PostService
from kinship.services.profile import ProfileService
from kinship.services.relationship import RelationshipResolver
from kinship.services.user import UserService
from kinship.services.visibility import VisibilityProjector
from kinship.store.base import RecordStore, StoreError
from kinship.store.graph import Neo4jRecordStore

logger = logging.getLogger(__name__)


def install_services(
    app: FastAPI,
    settings: Settings,
    store: RecordStore,
    credentials: CredentialStore | None = None,
) -> None:
    """Wire the services into the application state.

    Args:
        app: The application whose state receives the services
        settings: Process configuration
        store: Record store every service reads and writes
        credentials: Password hashing, the default argon2 parameters if None
    """
    resolver = RelationshipResolver(store)
    projector = VisibilityProjector(resolver, settings.timezone)
    guard = MutationGuard(store, resolver)
    authenticator = Authenticator(settings)

    app.state.settings = settings
    app.state.store = store
    app.state.authenticator = authenticator
    app.state.user_service = UserService(
        store, credentials or CredentialStore(), authenticator, settings.timezone
    )
    app.state.post_service = PostService(store, guard, projector)
    app.state.comment_service = CommentService(store, guard, projector)
    app.state.profile_service = ProfileService(store, guard, projector)


def create_app(
    settings: Settings | None = None,
    store: RecordStore | None = None,
    credentials: CredentialStore | None = None,
) -> FastAPI:
    """Build the application.

    Settings are read from the environment and a Neo4j store is opened at
    startup unless they are supplied.

    Args:
        settings: Process configuration
        store: Record store to use instead of Neo4j
        credentials: Password hashing to use instead of the default

    Returns:
        The configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        this_settings = settings or Settings()
        configure_logging(this_settings.log_level)

        db_manager = None
        this_store = store
        if this_store is None:
            db_manager = DatabaseManager(this_settings)
            await db_manager.verify_connectivity()
            await db_manager.ensure_constraints()
            this_store = Neo4jRecordStore(db_manager)

        install_services(app, this_settings, this_store, credentials)
        logger.info("Started with UTC offset %+d", this_settings.tz_east_offset_in_hours)
        yield
        await this_store.close()
        if db_manager is not None:
            await db_manager.close()

    app = FastAPI(lifespan=lifespan)

    @app.exception_handler(KinshipError)
    async def handle_kinship_error(request: Request, exc: KinshipError) -> JSONResponse:
        if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(
                "%s %s failed: %s",
                request.method,
                request.url.path,
                exc.message,
                exc_info=exc,
            )
        else:
            logger.warning(
                "%s %s rejected (%s): %s",
                request.method,
                request.url.path,
                exc.kind,
                exc.message,
            )
        headers = (
            {"WWW-Authenticate": "Bearer"}
            if isinstance(exc, UnauthorizedError)
            else None
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": {"kind": exc.kind, "message": exc.message}},
            headers=headers,
        )

    @app.exception_handler(StoreError)
    async def handle_store_error(request: Request, exc: StoreError) -> JSONResponse:
        logger.error(
            "%s %s failed in the record store",
            request.method,
            request.url.path,
            exc_info=exc,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": {"kind": "internal_error", "message": "Internal error"}},
        )

    @app.get("/api/health", response_model=HealthCheckResponseSchema)
    async def health_check() -> HealthCheckResponseSchema:
        return HealthCheckResponseSchema(success=True)

    app.include_router(users.router, prefix="/api")
    app.include_router(profiles.router, prefix="/api")
    app.include_router(posts.router, prefix="/api")
    return app


app = create_app()
