from typing import Annotated

from fastapi import Depends, Request

from kinship.services.auth import Authenticator
from kinship.services.comment import CommentService
from kinship.services.post import PostService
from kinship.services.profile import ProfileService
from kinship.services.user import UserService


def get_authenticator(request: Request) -> Authenticator:
    return request.app.state.authenticator


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


def get_post_service(request: Request) -> PostService:
    return request.app.state.post_service


def get_comment_service(request: Request) -> CommentService:
    return request.app.state.comment_service


def get_profile_service(request: Request) -> ProfileService:
    return request.app.state.profile_service


def get_current_user_id(
    request: Request,
    authenticator: Annotated[Authenticator, Depends(get_authenticator)],
) -> int:
    """Dependency for getting the ID of the authenticated caller.

    Use this to protect routes that require authentication.

    Args:
        request: The FastAPI request object
        authenticator: Token verifier from the application state

    Returns:
        ID of the authenticated user

    Raises:
        UnauthorizedError: If the credential is missing or invalid
    """
    return authenticator.authenticate(request.headers)


def get_optional_user_id(
    request: Request,
    authenticator: Annotated[Authenticator, Depends(get_authenticator)],
) -> int | None:
    """Dependency for routes that anonymous callers may use.

    Returns None when there is no Authorization header. An invalid
    header is still rejected.
    """
    return authenticator.optional_identity(request.headers)


CurrentUserId = Annotated[int, Depends(get_current_user_id)]
OptionalUserId = Annotated[int | None, Depends(get_optional_user_id)]
