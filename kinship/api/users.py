from typing import Annotated

from fastapi import APIRouter, Depends, status

from kinship.dependencies import CurrentUserId, get_user_service
from kinship.schemas.requests import CreateUserBody, LoginUserBody, UpdateUserBody
from kinship.schemas.responses import MessageResponse, UserResponse
from kinship.services.user import UserService

router = APIRouter(prefix="/users", tags=["users"])

UserServiceDep = Annotated[UserService, Depends(get_user_service)]


@router.post(
    "/create", response_model=UserResponse, status_code=status.HTTP_201_CREATED
)
async def create_user(body: CreateUserBody, users: UserServiceDep) -> UserResponse:
    """Register a new account.

    Args:
        body: Email, username and password of the new account
        users: The user service

    Returns:
        The new account with an access token
    """
    return UserResponse(user=await users.register(body.user))


@router.post("", response_model=UserResponse)
async def login_user(body: LoginUserBody, users: UserServiceDep) -> UserResponse:
    """Log in with email and password.

    Args:
        body: Email and password
        users: The user service

    Returns:
        The account with an access token
    """
    return UserResponse(user=await users.login(body.user))


@router.get("", response_model=UserResponse)
async def get_current_user(
    current_user_id: CurrentUserId, users: UserServiceDep
) -> UserResponse:
    return UserResponse(user=await users.current(current_user_id))


@router.put("", response_model=UserResponse)
async def update_user(
    body: UpdateUserBody, current_user_id: CurrentUserId, users: UserServiceDep
) -> UserResponse:
    """Change the caller's account.

    Args:
        body: Fields to change; omitted fields keep their value
        current_user_id: The authenticated user
        users: The user service

    Returns:
        The updated account with a fresh access token
    """
    return UserResponse(user=await users.update(current_user_id, body.user))


@router.delete("", response_model=MessageResponse)
async def delete_user(
    current_user_id: CurrentUserId, users: UserServiceDep
) -> MessageResponse:
    await users.delete(current_user_id)
    return MessageResponse(message="User deleted")
