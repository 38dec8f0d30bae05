from typing import Annotated

from fastapi import APIRouter, Depends

from kinship.dependencies import CurrentUserId, OptionalUserId, get_profile_service
from kinship.schemas.responses import ProfileResponse
from kinship.services.profile import ProfileService

router = APIRouter(prefix="/profiles", tags=["profiles"])

ProfileServiceDep = Annotated[ProfileService, Depends(get_profile_service)]


@router.get("/{username}", response_model=ProfileResponse)
async def get_profile(
    username: str, viewer_id: OptionalUserId, profiles: ProfileServiceDep
) -> ProfileResponse:
    """Get a user's profile as seen by the caller.

    Args:
        username: Username of the profile to fetch
        viewer_id: The authenticated user, or None for anonymous callers
        profiles: The profile service

    Returns:
        The profile with the caller's relationship flags
    """
    return ProfileResponse(profile=await profiles.get_profile(username, viewer_id))


@router.post("/{username}/follow", response_model=ProfileResponse)
async def follow_profile(
    username: str, current_user_id: CurrentUserId, profiles: ProfileServiceDep
) -> ProfileResponse:
    return ProfileResponse(profile=await profiles.follow(current_user_id, username))


@router.delete("/{username}/follow", response_model=ProfileResponse)
async def unfollow_profile(
    username: str, current_user_id: CurrentUserId, profiles: ProfileServiceDep
) -> ProfileResponse:
    return ProfileResponse(profile=await profiles.unfollow(current_user_id, username))


@router.post("/{username}/block", response_model=ProfileResponse)
async def block_profile(
    username: str, current_user_id: CurrentUserId, profiles: ProfileServiceDep
) -> ProfileResponse:
    """Block a user, removing follows between the caller and them.

    Args:
        username: Username of the user to block
        current_user_id: The authenticated user
        profiles: The profile service

    Returns:
        The blocked user's profile as seen by the caller
    """
    return ProfileResponse(profile=await profiles.block(current_user_id, username))


@router.delete("/{username}/block", response_model=ProfileResponse)
async def unblock_profile(
    username: str, current_user_id: CurrentUserId, profiles: ProfileServiceDep
) -> ProfileResponse:
    return ProfileResponse(profile=await profiles.unblock(current_user_id, username))
