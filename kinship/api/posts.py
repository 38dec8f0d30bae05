from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from kinship.dependencies import (
    CurrentUserId,
    OptionalUserId,
    get_comment_service,
    get_post_service,
)
from kinship.schemas.requests import CreateCommentBody, CreatePostBody, UpdatePostBody
from kinship.schemas.responses import (
    CommentResponse,
    CommentsResponse,
    MessageResponse,
    PostResponse,
    PostsResponse,
)
from kinship.services.comment import CommentService
from kinship.services.post import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, PostService

router = APIRouter(prefix="/posts", tags=["posts"])

PostServiceDep = Annotated[PostService, Depends(get_post_service)]
CommentServiceDep = Annotated[CommentService, Depends(get_comment_service)]


@router.get("", response_model=PostsResponse)
async def list_posts(
    viewer_id: OptionalUserId,
    posts: PostServiceDep,
    author: Annotated[str | None, Query()] = None,
    liked_by: Annotated[str | None, Query(alias="likedBy")] = None,
    following: Annotated[bool, Query()] = False,
    limit: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = DEFAULT_PAGE_SIZE,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> PostsResponse:
    """List posts, newest first.

    Args:
        viewer_id: The authenticated user, or None for anonymous callers
        posts: The post service
        author: Only posts written by this username
        liked_by: Only posts liked by this username
        following: Only posts by users the caller follows
        limit: Maximum number of posts to return
        offset: Number of matching posts to skip

    Returns:
        The page of posts and the total number matching the filters
    """
    return await posts.list_posts(
        viewer_id,
        author=author,
        liked_by=liked_by,
        following=following,
        limit=limit,
        offset=offset,
    )


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    body: CreatePostBody, current_user_id: CurrentUserId, posts: PostServiceDep
) -> PostResponse:
    return PostResponse(post=await posts.create_post(current_user_id, body.post))


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: int, viewer_id: OptionalUserId, posts: PostServiceDep
) -> PostResponse:
    return PostResponse(post=await posts.get_post(post_id, viewer_id))


@router.put("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: int,
    body: UpdatePostBody,
    current_user_id: CurrentUserId,
    posts: PostServiceDep,
) -> PostResponse:
    """Change a post written by the caller.

    Args:
        post_id: ID of the post to change
        body: Fields to change; omitted fields keep their value
        current_user_id: The authenticated user
        posts: The post service

    Returns:
        The updated post
    """
    return PostResponse(
        post=await posts.update_post(current_user_id, post_id, body.post)
    )


@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_post(
    post_id: int, current_user_id: CurrentUserId, posts: PostServiceDep
) -> MessageResponse:
    await posts.delete_post(current_user_id, post_id)
    return MessageResponse(message="Post deleted")


@router.post("/{post_id}/like", response_model=PostResponse)
async def like_post(
    post_id: int, current_user_id: CurrentUserId, posts: PostServiceDep
) -> PostResponse:
    return PostResponse(post=await posts.like(current_user_id, post_id))


@router.delete("/{post_id}/like", response_model=PostResponse)
async def unlike_post(
    post_id: int, current_user_id: CurrentUserId, posts: PostServiceDep
) -> PostResponse:
    return PostResponse(post=await posts.unlike(current_user_id, post_id))


@router.get("/{post_id}/comments", response_model=CommentsResponse)
async def list_comments(
    post_id: int, viewer_id: OptionalUserId, comments: CommentServiceDep
) -> CommentsResponse:
    return CommentsResponse(
        comments=await comments.list_comments(post_id, viewer_id)
    )


@router.post(
    "/{post_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    post_id: int,
    body: CreateCommentBody,
    current_user_id: CurrentUserId,
    comments: CommentServiceDep,
) -> CommentResponse:
    """Comment on a post.

    Args:
        post_id: ID of the post to comment on
        body: The comment content
        current_user_id: The authenticated user
        comments: The comment service

    Returns:
        The created comment
    """
    return CommentResponse(
        comment=await comments.create_comment(current_user_id, post_id, body.comment)
    )


@router.delete("/{post_id}/comments/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    post_id: int,
    comment_id: int,
    current_user_id: CurrentUserId,
    comments: CommentServiceDep,
) -> MessageResponse:
    await comments.delete_comment(current_user_id, post_id, comment_id)
    return MessageResponse(message="Comment deleted")
