from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for payloads rendered with camelCase field names."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Profile(CamelModel):
    """A user as seen by a particular viewer.

    Attributes:
        username: The user's username
        intro: Short self-introduction if set
        avatar: Avatar URL if set
        followed: The user follows the viewer
        following: The viewer follows the user
        blocked: The viewer is blocked by the user
        blocking: The viewer blocks the user
    """

    username: str
    intro: str | None = None
    avatar: str | None = None
    followed: bool = False
    following: bool = False
    blocked: bool = False
    blocking: bool = False


class PostView(CamelModel):
    """A post as seen by a particular viewer.

    Attributes:
        post_id: Unique identifier for the post
        title: Title of the post
        description: Short description shown in listings
        content: Body of the post
        created_at: Creation time in the configured offset
        updated_at: Last change time in the configured offset
        liked: The viewer likes the post
        liked_count: Number of likes on the post
        author: Profile of the author relative to the viewer
    """

    post_id: int
    title: str
    description: str
    content: str
    created_at: datetime
    updated_at: datetime
    liked: bool = False
    liked_count: int = 0
    author: Profile


class CommentView(CamelModel):
    """A comment as seen by a particular viewer.

    Attributes:
        comment_id: Unique identifier for the comment
        content: The text content of the comment
        created_at: Creation time in the configured offset
        user: Profile of the commenter relative to the viewer
    """

    comment_id: int
    content: str
    created_at: datetime
    user: Profile


class UserView(CamelModel):
    """The authenticated user's own account, with a fresh token."""

    user_id: int
    email: str
    username: str
    intro: str | None = None
    avatar: str | None = None
    created_at: datetime
    token: str | None = None


class UserResponse(CamelModel):
    user: UserView


class ProfileResponse(CamelModel):
    profile: Profile


class PostResponse(CamelModel):
    post: PostView


class PostsResponse(CamelModel):
    """A page of posts and the total number matching the listing filter."""

    posts: list[PostView]
    post_count: int = Field(ge=0)


class CommentResponse(CamelModel):
    comment: CommentView


class CommentsResponse(CamelModel):
    comments: list[CommentView]


class MessageResponse(CamelModel):
    message: str


class HealthCheckResponseSchema(CamelModel):
    success: bool
