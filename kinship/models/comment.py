from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from kinship.models.user import User


class CommentCreate(BaseModel):
    """Model for creating a new comment.

    Attributes:
        content: The text content of the comment
    """

    model_config = ConfigDict(frozen=True)

    content: str = Field(min_length=1)


class Comment(BaseModel):
    """Model representing a comment on a post.

    Attributes:
        comment_id: Unique identifier for the comment
        post_id: ID of the post being commented on
        user_id: ID of the user who wrote the comment
        content: The text content of the comment
        created_at: When the comment was created
        user: The author's user record
    """

    model_config = ConfigDict(frozen=True)

    comment_id: int = Field(gt=0)
    post_id: int = Field(gt=0)
    user_id: int = Field(gt=0)
    content: str
    created_at: datetime
    user: User
