from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from kinship.models.user import User


class PostCreate(BaseModel):
    """Model for creating a new post.

    Attributes:
        title: Title of the post
        description: Short description shown in listings
        content: Body of the post
    """

    model_config = ConfigDict(frozen=True)

    title: str = Field(min_length=1)
    description: str
    content: str


class PostUpdate(BaseModel):
    """Model for updating an existing post.

    Fields left as None keep their current value.
    """

    model_config = ConfigDict(frozen=True)

    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    content: str | None = None

    def changes(self) -> dict[str, str]:
        return self.model_dump(exclude_none=True)


class Post(BaseModel):
    """Model representing a stored post together with its author.

    Attributes:
        post_id: Unique identifier for the post
        author_id: ID of the user who wrote the post
        title: Title of the post
        description: Short description shown in listings
        content: Body of the post
        like_count: Number of Like edges targeting the post
        created_at: When the post was created
        updated_at: When the post was last changed
        author: The author's user record
    """

    model_config = ConfigDict(frozen=True)

    post_id: int = Field(gt=0)
    author_id: int = Field(gt=0)
    title: str
    description: str
    content: str
    like_count: int = Field(default=0, ge=0)
    created_at: datetime
    updated_at: datetime
    author: User


class PostFilter(BaseModel):
    """Conjunctive filter for post listings.

    Attributes:
        author: Only posts written by this username
        liked_by: Only posts liked by this username
        author_ids: Only posts whose author is in this list
    """

    model_config = ConfigDict(frozen=True)

    author: str | None = None
    liked_by: str | None = None
    author_ids: list[int] | None = None
