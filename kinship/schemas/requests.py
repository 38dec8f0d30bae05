from pydantic import BaseModel, ConfigDict

from kinship.models.comment import CommentCreate
from kinship.models.post import PostCreate, PostUpdate
from kinship.models.user import UserCreate, UserLogin, UserUpdate


class RequestBody(BaseModel):
    model_config = ConfigDict(frozen=True)


class CreateUserBody(RequestBody):
    user: UserCreate


class LoginUserBody(RequestBody):
    user: UserLogin


class UpdateUserBody(RequestBody):
    user: UserUpdate


class CreatePostBody(RequestBody):
    post: PostCreate


class UpdatePostBody(RequestBody):
    post: PostUpdate


class CreateCommentBody(RequestBody):
    comment: CommentCreate
