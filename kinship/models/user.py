import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]{3,20}$")


def _check_username(v: str | None) -> str | None:
    if v is not None and not USERNAME_PATTERN.match(v):
        raise ValueError("Username must be 3-20 alphanumeric characters")
    return v


class User(BaseModel):
    """User model representing a user in the system.

    The password hash is kept by the record store and is never part of
    this model.

    Attributes:
        user_id: Unique identifier for the user
        email: Unique email address
        username: Unique username
        intro: Short self-introduction if set
        avatar: Avatar URL if set
        created_at: When the account was created
    """

    model_config = ConfigDict(frozen=True)

    user_id: int = Field(gt=0)
    email: EmailStr
    username: str
    intro: str | None = None
    avatar: str | None = None
    created_at: datetime


class UserCreate(BaseModel):
    """Fields accepted when registering a user.

    Attributes:
        email: Email address to register
        username: Desired username
        password: Plaintext password, hashed before it is stored
    """

    model_config = ConfigDict(frozen=True)

    email: EmailStr
    username: str
    password: str = Field(min_length=8)

    @field_validator("username")
    def validate_username(cls, v: str) -> str:
        return _check_username(v)


class UserUpdate(BaseModel):
    """Fields a user may change on their own account.

    Fields left as None keep their current value.
    """

    model_config = ConfigDict(frozen=True)

    email: EmailStr | None = None
    username: str | None = None
    intro: str | None = None
    avatar: str | None = None
    password: str | None = Field(default=None, min_length=8)

    @field_validator("username")
    def validate_username(cls, v: str | None) -> str | None:
        return _check_username(v)


class UserLogin(BaseModel):
    model_config = ConfigDict(frozen=True)

    email: EmailStr
    password: str
