from enum import Enum

from pydantic import BaseModel, ConfigDict


class EdgeKind(str, Enum):
    """Kinds of directed relationship edges.

    Attributes:
        FOLLOW: A user follows another user
        BLOCK: A user blocks another user
        LIKE: A user likes a post
    """

    FOLLOW = "follow"
    BLOCK = "block"
    LIKE = "like"


class RelationshipView(BaseModel):
    """Relationship state between an observer and a subject user.

    Never persisted; recomputed on every read.

    Attributes:
        followed: The subject follows the observer
        following: The observer follows the subject
        blocked: The observer is blocked by the subject
        blocking: The observer blocks the subject
    """

    model_config = ConfigDict(frozen=True)

    followed: bool = False
    following: bool = False
    blocked: bool = False
    blocking: bool = False


NEUTRAL_VIEW = RelationshipView()
