"""Friend graph Pydantic schemas."""

from typing import Literal

from pydantic import Field

from .common import ApiModel

RequestDirection = Literal["incoming", "outgoing"]


class FriendOut(ApiModel):
    id: str
    username: str
    profile_image: str | None
    status: str | None
    mutual_friends: int = 0


class SuggestionOut(ApiModel):
    id: str
    username: str
    profile_image: str | None
    mutual_friends: int = 0


class FriendRequestOut(ApiModel):
    """A pending request seen from the viewer; ``username`` is the other party."""

    id: str
    username: str
    profile_image: str | None
    mutual_friends: int = 0
    type: RequestDirection
    sent_at: str = Field(..., description="ISO-8601 creation time")
    relative_timestamp: str | None


class FriendRequestCreate(ApiModel):
    username: str | None = Field(None, description="Username of the user to befriend")


class DeclinedRequestOut(ApiModel):
    id: str
    status: Literal["declined"] = "declined"
