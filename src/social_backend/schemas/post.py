"""Post, comment and like Pydantic schemas."""

from pydantic import Field

from .common import ApiModel


class PostCreate(ApiModel):
    """Schema for creating a new post."""

    text: str | None = Field(None, description="Post body, at most 5000 characters")


class CommentCreate(ApiModel):
    """Schema for commenting on a post."""

    text: str | None = Field(None, description="Comment body, at most 1000 characters")


class CommentOut(ApiModel):
    id: str
    username: str
    profile_image: str | None
    text: str
    timestamp: str
    relative_timestamp: str | None
    likes: int = 0
    liked_by_current_user: bool = False


class PostOut(ApiModel):
    """A feed entry with its like summary and comments oldest-first."""

    id: str
    username: str
    profile_image: str | None
    timestamp: str
    relative_timestamp: str | None
    text: str
    likes: int = 0
    liked_by_current_user: bool = False
    comments: list[CommentOut] = Field(default_factory=list)


class LikeToggleOut(ApiModel):
    """Outcome of a like toggle; ``likes`` is recounted after the change."""

    liked: bool
    likes: int
