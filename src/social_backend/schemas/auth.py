"""Authentication-related Pydantic schemas."""

from pydantic import Field

from .common import ApiModel


class CredentialsRequest(ApiModel):
    """Username/password pair submitted to register or login.

    Fields are optional here so that missing values surface as the
    ``validation_error`` envelope with a specific message.
    """

    username: str | None = Field(None, examples=["newuser"])
    password: str | None = Field(None, examples=["securepassword"])


class PublicUser(ApiModel):
    """Identity fields safe to expose to clients."""

    id: str
    username: str


class AuthResponse(ApiModel):
    """Token plus the authenticated identity."""

    token: str = Field(..., description="Bearer token valid for seven days")
    user: PublicUser
