"""
Authentication request and response schemas.
"""

from typing import Any, Optional

from pydantic import BaseModel, EmailStr, Field


class LoginRequest(BaseModel):
    """Sign-in with identity and secret."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class InitFirstItemRequest(BaseModel):
    """Create the very first user while the User list is empty."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)


class SessionInfo(BaseModel):
    """The authenticated item and its session data."""

    item_id: str
    list_key: str
    data: dict[str, Any]


class SessionTokenResponse(BaseModel):
    """Returned after a successful sign-in."""

    session_token: str
    token_type: str = "bearer"
    expires_in: int  # Seconds until the session expires
    session: SessionInfo


class CurrentSessionResponse(BaseModel):
    session: Optional[SessionInfo] = None


class InitStatusResponse(BaseModel):
    """Whether the first user still has to be created."""

    needs_init: bool
    fields: list[str]
