"""
API request and response schemas.
"""

from .auth import (
    CurrentSessionResponse,
    InitFirstItemRequest,
    InitStatusResponse,
    LoginRequest,
    SessionInfo,
    SessionTokenResponse,
)
from .content import (
    OrganizationCreateRequest,
    OrganizationResponse,
    PostCreateRequest,
    PostResponse,
    TagCreateRequest,
    TagResponse,
    UserCreateRequest,
    UserResponse,
)

__all__ = [
    "LoginRequest",
    "InitFirstItemRequest",
    "InitStatusResponse",
    "SessionInfo",
    "SessionTokenResponse",
    "CurrentSessionResponse",
    "UserCreateRequest",
    "UserResponse",
    "PostCreateRequest",
    "PostResponse",
    "TagCreateRequest",
    "TagResponse",
    "OrganizationCreateRequest",
    "OrganizationResponse",
]
