"""Pydantic request/response schemas."""

from blog_api.schemas.auth import (
    AccessTokenResponse,
    AuthResponse,
    CurrentUserResponse,
    ErrorResponse,
    LoginRequest,
    RegisterRequest,
    UserPublic,
    UsersListResponse,
)
from blog_api.schemas.health import HealthResponse

__all__ = [
    "AccessTokenResponse",
    "AuthResponse",
    "CurrentUserResponse",
    "ErrorResponse",
    "HealthResponse",
    "LoginRequest",
    "RegisterRequest",
    "UserPublic",
    "UsersListResponse",
]
