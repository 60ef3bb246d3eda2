"""Request/response schemas for auth and user endpoints."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from blog_api.core.security import EMAIL_MAX_LEN, PASSWORD_MAX_LEN, PASSWORD_MIN_LEN
from blog_api.models import UserRole


class RegisterRequest(BaseModel):
    """Self-registration. role=admin requires an allow-listed email."""

    email: EmailStr = Field(..., max_length=EMAIL_MAX_LEN, description="Email address")
    password: str = Field(
        ..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN, description="Password"
    )
    role: UserRole = Field(default=UserRole.USER, description="Requested role")


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: EmailStr = Field(..., max_length=EMAIL_MAX_LEN, description="Email address")
    password: str = Field(
        ..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN, description="Password"
    )


class UserPublic(BaseModel):
    """User fields safe to return to clients (no password, no tokens)."""

    model_config = ConfigDict(from_attributes=True)

    username: str
    email: str
    role: UserRole


class AccessTokenResponse(BaseModel):
    """Body of POST /auth/refresh-token."""

    model_config = ConfigDict(populate_by_name=True)

    access_token: str = Field(..., alias="accessToken", description="JWT access token")


class AuthResponse(AccessTokenResponse):
    """Body of register and login. The refresh token travels only in the cookie."""

    user: UserPublic


class CurrentUserResponse(BaseModel):
    user: UserPublic


class UsersListResponse(BaseModel):
    """Response for GET /user (admin only)."""

    limit: int
    offset: int
    total: int
    users: list[UserPublic]


class ErrorResponse(BaseModel):
    """Uniform error body."""

    code: str
    message: str
    error: str | None = None
