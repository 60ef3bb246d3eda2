"""SQLAlchemy ORM models."""

from blog_api.models.base import Base
from blog_api.models.token import RefreshToken
from blog_api.models.user import User, UserRole

__all__ = ["Base", "RefreshToken", "User", "UserRole"]
