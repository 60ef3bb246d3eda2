"""
Request dependencies: authentication, role authorization and service wiring.

Routes declare `Depends(authorize(...))`; authorize itself depends on
authenticate, so the role check cannot run without a verified identity.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from blog_api.core.config import Settings
from blog_api.core.database import get_db
from blog_api.core.errors import AuthenticationError, AuthorizationError, ServerError
from blog_api.core.security import TokenCodec, TokenStatus
from blog_api.models import User, UserRole
from blog_api.services.auth import AuthService
from blog_api.services.credential_store import CredentialStore
from blog_api.services.token_store import TokenStore

logger = logging.getLogger(__name__)
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthenticatedUser:
    """Identity resolved from a verified access token."""

    user_id: int


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_codec(request: Request) -> TokenCodec:
    return request.app.state.token_codec


def get_credential_store(db: Annotated[Session, Depends(get_db)]) -> CredentialStore:
    return CredentialStore(db)


def get_token_store(db: Annotated[Session, Depends(get_db)]) -> TokenStore:
    return TokenStore(db)


def get_auth_service(
    credentials: Annotated[CredentialStore, Depends(get_credential_store)],
    tokens: Annotated[TokenStore, Depends(get_token_store)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AuthService:
    return AuthService(
        credentials,
        tokens,
        codec,
        admin_emails=settings.WHITELIST_ADMINS_MAIL,
    )


def authenticate(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
) -> AuthenticatedUser:
    """Require `Authorization: Bearer <access token>`. No database access."""
    if credentials is None:
        raise AuthenticationError("Access denied, no token provided")
    try:
        verification = codec.verify_access_token(credentials.credentials)
    except Exception as e:
        logger.error("Error during authentication", exc_info=True)
        raise ServerError(detail=e) from e

    if verification.status is TokenStatus.EXPIRED:
        raise AuthenticationError("Access token expired, request a new one with refresh token")
    if verification.claim is None:
        raise AuthenticationError("Access token invalid")
    return AuthenticatedUser(user_id=verification.claim.user_id)


def authorize(*roles: UserRole | str) -> Callable[..., User]:
    """Build a dependency admitting only users whose role is in `roles`."""
    allowed = frozenset(UserRole(r) for r in roles)

    def require_role(
        identity: Annotated[AuthenticatedUser, Depends(authenticate)],
        credentials: Annotated[CredentialStore, Depends(get_credential_store)],
    ) -> User:
        try:
            user = credentials.find_by_id(identity.user_id)
        except SQLAlchemyError as e:
            logger.error("Error while authorizing user: %s", e)
            raise ServerError(detail=e) from e
        if user is None:
            raise AuthenticationError("User not found")
        if UserRole(user.role) not in allowed:
            raise AuthorizationError("Access denied, insufficient permissions")
        return user

    return require_role
