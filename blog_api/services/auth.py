"""Registration, login, refresh-token exchange and logout."""

import logging
import secrets
import string
from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError

from blog_api.core.errors import (
    AuthenticationError,
    AuthorizationError,
    DuplicateEmailError,
    ServerError,
)
from blog_api.core.security import TokenCodec, TokenStatus, token_fingerprint
from blog_api.models import User, UserRole
from blog_api.services.credential_store import CredentialStore, normalize_email
from blog_api.services.token_store import TokenStore

USERNAME_PREFIX = "user-"
USERNAME_RANDOM_LEN = 10
USERNAME_MAX_ATTEMPTS = 5
_USERNAME_ALPHABET = string.ascii_lowercase + string.digits

INVALID_REFRESH_TOKEN = "Invalid refresh token"
EXPIRED_REFRESH_TOKEN = "Refresh token has expired, please login again"
INVALID_CREDENTIALS = "Invalid email or password"


def generate_username() -> str:
    """Random username such as user-k3j9x0a1bz."""
    suffix = "".join(secrets.choice(_USERNAME_ALPHABET) for _ in range(USERNAME_RANDOM_LEN))
    return USERNAME_PREFIX + suffix


@dataclass(frozen=True)
class AuthResult:
    """A user plus the token pair issued for them."""

    user: User
    access_token: str
    refresh_token: str


class AuthService:
    """
    Each operation is one request-scoped transition: it either completes or
    raises an ApiError. Nothing is retried.
    """

    def __init__(
        self,
        credentials: CredentialStore,
        tokens: TokenStore,
        codec: TokenCodec,
        *,
        admin_emails: Iterable[str] = (),
        logger: logging.Logger | None = None,
    ) -> None:
        self._credentials = credentials
        self._tokens = tokens
        self._codec = codec
        self._admin_emails = frozenset(normalize_email(e) for e in admin_emails)
        self._logger = logger or logging.getLogger(__name__)

    def register(
        self, email: str, password: str, role: UserRole = UserRole.USER
    ) -> AuthResult:
        """
        Create a user and issue its first token pair.

        Admin registration is refused before anything is written unless the
        email is on the admin allow-list.
        """
        email = normalize_email(email)
        role = UserRole(role)
        if role is UserRole.ADMIN and email not in self._admin_emails:
            self._logger.warning(
                "User with email %s tried to register as an admin but is not in the whitelist.",
                email,
            )
            raise AuthorizationError("You cannot register as an admin")

        try:
            username = self._unique_username()
            user = self._credentials.create(
                username=username, email=email, password=password, role=role
            )
        except DuplicateEmailError:
            self._logger.warning("Registration rejected: email already in use")
            raise
        except SQLAlchemyError as e:
            self._logger.error("Error during user registration: %s", e)
            raise ServerError(detail=e) from e

        result = self._issue_pair(user)
        self._logger.info(
            "User registered successfully",
            extra={"username": user.username, "email": user.email, "role": user.role},
        )
        return result

    def login(self, email: str, password: str) -> AuthResult:
        """Check credentials and issue a new token pair (one per login event)."""
        try:
            user = self._credentials.find_by_email(email)
        except SQLAlchemyError as e:
            self._logger.error("Error during login: %s", e)
            raise ServerError(detail=e) from e

        if user is None or not self._credentials.verify_password(user, password):
            raise AuthenticationError(INVALID_CREDENTIALS)

        result = self._issue_pair(user)
        self._logger.info("User logged in", extra={"userId": user.id})
        return result

    def refresh_access_token(self, refresh_token: str | None) -> str:
        """
        Exchange a stored refresh token for a new access token.

        The store is checked before the signature, so a revoked token is
        rejected the same way whether or not it would have verified. The
        refresh token itself is not rotated.
        """
        try:
            known = self._tokens.exists(refresh_token)
        except SQLAlchemyError as e:
            self._logger.error("Error during refresh token: %s", e)
            raise ServerError(detail=e) from e
        if not known:
            raise AuthenticationError(INVALID_REFRESH_TOKEN)

        verification = self._codec.verify_refresh_token(refresh_token)
        if verification.status is TokenStatus.EXPIRED:
            raise AuthenticationError(EXPIRED_REFRESH_TOKEN)
        if verification.claim is None:
            raise AuthenticationError(INVALID_REFRESH_TOKEN)

        return self._codec.issue_access_token(verification.claim.user_id)

    def logout(self, refresh_token: str | None) -> bool:
        """Revoke a refresh token by deleting its record. Returns whether one existed."""
        if not refresh_token:
            return False
        try:
            deleted = self._tokens.delete(refresh_token)
        except SQLAlchemyError as e:
            self._logger.error("Error during logout: %s", e)
            raise ServerError(detail=e) from e
        self._logger.info(
            "User logged out",
            extra={"token_fingerprint": token_fingerprint(refresh_token), "revoked": deleted},
        )
        return deleted

    def _unique_username(self) -> str:
        for _ in range(USERNAME_MAX_ATTEMPTS):
            username = generate_username()
            if not self._credentials.username_exists(username):
                return username
        raise ServerError(detail="could not generate a unique username")

    def _issue_pair(self, user: User) -> AuthResult:
        access_token = self._codec.issue_access_token(user.id)
        refresh_token = self._codec.issue_refresh_token(user.id)
        try:
            self._tokens.record_issuance(refresh_token, user.id)
        except SQLAlchemyError as e:
            self._logger.error("Error storing refresh token: %s", e)
            raise ServerError(detail=e) from e
        self._logger.info(
            "Refresh token created for user",
            extra={"userId": user.id, "token_fingerprint": token_fingerprint(refresh_token)},
        )
        return AuthResult(user=user, access_token=access_token, refresh_token=refresh_token)
