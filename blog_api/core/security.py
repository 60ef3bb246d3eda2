"""Password hashing and the access/refresh token codec."""

import hashlib
import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any

import bcrypt
import jwt

from blog_api.core.config import Settings

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128
EMAIL_MAX_LEN = 50

ACCESS_SUBJECT = "accessApi"
REFRESH_SUBJECT = "refreshApi"


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def token_fingerprint(token: str) -> str:
    """Short, non-reversible identifier of a token for log lines."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()[:16]


class TokenSecretMissing(RuntimeError):
    """A signing secret is not configured. Raised at startup, never per request."""


class TokenStatus(str, Enum):
    VALID = "valid"
    EXPIRED = "expired"
    INVALID = "invalid"


@dataclass(frozen=True)
class TokenClaim:
    """Decoded payload of a verified token."""

    user_id: int
    subject: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class TokenVerification:
    """Outcome of verifying a token; `claim` is set only when status is VALID."""

    status: TokenStatus
    claim: TokenClaim | None = None

    @property
    def ok(self) -> bool:
        return self.status is TokenStatus.VALID


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TokenCodec:
    """
    Issues and verifies signed, time-bound tokens.

    Access and refresh tokens use separate secrets and a `sub` claim naming
    their use, so neither kind is accepted where the other is expected.
    """

    def __init__(
        self,
        access_secret: str | None,
        refresh_secret: str | None,
        *,
        access_ttl: timedelta,
        refresh_ttl: timedelta,
        algorithm: str = "HS256",
        clock: Callable[[], datetime] = _utcnow,
        logger: logging.Logger | None = None,
    ) -> None:
        if not access_secret:
            raise TokenSecretMissing("JWT access secret is not defined in configuration.")
        if not refresh_secret:
            raise TokenSecretMissing("JWT refresh secret is not defined in configuration.")
        self._access_secret = access_secret
        self._refresh_secret = refresh_secret
        self._access_ttl = access_ttl
        self._refresh_ttl = refresh_ttl
        self._algorithm = algorithm
        self._clock = clock
        self._logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_settings(
        cls, settings: Settings, *, logger: logging.Logger | None = None
    ) -> "TokenCodec":
        access = settings.JWT_ACCESS_SECRET
        refresh = settings.JWT_REFRESH_SECRET
        return cls(
            access.get_secret_value() if access else None,
            refresh.get_secret_value() if refresh else None,
            access_ttl=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
            refresh_ttl=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
            algorithm=settings.JWT_ALGORITHM,
            logger=logger,
        )

    def issue_access_token(self, user_id: int) -> str:
        return self._issue(user_id, ACCESS_SUBJECT, self._access_secret, self._access_ttl)

    def issue_refresh_token(self, user_id: int) -> str:
        return self._issue(user_id, REFRESH_SUBJECT, self._refresh_secret, self._refresh_ttl)

    def verify_access_token(self, token: str) -> TokenVerification:
        return self._verify(token, ACCESS_SUBJECT, self._access_secret)

    def verify_refresh_token(self, token: str) -> TokenVerification:
        return self._verify(token, REFRESH_SUBJECT, self._refresh_secret)

    def _issue(self, user_id: int, subject: str, secret: str, ttl: timedelta) -> str:
        now = self._clock()
        payload: dict[str, Any] = {
            "userId": str(user_id),
            "sub": subject,
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, secret, algorithm=self._algorithm)

    def _verify(self, token: str, subject: str, secret: str) -> TokenVerification:
        """
        Check signature, subject and expiry. Expiry is compared against the
        codec clock: a token is expired once now >= exp.
        """
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self._algorithm],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "require": ["exp", "iat", "sub"],
                },
            )
        except jwt.PyJWTError as e:
            self._logger.debug("Token rejected: %s", e)
            return TokenVerification(TokenStatus.INVALID)

        if payload.get("sub") != subject:
            return TokenVerification(TokenStatus.INVALID)
        try:
            user_id = int(payload["userId"])
            issued_at = datetime.fromtimestamp(int(payload["iat"]), UTC)
            expires_at = datetime.fromtimestamp(int(payload["exp"]), UTC)
        except (KeyError, TypeError, ValueError):
            return TokenVerification(TokenStatus.INVALID)

        if self._clock() >= expires_at:
            return TokenVerification(TokenStatus.EXPIRED)

        return TokenVerification(
            TokenStatus.VALID,
            TokenClaim(
                user_id=user_id,
                subject=subject,
                issued_at=issued_at,
                expires_at=expires_at,
            ),
        )
