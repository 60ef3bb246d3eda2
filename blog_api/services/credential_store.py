"""Persisted user records: registration, lookup and password checks."""

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from blog_api.core.errors import DuplicateEmailError
from blog_api.core.security import hash_password, verify_password
from blog_api.models import User, UserRole


def normalize_email(email: str) -> str:
    return email.strip().lower()


class CredentialStore:
    """User table access. Every operation is a single-row read or write."""

    def __init__(self, session: Session, *, logger: logging.Logger | None = None) -> None:
        self._session = session
        self._logger = logger or logging.getLogger(__name__)

    def create(
        self,
        *,
        username: str,
        email: str,
        password: str,
        role: UserRole = UserRole.USER,
    ) -> User:
        """
        Insert a user with a bcrypt-hashed password.

        Raises DuplicateEmailError if the email is taken, including when a
        concurrent insert wins the race at the unique index.
        """
        email = normalize_email(email)
        if self.find_by_email(email) is not None:
            raise DuplicateEmailError(f"Email {email} is already in use")

        user = User(
            username=username,
            email=email,
            password_hash=hash_password(password),
            role=UserRole(role).value,
        )
        self._session.add(user)
        try:
            self._session.commit()
        except IntegrityError:
            self._session.rollback()
            if self.find_by_email(email) is not None:
                raise DuplicateEmailError(f"Email {email} is already in use") from None
            raise
        self._session.refresh(user)
        return user

    def find_by_email(self, email: str) -> User | None:
        return self._session.scalar(
            select(User).where(User.email == normalize_email(email))
        )

    def find_by_id(self, user_id: int) -> User | None:
        return self._session.get(User, user_id)

    def username_exists(self, username: str) -> bool:
        return (
            self._session.scalar(select(User.id).where(User.username == username))
            is not None
        )

    def verify_password(self, user: User, plain_password: str) -> bool:
        return verify_password(plain_password, user.password_hash)

    def list_users(self, *, limit: int, offset: int) -> list[User]:
        stmt = select(User).order_by(User.id).limit(limit).offset(offset)
        return list(self._session.scalars(stmt))

    def count_users(self) -> int:
        return self._session.scalar(select(func.count()).select_from(User)) or 0
