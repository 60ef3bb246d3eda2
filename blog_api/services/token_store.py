"""Persisted refresh-token records used for server-side revocation."""

import logging

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from blog_api.models import RefreshToken


class TokenStore:
    """
    A refresh token is honored only while its record exists here.

    Deleting the record revokes the token even if its signature is still
    valid. Expired records are left in place.
    """

    def __init__(self, session: Session, *, logger: logging.Logger | None = None) -> None:
        self._session = session
        self._logger = logger or logging.getLogger(__name__)

    def record_issuance(self, token: str, user_id: int) -> RefreshToken:
        record = RefreshToken(token=token, user_id=user_id)
        self._session.add(record)
        self._session.commit()
        return record

    def exists(self, token: str | None) -> bool:
        if not token:
            return False
        found = self._session.scalar(
            select(RefreshToken.id).where(RefreshToken.token == token).limit(1)
        )
        return found is not None

    def delete(self, token: str) -> bool:
        """Remove the record for `token`. Returns False if there was none."""
        result = self._session.execute(
            delete(RefreshToken).where(RefreshToken.token == token)
        )
        self._session.commit()
        deleted = (result.rowcount or 0) > 0
        if deleted:
            self._logger.info("Refresh token record deleted", extra={"deleted": result.rowcount})
        return deleted
