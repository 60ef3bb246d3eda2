"""ORM model for issued refresh tokens. A row must exist for the token to be honored."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Text, func

from blog_api.models.base import Base


class RefreshToken(Base):
    __tablename__ = "tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    token = Column(Text, nullable=False, index=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
