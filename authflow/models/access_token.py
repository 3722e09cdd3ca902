"""
Personal access token model.

Stores the SHA-256 digest of each bearer secret, never the secret itself.
Expired rows are not swept; expiry is checked when the token is used.
"""

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from authflow.core.database import Base


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class PersonalAccessToken(Base):
    __tablename__ = "personal_access_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    token_hash = Column(String(64), unique=True, nullable=False, index=True)  # SHA256 hash
    abilities = Column(JSON, nullable=False, default=lambda: ["*"])

    expires_at = Column(DateTime(timezone=True), nullable=True)
    last_used_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    user = relationship("User", back_populates="tokens")

    __table_args__ = (
        Index("ix_personal_access_tokens_user_expires", "user_id", "expires_at"),
    )

    def is_expired(self, now: datetime) -> bool:
        if self.expires_at is None:
            return False
        return now > as_utc(self.expires_at)

    def __repr__(self):
        return f"<PersonalAccessToken(id={self.id}, user_id={self.user_id}, expires_at={self.expires_at})>"
