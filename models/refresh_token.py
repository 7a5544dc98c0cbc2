"""
RefreshToken model: one row per refresh token issued to a user.
A live row (evicted_at is NULL) means the token may be redeemed once;
rotation and logout delete it. Rows pushed out by the per-user cap are kept
as evicted until they expire, so a late redemption can be told apart from
a replay. Only the SHA-256 of the token is stored.
Fields:
- user_id (String(36)) - FK to users.id
- token_hash (unique)
- issued_at (microsecond resolution, orders tokens for the cap)
- expires_at, evicted_at
"""
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base, utcnow


class RefreshToken(BaseModel, Base):
    __tablename__ = "refresh_tokens"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    token_hash = Column(String(64), nullable=False, unique=True)
    issued_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    evicted_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="refresh_tokens")

    def __repr__(self):
        return f"<RefreshToken user={self.user_id} hash={self.token_hash[:8]}>"
