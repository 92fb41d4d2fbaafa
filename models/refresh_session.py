"""
RefreshSession model: one row per (account, device) holding the current
opaque refresh token for that device.
Fields:
- token (unique, 64 hex chars)
- user_id - FK to users.id
- device_id - device fingerprint
- expires_at, created_at, updated_at
"""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from models.base_model import Base, BaseModel


class RefreshSession(BaseModel, Base):
    __tablename__ = "refresh_tokens"
    __table_args__ = (
        UniqueConstraint("user_id", "device_id", name="uq_refresh_tokens_user_device"),
    )

    token = Column(String(128), nullable=False, unique=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    device_id = Column(String(64), nullable=False)
    expires_at = Column(DateTime, nullable=False)

    account = relationship("Account", back_populates="sessions")

    def __repr__(self):
        return f"<RefreshSession user={self.user_id} device={self.device_id[:8]}>"
