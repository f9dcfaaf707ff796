"""
Account model: one externally published channel.
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from ..database import Base


class Account(Base):
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    channel_id = Column(String(100), nullable=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Channel publishing credentials
    channel_access_token = Column(Text, nullable=True)
    channel_refresh_token = Column(Text, nullable=True)
    channel_token_expires_at = Column(DateTime, nullable=True)
    channel_token_updated_at = Column(DateTime, nullable=True)
    authorized_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # Relationships
    owner = relationship("User", foreign_keys=[owner_id], viewonly=True)
    role_assignments = relationship("RoleAssignment", back_populates="account", cascade="all, delete-orphan")
    videos = relationship("Video", back_populates="account", cascade="all, delete-orphan")

    @property
    def has_channel_credentials(self) -> bool:
        return bool(self.channel_access_token and self.channel_refresh_token)
