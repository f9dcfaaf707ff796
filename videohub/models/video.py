"""
Video model: one uploaded media asset moving through review.
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, Float, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from ..database import Base


class Video(Base):
    __tablename__ = "videos"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    account_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)

    # Storage
    media_url = Column(String(1024), nullable=False)
    thumbnail_url = Column(String(1024), nullable=True)
    storage_ref = Column(String(255), nullable=True)
    duration = Column(Float, nullable=True)  # seconds
    format = Column(String(20), nullable=True)
    file_size = Column(Integer, nullable=True)  # bytes
    uploaded_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    # Review
    status = Column(String(20), default="pending", nullable=False, index=True)  # pending, approved, rejected, published, publish_failed
    reviewed_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    review_notes = Column(Text, nullable=True)
    reviewed_at = Column(DateTime, nullable=True)

    # Publication
    publish_pending = Column(Boolean, default=False, nullable=False)
    external_video_id = Column(String(100), nullable=True)
    public_url = Column(String(1024), nullable=True)
    published_at = Column(DateTime, nullable=True)
    published_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    failure_reason = Column(Text, nullable=True)

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), index=True)
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # Relationships
    account = relationship("Account", back_populates="videos")
