from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class VideoCreate(BaseModel):
    account_id: int
    title: str
    media_url: str
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    storage_ref: Optional[str] = None
    duration: Optional[float] = None
    format: Optional[str] = None
    file_size: Optional[int] = None


class ReviewRequest(BaseModel):
    notes: Optional[str] = None


class VideoResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    account_id: int
    media_url: str
    thumbnail_url: Optional[str] = None
    storage_ref: Optional[str] = None
    duration: Optional[float] = None
    format: Optional[str] = None
    file_size: Optional[int] = None
    uploaded_by_id: Optional[int] = None
    status: str
    reviewed_by_id: Optional[int] = None
    review_notes: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    publish_pending: bool
    external_video_id: Optional[str] = None
    public_url: Optional[str] = None
    published_at: Optional[datetime] = None
    published_by_id: Optional[int] = None
    failure_reason: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
