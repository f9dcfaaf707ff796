from pydantic import BaseModel, EmailStr
from typing import Optional
from datetime import datetime


class AccountCreate(BaseModel):
    name: str
    channel_id: Optional[str] = None


class AccountResponse(BaseModel):
    id: int
    name: str
    channel_id: Optional[str] = None
    owner_id: int
    authorized_by_id: Optional[int] = None
    has_channel_credentials: bool
    channel_token_updated_at: Optional[datetime] = None
    viewer_role: str
    created_at: Optional[datetime] = None


class EditorAdd(BaseModel):
    email: EmailStr


class EditorResponse(BaseModel):
    id: int
    email: str
    name: Optional[str] = None
    auth_origin: str

    class Config:
        from_attributes = True


class ChannelTokenRequest(BaseModel):
    """Channel tokens obtained by the client through its own consent flow."""
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None


class AuthUrlResponse(BaseModel):
    auth_url: str
    state: str


class ChannelSummaryResponse(BaseModel):
    channel_id: str
    title: str
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    subscriber_count: int = 0
    video_count: int = 0
    view_count: int = 0

    class Config:
        from_attributes = True
