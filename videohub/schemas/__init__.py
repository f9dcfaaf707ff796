from .auth import GoogleLogin, UserLogin, UserResponse, TokenResponse, RefreshRequest
from .accounts import (
    AccountCreate,
    AccountResponse,
    EditorAdd,
    EditorResponse,
    ChannelTokenRequest,
    AuthUrlResponse,
)
from .videos import VideoCreate, VideoResponse, ReviewRequest
from .admin import EditorCreate, ManagedEditorResponse, ProvisionedEditorResponse

__all__ = [
    "GoogleLogin", "UserLogin", "UserResponse", "TokenResponse", "RefreshRequest",
    "AccountCreate", "AccountResponse", "EditorAdd", "EditorResponse",
    "ChannelTokenRequest", "AuthUrlResponse",
    "VideoCreate", "VideoResponse", "ReviewRequest",
    "EditorCreate", "ManagedEditorResponse", "ProvisionedEditorResponse",
]
