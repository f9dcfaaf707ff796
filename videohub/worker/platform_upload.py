"""
Platform Upload Integration

Publishes approved videos to YouTube through the channel credentials stored on
an account. The review workflow only depends on the ``PublicationAdapter``
interface; ``YouTubeUploader`` is the production implementation.
"""

import os
import tempfile
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Optional

import requests

from ..config import get_settings
from ..errors import NotFound, TokenExpired, UploadFailed
from ..logging_config import publish_logger, timed

TOKEN_URI = "https://oauth2.googleapis.com/token"


@dataclass
class ChannelCredentials:
    """OAuth credentials authorizing uploads to one channel"""
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None

    def is_expired(self) -> bool:
        if self.expires_at is None:
            return False
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return expires_at <= datetime.now(timezone.utc)


@dataclass
class PublicationRequest:
    """Request to publish a video"""
    title: str
    description: str
    media_url: str
    credentials: ChannelCredentials


@dataclass
class PublicationResult:
    """Identifiers assigned by the platform"""
    external_video_id: str
    public_url: str


@dataclass
class ChannelSummary:
    """Public profile of a connected channel"""
    channel_id: str
    title: str
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    subscriber_count: int = 0
    video_count: int = 0
    view_count: int = 0


class PublicationAdapter:
    """Interface consumed by the review workflow"""

    def upload(self, request: PublicationRequest) -> PublicationResult:
        """Publish the video; raise TokenExpired or UploadFailed on failure"""
        raise NotImplementedError

    def refresh(self, credentials: ChannelCredentials) -> ChannelCredentials:
        """Exchange the refresh token for a new access token"""
        raise NotImplementedError

    def channel_summary(self, credentials: ChannelCredentials, channel_id: str) -> ChannelSummary:
        """Describe the channel the credentials publish to"""
        raise NotImplementedError


# ============================================================
# YOUTUBE UPLOAD
# ============================================================

class YouTubeUploader(PublicationAdapter):
    """Upload videos to YouTube using the Data API v3"""

    # OAuth scopes required
    SCOPES = ['https://www.googleapis.com/auth/youtube.upload']

    def __init__(self):
        settings = get_settings()
        self.client_id = settings.youtube_client_id
        self.client_secret = settings.youtube_client_secret
        self.privacy_status = settings.youtube_privacy_status
        self.category_id = settings.youtube_category_id

    def is_configured(self) -> bool:
        """Check if YouTube upload is configured"""
        return bool(self.client_id and self.client_secret)

    @timed(publish_logger)
    def upload(self, request: PublicationRequest) -> PublicationResult:
        """Upload a video to YouTube"""
        from google.auth.exceptions import GoogleAuthError
        from googleapiclient.errors import Error as GoogleApiError, HttpError
        from googleapiclient.http import MediaFileUpload

        if request.credentials.is_expired():
            raise TokenExpired("Channel access token has expired")

        body = {
            'snippet': {
                'title': request.title[:100],  # Max 100 chars
                'description': (request.description or '')[:5000],  # Max 5000 chars
                'categoryId': self.category_id,
            },
            'status': {
                'privacyStatus': self.privacy_status,
                'selfDeclaredMadeForKids': False,
            }
        }

        with tempfile.TemporaryDirectory() as workdir:
            video_path = self._download(request.media_url, workdir)
            media = MediaFileUpload(
                video_path,
                mimetype='video/*',
                resumable=True,
                chunksize=1024*1024*10  # 10MB chunks
            )

            try:
                youtube = self._client(request.credentials)
                insert_request = youtube.videos().insert(
                    part='snippet,status',
                    body=body,
                    media_body=media
                )
                response = None
                while response is None:
                    status, response = insert_request.next_chunk()
                    if status:
                        publish_logger.debug("YouTube upload progress", progress=int(status.progress() * 100))
            except HttpError as e:
                if e.resp.status == 401:
                    raise TokenExpired("YouTube rejected the channel access token") from e
                raise UploadFailed(f"YouTube upload failed: {e}") from e
            except (GoogleApiError, GoogleAuthError, OSError, ValueError) as e:
                publish_logger.error("YouTube upload aborted", error=e)
                raise UploadFailed(f"YouTube upload failed: {e}") from e

        video_id = response['id']
        video_url = f"https://www.youtube.com/watch?v={video_id}"
        publish_logger.info("YouTube upload complete", external_video_id=video_id)
        return PublicationResult(external_video_id=video_id, public_url=video_url)

    def _client(self, credentials: ChannelCredentials):
        """YouTube Data API client for one channel"""
        from googleapiclient.discovery import build
        from google.oauth2.credentials import Credentials

        # Access token only: expiry is surfaced to the caller instead of refreshed silently
        google_credentials = Credentials(token=credentials.access_token, scopes=self.SCOPES)
        return build('youtube', 'v3', credentials=google_credentials, cache_discovery=False)

    def channel_summary(self, credentials: ChannelCredentials, channel_id: str) -> ChannelSummary:
        """Read-only title and statistics for a connected channel"""
        from google.auth.exceptions import GoogleAuthError
        from googleapiclient.errors import Error as GoogleApiError, HttpError

        try:
            response = self._client(credentials).channels().list(
                part='snippet,statistics',
                id=channel_id,
            ).execute()
        except HttpError as e:
            if e.resp.status == 401:
                raise TokenExpired("YouTube rejected the channel access token") from e
            raise UploadFailed(f"YouTube channel lookup failed: {e}") from e
        except (GoogleApiError, GoogleAuthError, OSError, ValueError) as e:
            raise UploadFailed(f"YouTube channel lookup failed: {e}") from e

        items = response.get('items') or []
        if not items:
            raise NotFound("Channel", channel_id)

        snippet = items[0].get('snippet', {})
        statistics = items[0].get('statistics', {})
        return ChannelSummary(
            channel_id=channel_id,
            title=snippet.get('title', ''),
            description=snippet.get('description'),
            thumbnail_url=snippet.get('thumbnails', {}).get('default', {}).get('url'),
            subscriber_count=int(statistics.get('subscriberCount', 0)),
            video_count=int(statistics.get('videoCount', 0)),
            view_count=int(statistics.get('viewCount', 0)),
        )

    def refresh(self, credentials: ChannelCredentials) -> ChannelCredentials:
        """Refresh the channel access token with the stored refresh token"""
        from google.auth.exceptions import GoogleAuthError
        from google.auth.transport.requests import Request
        from google.oauth2.credentials import Credentials

        if not credentials.refresh_token:
            raise UploadFailed("No refresh token stored for this channel")
        if not self.is_configured():
            raise UploadFailed("YouTube API not configured. Set YOUTUBE_CLIENT_ID and YOUTUBE_CLIENT_SECRET.")

        google_credentials = Credentials(
            token=credentials.access_token,
            refresh_token=credentials.refresh_token,
            token_uri=TOKEN_URI,
            client_id=self.client_id,
            client_secret=self.client_secret,
            scopes=self.SCOPES,
        )
        try:
            google_credentials.refresh(Request())
        except GoogleAuthError as e:
            raise UploadFailed(f"Channel token refresh failed: {e}") from e

        publish_logger.info("Refreshed channel access token")
        expiry = google_credentials.expiry
        return replace(
            credentials,
            access_token=google_credentials.token,
            refresh_token=google_credentials.refresh_token or credentials.refresh_token,
            expires_at=expiry.replace(tzinfo=timezone.utc) if expiry else None,
        )

    def _download(self, media_url: str, workdir: str) -> str:
        """Stream the stored media to a local file for resumable upload"""
        path = os.path.join(workdir, "upload.bin")
        try:
            with requests.get(media_url, stream=True, timeout=60) as response:
                response.raise_for_status()
                with open(path, "wb") as f:
                    for chunk in response.iter_content(chunk_size=1024*1024):
                        f.write(chunk)
        except requests.RequestException as e:
            raise UploadFailed(f"Could not fetch media from storage: {e}") from e
        return path
