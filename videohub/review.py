"""
Video review workflow.

    pending --approve--> approved --upload ok--> published
       |                    |
       |                    +--upload failed--> publish_failed --approve--> approved
       +--reject--> rejected

``rejected`` and ``published`` are terminal. Entering ``approved`` immediately
attempts publication when the account holds channel credentials; without them
the video stays ``approved`` with ``publish_pending`` set.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy.orm import Session

from .errors import InvalidTransition, PublicationFailed, TokenExpired, ValidationFailed
from .identity import Identity
from .logging_config import review_logger
from .models.account import Account
from .models.video import Video
from .policy import require_review, require_upload
from .worker.platform_upload import (
    ChannelCredentials,
    PublicationAdapter,
    PublicationRequest,
)


class VideoStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    PUBLISHED = "published"
    PUBLISH_FAILED = "publish_failed"


class ReviewDecision(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


TRANSITIONS = {
    VideoStatus.PENDING: {VideoStatus.APPROVED, VideoStatus.REJECTED},
    VideoStatus.APPROVED: {VideoStatus.PUBLISHED, VideoStatus.PUBLISH_FAILED},
    VideoStatus.PUBLISH_FAILED: {VideoStatus.APPROVED},
    VideoStatus.REJECTED: set(),
    VideoStatus.PUBLISHED: set(),
}


def can_transition(current: str, target: str) -> bool:
    return VideoStatus(target) in TRANSITIONS[VideoStatus(current)]


def _move(video: Video, target: VideoStatus) -> None:
    if not can_transition(video.status, target):
        raise InvalidTransition(video.status, target.value)
    video.status = target.value


def _now() -> datetime:
    return datetime.now(timezone.utc)


def create_video(
    db: Session,
    identity: Identity,
    account: Account,
    title: str,
    media_url: str,
    description: Optional[str] = None,
    thumbnail_url: Optional[str] = None,
    storage_ref: Optional[str] = None,
    duration: Optional[float] = None,
    format: Optional[str] = None,
    file_size: Optional[int] = None,
) -> Video:
    """Register an uploaded asset for review."""
    require_upload(db, identity, account)
    if not title or not title.strip():
        raise ValidationFailed("title is required", {"field": "title"})
    if not media_url or not media_url.strip():
        raise ValidationFailed("media_url is required", {"field": "media_url"})

    video = Video(
        title=title.strip(),
        description=description,
        account_id=account.id,
        media_url=media_url,
        thumbnail_url=thumbnail_url,
        storage_ref=storage_ref,
        duration=duration,
        format=format,
        file_size=file_size,
        uploaded_by_id=identity.user_id,
        status=VideoStatus.PENDING.value,
    )
    db.add(video)
    db.commit()
    db.refresh(video)
    review_logger.info("Video submitted for review", video_id=video.id, account_id=account.id)
    return video


def review_video(
    db: Session,
    identity: Identity,
    video: Video,
    decision: ReviewDecision,
    notes: Optional[str],
    adapter: PublicationAdapter,
) -> Video:
    """Approve or reject a video; approval goes straight on to publication."""
    require_review(db, identity, video)
    decision = ReviewDecision(decision)

    target = VideoStatus.APPROVED if decision == ReviewDecision.APPROVE else VideoStatus.REJECTED
    _move(video, target)
    video.reviewed_by_id = identity.user_id
    video.reviewed_at = _now()
    video.review_notes = notes
    db.commit()
    review_logger.info(
        "Video reviewed",
        video_id=video.id,
        decision=decision.value,
        reviewer_id=identity.user_id,
    )

    if target == VideoStatus.APPROVED:
        _attempt_publication(db, identity, video, adapter)

    db.refresh(video)
    return video


def publish_video(db: Session, identity: Identity, video: Video, adapter: PublicationAdapter) -> Video:
    """Manually trigger publication of an approved video."""
    require_review(db, identity, video)
    if video.status != VideoStatus.APPROVED.value:
        raise InvalidTransition(video.status, VideoStatus.PUBLISHED.value)
    if not video.account.has_channel_credentials:
        raise ValidationFailed(
            "Channel not authorized. Authorize the account's channel before publishing.",
            {"account_id": video.account_id},
        )

    _attempt_publication(db, identity, video, adapter)
    db.refresh(video)
    return video


def _attempt_publication(db: Session, identity: Identity, video: Video, adapter: PublicationAdapter) -> None:
    account = video.account
    if not account.has_channel_credentials:
        video.publish_pending = True
        db.commit()
        review_logger.info("Approved without channel credentials", video_id=video.id, account_id=account.id)
        return

    request = PublicationRequest(
        title=video.title,
        description=video.description or "",
        media_url=video.media_url,
        credentials=_stored_credentials(account),
    )
    try:
        result = _upload_with_refresh(db, account, adapter, request)
    except PublicationFailed as e:
        _move(video, VideoStatus.PUBLISH_FAILED)
        video.failure_reason = str(e)
        video.publish_pending = False
        db.commit()
        review_logger.warning("Publication failed", video_id=video.id, reason=str(e))
        return

    _move(video, VideoStatus.PUBLISHED)
    video.external_video_id = result.external_video_id
    video.public_url = result.public_url
    video.published_at = _now()
    video.published_by_id = identity.user_id
    video.publish_pending = False
    video.failure_reason = None
    db.commit()
    review_logger.info("Video published", video_id=video.id, external_video_id=result.external_video_id)


def _upload_with_refresh(db: Session, account: Account, adapter: PublicationAdapter, request: PublicationRequest):
    """Upload; on an expired token refresh once, persist the new token and retry."""
    try:
        return adapter.upload(request)
    except TokenExpired:
        review_logger.info("Channel token expired, refreshing", account_id=account.id)

    refreshed = adapter.refresh(request.credentials)
    account.channel_access_token = refreshed.access_token
    account.channel_refresh_token = refreshed.refresh_token or account.channel_refresh_token
    account.channel_token_expires_at = refreshed.expires_at
    account.channel_token_updated_at = _now()
    db.commit()

    request.credentials = refreshed
    return adapter.upload(request)


def _stored_credentials(account: Account) -> ChannelCredentials:
    return ChannelCredentials(
        access_token=account.channel_access_token,
        refresh_token=account.channel_refresh_token,
        expires_at=account.channel_token_expires_at,
    )
