"""
Video routes: registration, listing, review, and publication.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from ..database import get_db
from ..dependencies import get_publication_adapter, get_required_identity
from ..identity import Identity
from ..policy import get_account, get_video, list_visible_videos, require_video_access
from ..review import ReviewDecision, create_video, publish_video, review_video
from ..schemas.videos import ReviewRequest, VideoCreate, VideoResponse
from ..worker.platform_upload import PublicationAdapter

router = APIRouter(prefix="/api/videos", tags=["videos"])


@router.post("", response_model=VideoResponse)
def create(
    body: VideoCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_required_identity),
):
    """Register an uploaded video for review."""
    data = body.model_dump(exclude={"account_id"})
    return create_video(db, identity, get_account(db, body.account_id), **data)


@router.get("", response_model=List[VideoResponse])
def list_videos(
    account_id: Optional[List[int]] = Query(None),
    uploaded_by: Optional[int] = None,
    status: Optional[str] = None,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_required_identity),
):
    """Videos on the caller's accounts, newest first."""
    return list_visible_videos(db, identity, account_id, uploaded_by, status)


@router.get("/{video_id}", response_model=VideoResponse)
def get_one(
    video_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_required_identity),
):
    video = get_video(db, video_id)
    require_video_access(db, identity, video)
    return video


@router.post("/{video_id}/approve", response_model=VideoResponse)
def approve(
    video_id: int,
    body: Optional[ReviewRequest] = None,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_required_identity),
    adapter: PublicationAdapter = Depends(get_publication_adapter),
):
    """Approve a pending video and publish it when the channel is connected."""
    notes = body.notes if body else None
    return review_video(db, identity, get_video(db, video_id), ReviewDecision.APPROVE, notes, adapter)


@router.post("/{video_id}/reject", response_model=VideoResponse)
def reject(
    video_id: int,
    body: Optional[ReviewRequest] = None,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_required_identity),
    adapter: PublicationAdapter = Depends(get_publication_adapter),
):
    notes = body.notes if body else None
    return review_video(db, identity, get_video(db, video_id), ReviewDecision.REJECT, notes, adapter)


@router.post("/{video_id}/publish", response_model=VideoResponse)
def publish(
    video_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_required_identity),
    adapter: PublicationAdapter = Depends(get_publication_adapter),
):
    """Publish an approved video that is still waiting on the channel."""
    return publish_video(db, identity, get_video(db, video_id), adapter)
