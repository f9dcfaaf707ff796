"""
Tests for the video review workflow and publication hand-off.
"""
import itertools

import pytest

from videohub.accounts import add_editor, attach_channel_credentials, create_account
from videohub.errors import (
    AccessDenied,
    InvalidTransition,
    TokenExpired,
    UploadFailed,
    ValidationFailed,
)
from videohub.review import (
    ReviewDecision,
    VideoStatus,
    can_transition,
    create_video,
    publish_video,
    review_video,
)
from videohub.worker.platform_upload import ChannelCredentials


@pytest.fixture
def channel_a(db, admin):
    return create_account(db, admin, "Channel A")


@pytest.fixture
def connected(db, admin, channel_a):
    """Channel A with stored publishing credentials."""
    return attach_channel_credentials(
        db, admin, channel_a, ChannelCredentials("stored-access", "stored-refresh")
    )


@pytest.fixture
def video(db, admin, editor, channel_a):
    add_editor(db, admin, channel_a, "editor@example.com")
    return create_video(db, editor, channel_a, "First cut", "https://cdn.example.com/v1.mp4")


def approve(db, identity, video, adapter, notes=None):
    return review_video(db, identity, video, ReviewDecision.APPROVE, notes, adapter)


class TestTransitions:
    """Only the documented edges exist."""

    ALLOWED = {
        ("pending", "approved"),
        ("pending", "rejected"),
        ("approved", "published"),
        ("approved", "publish_failed"),
        ("publish_failed", "approved"),
    }

    def test_transition_table(self):
        states = [status.value for status in VideoStatus]
        for current, target in itertools.product(states, states):
            assert can_transition(current, target) == ((current, target) in self.ALLOWED), (current, target)

    def test_terminal_states(self):
        for terminal in ("rejected", "published"):
            assert not any(can_transition(terminal, status.value) for status in VideoStatus)


class TestCreateVideo:
    def test_new_video_is_pending(self, db, video, editor):
        assert video.status == "pending"
        assert video.uploaded_by_id == editor.user_id
        assert video.publish_pending is False

    def test_title_required(self, db, admin, channel_a):
        with pytest.raises(ValidationFailed):
            create_video(db, admin, channel_a, "  ", "https://cdn.example.com/v.mp4")

    def test_media_url_required(self, db, admin, channel_a):
        with pytest.raises(ValidationFailed):
            create_video(db, admin, channel_a, "Title", "")

    def test_stranger_cannot_upload(self, db, editor, channel_a):
        with pytest.raises(AccessDenied):
            create_video(db, editor, channel_a, "Title", "https://cdn.example.com/v.mp4")


class TestApproval:
    def test_approve_without_credentials_defers_publication(self, db, admin, video, adapter):
        """No channel tokens: stays approved and waits, adapter untouched."""
        reviewed = approve(db, admin, video, adapter, notes="Looks good")

        assert reviewed.status == "approved"
        assert reviewed.publish_pending is True
        assert reviewed.reviewed_by_id == admin.user_id
        assert reviewed.review_notes == "Looks good"
        assert reviewed.reviewed_at is not None
        assert adapter.uploaded_with == []

    def test_approve_with_credentials_publishes(self, db, admin, video, connected, adapter):
        reviewed = approve(db, admin, video, adapter)

        assert reviewed.status == "published"
        assert reviewed.external_video_id == "yt-1"
        assert reviewed.public_url == "https://www.youtube.com/watch?v=yt-1"
        assert reviewed.published_by_id == admin.user_id
        assert reviewed.published_at is not None
        assert reviewed.publish_pending is False
        assert adapter.uploaded_with == ["stored-access"]

    def test_upload_failure_then_reapprove(self, db, admin, video, connected, adapter):
        adapter.failures.append(UploadFailed("quota exceeded"))

        failed = approve(db, admin, video, adapter)
        assert failed.status == "publish_failed"
        assert "quota exceeded" in failed.failure_reason

        retried = approve(db, admin, failed, adapter)
        assert retried.status == "published"
        assert retried.failure_reason is None
        assert len(adapter.uploaded_with) == 2

    def test_expired_token_refreshed_once(self, db, admin, video, connected, adapter):
        adapter.failures.append(TokenExpired("expired"))

        reviewed = approve(db, admin, video, adapter)

        assert reviewed.status == "published"
        assert adapter.refreshed == ["stored-refresh"]
        assert adapter.uploaded_with == ["stored-access", "refreshed-access-token"]
        db.refresh(connected)
        assert connected.channel_access_token == "refreshed-access-token"
        assert connected.channel_refresh_token == "stored-refresh"
        assert connected.channel_token_updated_at is not None

    def test_failure_after_refresh_is_not_retried_again(self, db, admin, video, connected, adapter):
        adapter.failures.extend([TokenExpired("expired"), TokenExpired("still expired")])

        reviewed = approve(db, admin, video, adapter)

        assert reviewed.status == "publish_failed"
        assert len(adapter.uploaded_with) == 2
        assert len(adapter.refreshed) == 1

    def test_editor_cannot_approve(self, db, editor, video, adapter):
        with pytest.raises(AccessDenied):
            approve(db, editor, video, adapter)
        db.refresh(video)
        assert video.status == "pending"


class TestRejection:
    def test_reject(self, db, admin, video, adapter):
        reviewed = review_video(db, admin, video, ReviewDecision.REJECT, "Audio is off", adapter)
        assert reviewed.status == "rejected"
        assert reviewed.review_notes == "Audio is off"
        assert adapter.uploaded_with == []

    def test_rejected_is_terminal(self, db, admin, video, adapter):
        review_video(db, admin, video, ReviewDecision.REJECT, None, adapter)
        with pytest.raises(InvalidTransition):
            approve(db, admin, video, adapter)

    def test_published_is_terminal(self, db, admin, video, connected, adapter):
        approve(db, admin, video, adapter)
        with pytest.raises(InvalidTransition):
            review_video(db, admin, video, ReviewDecision.REJECT, None, adapter)


class TestManualPublish:
    def test_pending_video_cannot_be_published(self, db, admin, video, connected, adapter):
        with pytest.raises(InvalidTransition):
            publish_video(db, admin, video, adapter)

    def test_requires_credentials(self, db, admin, video, adapter):
        approve(db, admin, video, adapter)
        with pytest.raises(ValidationFailed):
            publish_video(db, admin, video, adapter)

    def test_publishes_deferred_video(self, db, admin, video, channel_a, adapter):
        approve(db, admin, video, adapter)
        attach_channel_credentials(db, admin, channel_a, ChannelCredentials("late-access", "late-refresh"))

        published = publish_video(db, admin, video, adapter)
        assert published.status == "published"
        assert published.publish_pending is False
        assert adapter.uploaded_with == ["late-access"]
