"""
Tests for the video endpoints.
"""
import pytest

from videohub.accounts import add_editor, attach_channel_credentials, create_account
from videohub.errors import UploadFailed
from videohub.worker.platform_upload import ChannelCredentials


@pytest.fixture
def channel_a(db, admin, editor):
    account = create_account(db, admin, "Channel A")
    add_editor(db, admin, account, "editor@example.com")
    return account


@pytest.fixture
def uploaded(client, channel_a, editor_headers):
    response = client.post(
        "/api/videos",
        json={
            "account_id": channel_a.id,
            "title": "First cut",
            "media_url": "https://cdn.example.com/v1.mp4",
            "duration": 42.5,
            "format": "mp4",
            "file_size": 1048576,
        },
        headers=editor_headers,
    )
    assert response.status_code == 200
    return response.json()


class TestVideoUpload:
    def test_editor_registers_video(self, uploaded, editor):
        assert uploaded["status"] == "pending"
        assert uploaded["uploaded_by_id"] == editor.user_id
        assert uploaded["duration"] == 42.5
        assert uploaded["publish_pending"] is False

    def test_stranger_cannot_upload(self, client, db, other_admin, channel_a, other_admin_headers):
        response = client.post(
            "/api/videos",
            json={"account_id": channel_a.id, "title": "Nope", "media_url": "https://cdn.example.com/x.mp4"},
            headers=other_admin_headers,
        )
        assert response.status_code == 403

    def test_unknown_account(self, client, admin_headers):
        response = client.post(
            "/api/videos",
            json={"account_id": 999, "title": "Nope", "media_url": "https://cdn.example.com/x.mp4"},
            headers=admin_headers,
        )
        assert response.status_code == 404

    def test_missing_title(self, client, channel_a, admin_headers):
        response = client.post(
            "/api/videos",
            json={"account_id": channel_a.id, "title": " ", "media_url": "https://cdn.example.com/x.mp4"},
            headers=admin_headers,
        )
        assert response.status_code == 422


class TestVideoListing:
    def test_list_for_owner_and_editor(self, client, uploaded, admin_headers, editor_headers):
        for headers in (admin_headers, editor_headers):
            response = client.get("/api/videos", headers=headers)
            assert response.status_code == 200
            assert [v["id"] for v in response.json()] == [uploaded["id"]]

    def test_list_hidden_from_stranger(self, client, uploaded, other_admin_headers):
        assert client.get("/api/videos", headers=other_admin_headers).json() == []

    def test_status_filter(self, client, uploaded, admin_headers):
        response = client.get("/api/videos", params={"status": "approved"}, headers=admin_headers)
        assert response.json() == []

    def test_account_filter(self, client, uploaded, channel_a, admin_headers):
        response = client.get("/api/videos", params={"account_id": [channel_a.id]}, headers=admin_headers)
        assert len(response.json()) == 1

    def test_get_one(self, client, uploaded, admin_headers, other_admin_headers):
        assert client.get(f"/api/videos/{uploaded['id']}", headers=admin_headers).status_code == 200
        assert client.get(f"/api/videos/{uploaded['id']}", headers=other_admin_headers).status_code == 403
        assert client.get("/api/videos/999", headers=admin_headers).status_code == 404


class TestVideoReview:
    def test_approve_without_channel(self, client, uploaded, admin_headers, adapter):
        response = client.post(
            f"/api/videos/{uploaded['id']}/approve",
            json={"notes": "Ship it"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "approved"
        assert data["publish_pending"] is True
        assert data["review_notes"] == "Ship it"
        assert adapter.uploaded_with == []

    def test_approve_publishes(self, client, db, admin, channel_a, uploaded, admin_headers, adapter):
        attach_channel_credentials(db, admin, channel_a, ChannelCredentials("access", "refresh"))

        response = client.post(f"/api/videos/{uploaded['id']}/approve", headers=admin_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "published"
        assert data["external_video_id"] == "yt-1"

    def test_upload_failure_is_not_an_error_response(
        self, client, db, admin, channel_a, uploaded, admin_headers, adapter
    ):
        attach_channel_credentials(db, admin, channel_a, ChannelCredentials("access", "refresh"))
        adapter.failures.append(UploadFailed("quota exceeded"))

        response = client.post(f"/api/videos/{uploaded['id']}/approve", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "publish_failed"
        assert response.json()["failure_reason"] == "quota exceeded"

    def test_editor_cannot_review(self, client, uploaded, editor_headers):
        response = client.post(f"/api/videos/{uploaded['id']}/approve", headers=editor_headers)
        assert response.status_code == 403
        assert response.json()["error"] == "Only account owners may review videos"

    def test_reject_then_approve_conflicts(self, client, uploaded, admin_headers):
        rejected = client.post(
            f"/api/videos/{uploaded['id']}/reject",
            json={"notes": "Audio is off"},
            headers=admin_headers,
        )
        assert rejected.status_code == 200
        assert rejected.json()["status"] == "rejected"

        response = client.post(f"/api/videos/{uploaded['id']}/approve", headers=admin_headers)
        assert response.status_code == 409
        data = response.json()
        assert data["error_code"] == "CONFLICT"
        assert data["details"] == {"current": "rejected", "target": "approved"}


class TestManualPublish:
    def test_publish_requires_channel(self, client, uploaded, admin_headers):
        client.post(f"/api/videos/{uploaded['id']}/approve", headers=admin_headers)

        response = client.post(f"/api/videos/{uploaded['id']}/publish", headers=admin_headers)
        assert response.status_code == 422
        assert response.json()["details"]["account_id"] == uploaded["account_id"]

    def test_publish_after_connecting(self, client, db, admin, channel_a, uploaded, admin_headers, adapter):
        client.post(f"/api/videos/{uploaded['id']}/approve", headers=admin_headers)
        attach_channel_credentials(db, admin, channel_a, ChannelCredentials("access", "refresh"))

        response = client.post(f"/api/videos/{uploaded['id']}/publish", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "published"
        assert adapter.uploaded_with == ["access"]
