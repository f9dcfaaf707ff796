"""
Tests for the access policy: account visibility, editor management, review rights.
"""
import pytest

from videohub.accounts import add_editor, attach_channel_credentials, create_account
from videohub.errors import AccessDenied, NotFound
from videohub.identity import Identity
from videohub.policy import (
    can_access_account,
    can_manage_editors,
    can_publish,
    can_review,
    can_upload,
    get_account,
    list_accessible_accounts,
    list_publishable_accounts,
    list_visible_videos,
    require_review,
)
from videohub.review import create_video
from videohub.worker.platform_upload import ChannelCredentials


def _names(entries):
    return [(entry.account.name, entry.viewer_role) for entry in entries]


@pytest.fixture
def channel_a(db, admin):
    return create_account(db, admin, "Channel A")


@pytest.fixture
def editor_on_a(db, admin, editor, channel_a):
    add_editor(db, admin, channel_a, "editor@example.com")
    return editor


class TestScenarios:
    """Walkthrough: admin creates an account, adds an editor, editor uploads."""

    def test_admin_sees_created_account_as_owner(self, db, admin, channel_a):
        assert _names(list_accessible_accounts(db, admin)) == [("Channel A", "owner")]

    def test_editor_sees_account_as_editor(self, db, admin, editor_on_a, channel_a):
        assert _names(list_accessible_accounts(db, editor_on_a)) == [("Channel A", "editor")]
        assert can_publish(db, editor_on_a, channel_a) is False
        assert can_publish(db, admin, channel_a) is True

    def test_only_owner_can_review_upload(self, db, admin, editor_on_a, channel_a):
        video = create_video(db, editor_on_a, channel_a, "First cut", "https://cdn.example.com/v1.mp4")
        assert video.status == "pending"
        assert can_review(db, editor_on_a, video) is False
        assert can_review(db, admin, video) is True


class TestAdminVisibility:
    """Admins see exactly the accounts they own or authorized."""

    def test_admin_never_sees_accounts_they_only_edit(self, db, admin, other_admin, channel_a):
        other = create_account(db, other_admin, "Other Channel")
        add_editor(db, other_admin, other, "admin@example.com")

        assert _names(list_accessible_accounts(db, admin)) == [("Channel A", "owner")]
        assert can_access_account(db, admin, other).allowed is False

    def test_admin_sees_account_they_authorized(self, db, admin, editor):
        owned_by_editor = create_account(db, editor, "Editor Channel")
        owned_by_editor.authorized_by_id = admin.user_id
        db.commit()

        assert _names(list_accessible_accounts(db, admin)) == [("Editor Channel", "owner")]
        assert can_access_account(db, admin, owned_by_editor).role == "owner"

    def test_admin_without_accounts_sees_nothing(self, db, admin):
        assert list_accessible_accounts(db, admin) == []


class TestUserVisibility:
    """Non-admins see every account they hold a role on, tagged with that role."""

    def test_roles_from_assignments(self, db, admin, editor_on_a, channel_a):
        create_account(db, editor_on_a, "My Own")

        assert sorted(_names(list_accessible_accounts(db, editor_on_a))) == [
            ("Channel A", "editor"),
            ("My Own", "owner"),
        ]

    def test_no_assignments(self, db, editor):
        assert list_accessible_accounts(db, editor) == []

    def test_stranger_has_no_access(self, db, editor, channel_a):
        assert can_access_account(db, editor, channel_a).allowed is False
        assert can_upload(db, editor, channel_a) is False

    def test_editor_can_upload_but_not_manage(self, db, editor_on_a, channel_a):
        assert can_upload(db, editor_on_a, channel_a) is True
        assert can_manage_editors(db, editor_on_a, channel_a) is False


class TestReviewAuthorization:
    def test_editor_review_denied(self, db, editor_on_a, channel_a):
        video = create_video(db, editor_on_a, channel_a, "Cut", "https://cdn.example.com/v.mp4")
        with pytest.raises(AccessDenied) as exc:
            require_review(db, editor_on_a, video)
        assert exc.value.message == "Only account owners may review videos"

    def test_password_owner_reviews_own_account(self, db, editor):
        own = create_account(db, editor, "My Own")
        video = create_video(db, editor, own, "Cut", "https://cdn.example.com/v.mp4")
        assert can_review(db, editor, video) is True

    def test_owner_of_other_account_denied(self, db, editor_on_a, channel_a, password_user):
        outsider = Identity.from_user(password_user("outsider@example.com"))
        create_account(db, outsider, "Outsider Channel")
        video = create_video(db, editor_on_a, channel_a, "Cut", "https://cdn.example.com/v.mp4")
        assert can_review(db, outsider, video) is False

    def test_sentinel_grants_review_everywhere(self, db, other_admin, editor_on_a, channel_a):
        video = create_video(db, editor_on_a, channel_a, "Cut", "https://cdn.example.com/v.mp4")
        assert can_review(db, other_admin, video) is True


class TestPublishableAccounts:
    def test_admin_needs_credentials(self, db, admin, channel_a):
        create_account(db, admin, "Unconnected")
        attach_channel_credentials(db, admin, channel_a, ChannelCredentials("access", "refresh"))

        assert _names(list_publishable_accounts(db, admin)) == [("Channel A", "owner")]

    def test_editor_needs_channel_id(self, db, admin, editor):
        with_channel = create_account(db, admin, "With Channel", channel_id="UC123")
        without_channel = create_account(db, admin, "No Channel")
        add_editor(db, admin, with_channel, "editor@example.com")
        add_editor(db, admin, without_channel, "editor@example.com")

        assert _names(list_publishable_accounts(db, editor)) == [("With Channel", "editor")]


class TestVideoVisibility:
    def test_only_accessible_accounts(self, db, admin, other_admin, channel_a):
        other = create_account(db, other_admin, "Other Channel")
        mine = create_video(db, admin, channel_a, "Mine", "https://cdn.example.com/1.mp4")
        create_video(db, other_admin, other, "Theirs", "https://cdn.example.com/2.mp4")

        assert [v.id for v in list_visible_videos(db, admin)] == [mine.id]

    def test_requested_accounts_outside_access_dropped(self, db, admin, other_admin, channel_a):
        other = create_account(db, other_admin, "Other Channel")
        create_video(db, other_admin, other, "Theirs", "https://cdn.example.com/2.mp4")

        assert list_visible_videos(db, admin, account_ids=[other.id]) == []

    def test_filters(self, db, admin, editor_on_a, channel_a):
        by_editor = create_video(db, editor_on_a, channel_a, "Editor cut", "https://cdn.example.com/1.mp4")
        create_video(db, admin, channel_a, "Admin cut", "https://cdn.example.com/2.mp4")

        assert [v.id for v in list_visible_videos(db, admin, uploaded_by=editor_on_a.user_id)] == [by_editor.id]
        assert len(list_visible_videos(db, editor_on_a, status="pending")) == 2
        assert list_visible_videos(db, editor_on_a, status="published") == []


class TestLookups:
    def test_unknown_account(self, db):
        with pytest.raises(NotFound):
            get_account(db, 999)
