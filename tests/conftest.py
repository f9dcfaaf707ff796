"""
Pytest configuration and fixtures for VideoHub API tests.
"""
import os

# Keep the application engine off the working directory
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from videohub.database import Base, get_db
from videohub.dependencies import (
    get_channel_authorizer,
    get_identity_verifier,
    get_publication_adapter,
)
from videohub.errors import AuthenticationFailed
from videohub.identity import Identity, VerifiedPrincipal, issue_tokens, resolve_oauth_principal
from videohub.main import app
from videohub.models.user import User, ROLE_USER, ORIGIN_PASSWORD
from videohub.auth import get_password_hash
from videohub.worker.platform_upload import (
    ChannelCredentials,
    ChannelSummary,
    PublicationAdapter,
    PublicationResult,
)

EDITOR_PASSWORD = "editorpass123"

# Use in-memory SQLite for tests with shared connection
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Global session for sharing across requests
_test_session = None


def get_test_db():
    """Get the shared test database session."""
    global _test_session
    try:
        yield _test_session
    finally:
        pass


# ============================================================
# FAKE COLLABORATORS
# ============================================================

class FakePublicationAdapter(PublicationAdapter):
    """Records uploads; raises queued failures in order."""

    def __init__(self):
        self.uploaded_with = []  # access token used for each upload
        self.refreshed = []
        self.failures = []

    def upload(self, request):
        self.uploaded_with.append(request.credentials.access_token)
        if self.failures:
            raise self.failures.pop(0)
        n = len(self.uploaded_with)
        return PublicationResult(
            external_video_id=f"yt-{n}",
            public_url=f"https://www.youtube.com/watch?v=yt-{n}",
        )

    def refresh(self, credentials):
        self.refreshed.append(credentials.refresh_token)
        return ChannelCredentials(
            access_token="refreshed-access-token",
            refresh_token=credentials.refresh_token,
        )

    def channel_summary(self, credentials, channel_id):
        return ChannelSummary(channel_id=channel_id, title="Channel A", subscriber_count=12, video_count=3)


class FakeIdentityVerifier:
    def __init__(self):
        self.principals = {}

    def verify(self, code):
        if code not in self.principals:
            raise AuthenticationFailed()
        return self.principals[code]


class FakeChannelAuthorizer:
    GOOD_CODE = "good-code"

    def authorization_url(self, state):
        return f"https://accounts.google.com/o/oauth2/auth?state={state}"

    def exchange_code(self, code):
        if code != self.GOOD_CODE:
            raise AuthenticationFailed("Channel authorization failed")
        return ChannelCredentials(access_token="channel-access", refresh_token="channel-refresh")


# ============================================================
# DATABASE / CLIENT
# ============================================================

@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test."""
    global _test_session

    # Create all tables
    Base.metadata.create_all(bind=engine)

    # Create a session
    _test_session = TestingSessionLocal()

    # Override the get_db dependency
    app.dependency_overrides[get_db] = get_test_db

    yield _test_session

    # Cleanup
    app.dependency_overrides.clear()
    _test_session.close()
    _test_session = None

    # Drop all tables
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def adapter(db):
    fake = FakePublicationAdapter()
    app.dependency_overrides[get_publication_adapter] = lambda: fake
    return fake


@pytest.fixture(scope="function")
def verifier(db):
    fake = FakeIdentityVerifier()
    app.dependency_overrides[get_identity_verifier] = lambda: fake
    return fake


@pytest.fixture(scope="function")
def authorizer(db):
    fake = FakeChannelAuthorizer()
    app.dependency_overrides[get_channel_authorizer] = lambda: fake
    return fake


@pytest.fixture(scope="function")
def client(db, adapter, verifier, authorizer):
    """Create a test client."""
    with TestClient(app) as c:
        yield c


# ============================================================
# USERS
# ============================================================

def sign_in_with_google(db, subject_id, email, name=None) -> Identity:
    return resolve_oauth_principal(db, VerifiedPrincipal(subject_id=subject_id, email=email, name=name))


def create_password_user(db, email, password=EDITOR_PASSWORD, name=None) -> User:
    user = User(
        email=email,
        name=name or email.split("@")[0],
        role=ROLE_USER,
        auth_origin=ORIGIN_PASSWORD,
        hashed_password=get_password_hash(password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def bearer(identity: Identity) -> dict:
    access_token, _ = issue_tokens(identity)
    return {"Authorization": f"Bearer {access_token}"}


@pytest.fixture(scope="function")
def admin(db):
    """Google-signed-in admin."""
    return sign_in_with_google(db, "google-admin-1", "admin@example.com", "Admin One")


@pytest.fixture(scope="function")
def other_admin(db):
    return sign_in_with_google(db, "google-admin-2", "other@example.com", "Admin Two")


@pytest.fixture(scope="function")
def editor_user(db):
    """Password user with no accounts yet."""
    return create_password_user(db, "editor@example.com", name="Editor")


@pytest.fixture(scope="function")
def editor(editor_user):
    return Identity.from_user(editor_user)


@pytest.fixture(scope="function")
def admin_headers(admin):
    return bearer(admin)


@pytest.fixture(scope="function")
def other_admin_headers(other_admin):
    return bearer(other_admin)


@pytest.fixture(scope="function")
def editor_headers(editor):
    return bearer(editor)


@pytest.fixture(scope="function")
def google_user(db):
    """Factory: sign a Google principal in."""
    return lambda subject_id, email, name=None: sign_in_with_google(db, subject_id, email, name)


@pytest.fixture(scope="function")
def password_user(db):
    """Factory: create a password user."""
    return lambda email, password=EDITOR_PASSWORD, name=None: create_password_user(db, email, password, name)


@pytest.fixture(scope="function")
def headers_for():
    return bearer
