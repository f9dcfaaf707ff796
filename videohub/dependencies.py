"""
FastAPI dependencies: the caller's identity and the external collaborators.

Collaborators are provided through dependencies so tests can swap them with
``app.dependency_overrides``.
"""
from typing import Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from .auth import oauth2_scheme, verify_token
from .database import get_db
from .errors import AuthenticationFailed
from .google_oauth import ChannelAuthorizer, GoogleIdentityVerifier
from .identity import Identity, UserRef, resolve_bearer
from .policy import require_admin
from .worker.platform_upload import PublicationAdapter, YouTubeUploader


def get_current_identity(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> Optional[Identity]:
    """Resolve the bearer token to an identity (optional auth)."""
    if not token:
        return None

    payload = verify_token(token, "access")
    if not payload:
        return None

    try:
        ref = UserRef.parse(payload.get("sub"))
    except ValueError:
        return None

    return resolve_bearer(db, ref)


def get_required_identity(
    identity: Optional[Identity] = Depends(get_current_identity),
) -> Identity:
    """Get the current identity, failing authentication if there is none."""
    if identity is None:
        raise AuthenticationFailed("Not authenticated")
    return identity


def get_admin_identity(identity: Identity = Depends(get_required_identity)) -> Identity:
    require_admin(identity)
    return identity


def get_publication_adapter() -> PublicationAdapter:
    return YouTubeUploader()


def get_identity_verifier() -> GoogleIdentityVerifier:
    return GoogleIdentityVerifier()


def get_channel_authorizer() -> ChannelAuthorizer:
    return ChannelAuthorizer()
