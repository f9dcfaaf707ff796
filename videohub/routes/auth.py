"""
Authentication routes for Google sign-in, password login, and token management.
"""
from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_identity_verifier, get_required_identity
from ..errors import AuthenticationFailed, NotFound
from ..google_oauth import GoogleIdentityVerifier
from ..identity import (
    Identity,
    issue_tokens,
    refresh_session,
    resolve_oauth_principal,
    resolve_password_login,
)
from ..logging_config import auth_logger
from ..models.user import User
from ..schemas.auth import GoogleLogin, UserLogin, UserResponse, TokenResponse, RefreshRequest

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _token_response(identity: Identity) -> TokenResponse:
    access_token, refresh_token = issue_tokens(identity)
    return TokenResponse(access_token=access_token, refresh_token=refresh_token)


@router.post("/google", response_model=TokenResponse)
def google_login(
    body: GoogleLogin,
    db: Session = Depends(get_db),
    verifier: GoogleIdentityVerifier = Depends(get_identity_verifier),
):
    """Sign in with a Google authorization code from the browser popup."""
    principal = verifier.verify(body.code)
    identity = resolve_oauth_principal(db, principal)
    auth_logger.info("Google sign-in", user_id=identity.user_id)
    return _token_response(identity)


@router.post("/login", response_model=TokenResponse)
def login(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    """Login with OAuth2 form (username/password)."""
    identity = resolve_password_login(db, form_data.username, form_data.password)
    return _token_response(identity)


@router.post("/login/json", response_model=TokenResponse)
def login_json(credentials: UserLogin, db: Session = Depends(get_db)):
    """Login with JSON body (email/password)."""
    identity = resolve_password_login(db, credentials.email, credentials.password)
    return _token_response(identity)


@router.post("/refresh", response_model=TokenResponse)
def refresh_tokens(refresh_request: RefreshRequest, db: Session = Depends(get_db)):
    """Get new access and refresh tokens using a valid refresh token."""
    tokens = refresh_session(db, refresh_request.refresh_token)
    if not tokens:
        raise AuthenticationFailed("Invalid or expired refresh token")

    access_token, refresh_token = tokens
    return TokenResponse(access_token=access_token, refresh_token=refresh_token)


@router.get("/me", response_model=UserResponse)
def get_me(
    identity: Identity = Depends(get_required_identity),
    db: Session = Depends(get_db),
):
    """Get current authenticated user."""
    user = db.query(User).filter(User.id == identity.user_id).first()
    if user is None:
        raise NotFound("User", identity.user_id)
    return user


@router.post("/logout")
def logout(identity: Identity = Depends(get_required_identity)):
    """
    Logout the current user.

    Note: Since JWTs are stateless, this is a client-side operation.
    The client should delete the tokens.
    """
    return {"message": "Successfully logged out"}
