"""
Google OAuth collaborators: sign-in verification and channel authorization.
"""
import os
from typing import Optional

import requests
from google.auth.exceptions import GoogleAuthError
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token
from google_auth_oauthlib.flow import Flow
from oauthlib.oauth2.rfc6749.errors import OAuth2Error

from .config import Settings, get_settings
from .errors import AuthenticationFailed
from .identity import VerifiedPrincipal
from .logging_config import auth_logger
from .worker.platform_upload import ChannelCredentials, TOKEN_URI, YouTubeUploader

# Google returns scopes in long form; do not treat that as a scope change
os.environ.setdefault("OAUTHLIB_RELAX_TOKEN_SCOPE", "1")

AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
SIGN_IN_SCOPES = [
    "openid",
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/userinfo.profile",
]


def _flow(client_id: str, client_secret: str, scopes, redirect_uri: str) -> Flow:
    client_config = {
        "web": {
            "client_id": client_id,
            "client_secret": client_secret,
            "auth_uri": AUTH_URI,
            "token_uri": TOKEN_URI,
            "redirect_uris": [redirect_uri],
        }
    }
    return Flow.from_client_config(
        client_config,
        scopes=scopes,
        redirect_uri=redirect_uri,
        autogenerate_code_verifier=False,
    )


class GoogleIdentityVerifier:
    """Exchanges a sign-in code from the browser popup and verifies the ID token."""

    REDIRECT_URI = "postmessage"

    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        self.client_id = settings.google_client_id
        self.client_secret = settings.google_client_secret

    def verify(self, code: str) -> VerifiedPrincipal:
        if not self.client_id or not self.client_secret:
            auth_logger.error("Google sign-in not configured")
            raise AuthenticationFailed()

        flow = _flow(self.client_id, self.client_secret, SIGN_IN_SCOPES, self.REDIRECT_URI)
        try:
            flow.fetch_token(code=code)
            claims = id_token.verify_oauth2_token(
                flow.credentials.id_token,
                google_requests.Request(),
                self.client_id,
            )
        except (OAuth2Error, GoogleAuthError, ValueError, requests.RequestException) as e:
            auth_logger.warning("Google sign-in verification failed", error_type=type(e).__name__)
            raise AuthenticationFailed() from e

        return VerifiedPrincipal(
            subject_id=claims["sub"],
            email=claims.get("email"),
            name=claims.get("name"),
            avatar_url=claims.get("picture"),
        )


class ChannelAuthorizer:
    """Builds the channel consent URL and exchanges the returned code for tokens."""

    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        self.client_id = settings.youtube_client_id
        self.client_secret = settings.youtube_client_secret
        self.redirect_uri = settings.youtube_redirect_uri

    def _channel_flow(self) -> Flow:
        if not self.client_id or not self.client_secret:
            raise AuthenticationFailed("Channel authorization is not configured")
        return _flow(self.client_id, self.client_secret, YouTubeUploader.SCOPES, self.redirect_uri)

    def authorization_url(self, state: str) -> str:
        url, _ = self._channel_flow().authorization_url(
            access_type="offline",  # Required to get refresh token
            prompt="consent",  # Force consent screen to ensure refresh token
            include_granted_scopes="true",
            state=state,
        )
        return url

    def exchange_code(self, code: str) -> ChannelCredentials:
        flow = self._channel_flow()
        try:
            flow.fetch_token(code=code)
        except (OAuth2Error, ValueError, requests.RequestException) as e:
            auth_logger.warning("Channel code exchange failed", error_type=type(e).__name__)
            raise AuthenticationFailed("Channel authorization failed") from e

        credentials = flow.credentials
        return ChannelCredentials(
            access_token=credentials.token,
            refresh_token=credentials.refresh_token,
            expires_at=credentials.expiry,
        )
