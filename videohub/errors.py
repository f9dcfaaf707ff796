"""
Domain error taxonomy.

These exceptions carry no HTTP knowledge; ``videohub.responses`` maps them to
structured error responses at the request boundary.
"""
from typing import Dict, Optional


class VideoHubError(Exception):
    """Base class for every recoverable domain error."""

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class AuthenticationFailed(VideoHubError):
    """Credential could not be verified. The message never says why."""

    def __init__(self, message: str = "Sign-in failed"):
        super().__init__(message)


class AccessDenied(VideoHubError):
    """A policy rule rejected the operation; the message names the rule."""


class NotFound(VideoHubError):
    def __init__(self, resource: str, id=None):
        message = f"{resource} not found" if id is None else f"{resource} '{id}' not found"
        super().__init__(message, {"resource": resource, "id": id})


class ValidationFailed(VideoHubError):
    """Required input missing or malformed."""


class Conflict(VideoHubError):
    """Write would duplicate existing state (e.g. an editor assignment)."""


class InvalidTransition(Conflict):
    """Requested review transition is not allowed from the current status."""

    def __init__(self, current: str, target: str):
        super().__init__(
            f"Cannot move video from '{current}' to '{target}'",
            {"current": current, "target": target},
        )


class PublicationFailed(VideoHubError):
    """The publication adapter could not publish the video."""


class TokenExpired(PublicationFailed):
    """Channel access token rejected; a refresh may recover."""


class UploadFailed(PublicationFailed):
    """Upload rejected for a reason a token refresh will not fix."""
