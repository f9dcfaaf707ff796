"""
VideoHub API Response Utilities
Standardized response format and error handling
"""
from fastapi import Request
from fastapi.responses import JSONResponse
from typing import Any, Dict, Optional
from datetime import datetime, timezone

from .errors import (
    AccessDenied,
    AuthenticationFailed,
    Conflict,
    NotFound,
    PublicationFailed,
    ValidationFailed,
    VideoHubError,
)
from .logging_config import api_logger


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


# ============================================================
# SUCCESS RESPONSES
# ============================================================

def success(data: Any = None, message: Optional[str] = None, meta: Optional[Dict] = None) -> Dict:
    """Create success response"""
    response = {
        "ok": True,
        "timestamp": _timestamp(),
    }

    if data is not None:
        response["data"] = data

    if message:
        response["message"] = message

    if meta:
        response["meta"] = meta

    return response


def deleted(message: str = "Deleted successfully", meta: Optional[Dict] = None) -> Dict:
    """200 Deleted response"""
    return success(message=message, meta=meta)


# ============================================================
# ERROR RESPONSES
# ============================================================

# Most specific class first
ERROR_STATUS = [
    (AuthenticationFailed, 401, "UNAUTHORIZED"),
    (AccessDenied, 403, "FORBIDDEN"),
    (NotFound, 404, "NOT_FOUND"),
    (Conflict, 409, "CONFLICT"),
    (ValidationFailed, 422, "VALIDATION_ERROR"),
    (PublicationFailed, 502, "PUBLICATION_FAILED"),
]


def error_status(exc: VideoHubError):
    for error_type, status_code, error_code in ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code, error_code
    return 400, "BAD_REQUEST"


def error_body(message: str, error_code: str, details: Optional[Dict] = None) -> Dict:
    return {
        "ok": False,
        "error": message,
        "error_code": error_code,
        "details": details,
        "timestamp": _timestamp(),
    }


# ============================================================
# EXCEPTION HANDLERS
# ============================================================

async def domain_exception_handler(request: Request, exc: VideoHubError) -> JSONResponse:
    """Turn a domain error into a structured error response"""
    status_code, error_code = error_status(exc)
    api_logger.warning(
        f"API Error: {exc.message}",
        status_code=status_code,
        error_code=error_code,
        path=request.url.path,
    )
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(
        status_code=status_code,
        content=error_body(exc.message, error_code, exc.details),
        headers=headers,
    )


async def unexpected_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler: log everything, leak nothing"""
    api_logger.error(
        f"Unexpected error: {exc}",
        error=exc,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=500,
        content=error_body("An unexpected error occurred", "INTERNAL_ERROR"),
    )
