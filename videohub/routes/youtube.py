"""
YouTube consent redirect target.

Google redirects the browser here after the owner grants channel access. The
signed ``state`` issued by ``/api/accounts/{id}/youtube/auth-url`` names the
account and the user who started the flow.
"""
import html
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from ..accounts import attach_channel_credentials
from ..auth import verify_token
from ..database import get_db
from ..dependencies import get_channel_authorizer
from ..errors import AuthenticationFailed, NotFound, VideoHubError
from ..google_oauth import ChannelAuthorizer
from ..identity import Identity
from ..logging_config import auth_logger
from ..models.user import User
from ..policy import get_account
from ..responses import error_status

router = APIRouter(prefix="/api/youtube", tags=["youtube"])

PAGE = """<!DOCTYPE html>
<html>
<head><title>{title}</title></head>
<body>
<h1>{title}</h1>
<p>{message}</p>
<p>You can close this window.</p>
</body>
</html>"""


def _page(title: str, message: str, status_code: int = 200) -> HTMLResponse:
    return HTMLResponse(
        PAGE.format(title=html.escape(title), message=html.escape(message)),
        status_code=status_code,
    )


@router.get("/callback", response_class=HTMLResponse)
def callback(
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    db: Session = Depends(get_db),
    authorizer: ChannelAuthorizer = Depends(get_channel_authorizer),
):
    if error:
        auth_logger.info("Channel consent declined", error=error)
        return _page("Authorization cancelled", f"Google returned: {error}", 400)

    try:
        payload = verify_token(state or "", "oauth_state")
        if not payload or not code:
            raise AuthenticationFailed("Invalid or expired authorization state")

        user = db.query(User).filter(User.id == payload.get("user_id")).first()
        if user is None:
            raise NotFound("User", payload.get("user_id"))

        account = get_account(db, payload.get("account_id"))
        credentials = authorizer.exchange_code(code)
        attach_channel_credentials(db, Identity.from_user(user), account, credentials)
    except VideoHubError as e:
        status_code, _ = error_status(e)
        return _page("Authorization failed", e.message, status_code)

    return _page("Channel connected", f"Publishing is now enabled for {account.name}.")
