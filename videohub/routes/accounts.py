"""
Account routes: accounts, their editors, and channel authorization.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from ..accounts import (
    add_editor,
    attach_channel_credentials,
    channel_summary,
    create_account,
    list_editors,
    remove_editor,
)
from ..auth import create_state_token
from ..database import get_db
from ..dependencies import get_channel_authorizer, get_publication_adapter, get_required_identity
from ..google_oauth import ChannelAuthorizer
from ..identity import Identity
from ..models.account import Account
from ..models.role_assignment import ROLE_OWNER
from ..policy import (
    get_account,
    list_accessible_accounts,
    list_publishable_accounts,
    require_account_access,
    require_channel_authorization,
)
from ..responses import deleted
from ..schemas.accounts import (
    AccountCreate,
    AccountResponse,
    AuthUrlResponse,
    ChannelSummaryResponse,
    ChannelTokenRequest,
    EditorAdd,
    EditorResponse,
)
from ..worker.platform_upload import ChannelCredentials, PublicationAdapter

router = APIRouter(prefix="/api/accounts", tags=["accounts"])


def account_response(account: Account, viewer_role: str) -> AccountResponse:
    return AccountResponse(
        id=account.id,
        name=account.name,
        channel_id=account.channel_id,
        owner_id=account.owner_id,
        authorized_by_id=account.authorized_by_id,
        has_channel_credentials=account.has_channel_credentials,
        channel_token_updated_at=account.channel_token_updated_at,
        viewer_role=viewer_role,
        created_at=account.created_at,
    )


@router.post("", response_model=AccountResponse)
def create(
    body: AccountCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_required_identity),
):
    """Create an account owned by the caller."""
    account = create_account(db, identity, body.name, body.channel_id)
    return account_response(account, ROLE_OWNER)


@router.get("", response_model=List[AccountResponse])
def list_accounts(
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_required_identity),
):
    """Accounts visible to the caller, each with the caller's role on it."""
    return [
        account_response(entry.account, entry.viewer_role)
        for entry in list_accessible_accounts(db, identity)
    ]


@router.get("/publishable", response_model=List[AccountResponse])
def list_publishable(
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_required_identity),
):
    return [
        account_response(entry.account, entry.viewer_role)
        for entry in list_publishable_accounts(db, identity)
    ]


@router.get("/{account_id}", response_model=AccountResponse)
def get_one(
    account_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_required_identity),
):
    account = get_account(db, account_id)
    role = require_account_access(db, identity, account)
    return account_response(account, role)


# ============================================================
# EDITORS
# ============================================================

@router.get("/{account_id}/editors", response_model=List[EditorResponse])
def get_editors(
    account_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_required_identity),
):
    return list_editors(db, identity, get_account(db, account_id))


@router.post("/{account_id}/editors", response_model=EditorResponse)
def post_editor(
    account_id: int,
    body: EditorAdd,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_required_identity),
):
    """Give an existing user the editor role on this account."""
    assignment = add_editor(db, identity, get_account(db, account_id), body.email)
    return assignment.user


@router.delete("/{account_id}/editors/{user_id}")
def delete_editor(
    account_id: int,
    user_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_required_identity),
):
    remove_editor(db, identity, get_account(db, account_id), user_id)
    return deleted("Editor removed")


# ============================================================
# CHANNEL AUTHORIZATION
# ============================================================

@router.get("/{account_id}/youtube/auth-url", response_model=AuthUrlResponse)
def youtube_auth_url(
    account_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_required_identity),
    authorizer: ChannelAuthorizer = Depends(get_channel_authorizer),
):
    """
    Consent URL for connecting the account's channel.

    The signed ``state`` carries the account and the caller so the callback
    can attach the tokens without a session.
    """
    account = get_account(db, account_id)
    require_channel_authorization(db, identity, account)
    state = create_state_token(account.id, identity.user_id)
    return AuthUrlResponse(auth_url=authorizer.authorization_url(state), state=state)


@router.post("/{account_id}/youtube/token", response_model=AccountResponse)
def youtube_token(
    account_id: int,
    body: ChannelTokenRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_required_identity),
):
    """Attach channel tokens obtained by the client."""
    account = attach_channel_credentials(
        db,
        identity,
        get_account(db, account_id),
        ChannelCredentials(
            access_token=body.access_token,
            refresh_token=body.refresh_token,
            expires_at=body.expires_at,
        ),
    )
    return account_response(account, ROLE_OWNER)


@router.get("/{account_id}/youtube/channel", response_model=ChannelSummaryResponse)
def youtube_channel(
    account_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_required_identity),
    adapter: PublicationAdapter = Depends(get_publication_adapter),
):
    """Title and statistics of the connected channel."""
    return channel_summary(db, identity, get_account(db, account_id), adapter)
