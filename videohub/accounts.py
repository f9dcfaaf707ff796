"""
Account and editor management.
"""
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from .database import transaction
from .errors import Conflict, NotFound, ValidationFailed
from .identity import Identity
from .logging_config import get_logger
from .models.account import Account
from .models.role_assignment import RoleAssignment, ROLE_OWNER, ROLE_EDITOR
from .models.user import User
from .policy import (
    require_account_access,
    require_channel_authorization,
    require_editor_management,
)
from .worker.platform_upload import ChannelCredentials, ChannelSummary, PublicationAdapter

logger = get_logger("accounts")


def create_account(db: Session, identity: Identity, name: str, channel_id: Optional[str] = None) -> Account:
    """Create an account owned by the caller, together with its owner assignment."""
    if not name or not name.strip():
        raise ValidationFailed("name is required", {"field": "name"})

    with transaction(db):
        account = Account(name=name.strip(), channel_id=channel_id or None, owner_id=identity.user_id)
        db.add(account)
        db.flush()
        db.add(RoleAssignment(user_id=identity.user_id, account_id=account.id, role=ROLE_OWNER))

    db.refresh(account)
    logger.info("Account created", account_id=account.id, owner_id=identity.user_id)
    return account


def add_editor(db: Session, identity: Identity, account: Account, email: str) -> RoleAssignment:
    require_editor_management(db, identity, account)

    user = db.query(User).filter(User.email == email).first()
    if user is None:
        raise NotFound("User", email)

    existing = (
        db.query(RoleAssignment)
        .filter(RoleAssignment.user_id == user.id, RoleAssignment.account_id == account.id)
        .first()
    )
    if existing is not None:
        raise Conflict(f"User already holds the '{existing.role}' role on this account")

    assignment = RoleAssignment(user_id=user.id, account_id=account.id, role=ROLE_EDITOR)
    db.add(assignment)
    db.commit()
    db.refresh(assignment)
    logger.info("Editor added", account_id=account.id, user_id=user.id)
    return assignment


def remove_editor(db: Session, identity: Identity, account: Account, user_id: int) -> None:
    require_editor_management(db, identity, account)

    deleted = (
        db.query(RoleAssignment)
        .filter(
            RoleAssignment.user_id == user_id,
            RoleAssignment.account_id == account.id,
            RoleAssignment.role == ROLE_EDITOR,
        )
        .delete(synchronize_session=False)
    )
    db.commit()
    if not deleted:
        raise NotFound("Editor", user_id)
    logger.info("Editor removed", account_id=account.id, user_id=user_id)


def list_editors(db: Session, identity: Identity, account: Account) -> List[User]:
    require_account_access(db, identity, account)
    return (
        db.query(User)
        .join(RoleAssignment, RoleAssignment.user_id == User.id)
        .filter(RoleAssignment.account_id == account.id, RoleAssignment.role == ROLE_EDITOR)
        .order_by(User.email)
        .all()
    )


def attach_channel_credentials(
    db: Session,
    identity: Identity,
    account: Account,
    credentials: ChannelCredentials,
) -> Account:
    """Store publishing tokens on the account and record who authorized them."""
    require_channel_authorization(db, identity, account)
    if not credentials.access_token:
        raise ValidationFailed("access_token is required", {"field": "access_token"})

    account.channel_access_token = credentials.access_token
    if credentials.refresh_token:
        account.channel_refresh_token = credentials.refresh_token
    account.channel_token_expires_at = credentials.expires_at
    account.channel_token_updated_at = datetime.now(timezone.utc)
    account.authorized_by_id = identity.user_id
    db.commit()
    db.refresh(account)
    logger.info("Channel credentials stored", account_id=account.id, authorized_by=identity.user_id)
    return account


def channel_summary(db: Session, identity: Identity, account: Account, adapter: PublicationAdapter) -> ChannelSummary:
    """Read-only profile of the account's connected channel."""
    require_account_access(db, identity, account)
    if not account.channel_id:
        raise ValidationFailed("Account has no channel_id", {"account_id": account.id})
    if not account.channel_access_token:
        raise ValidationFailed("Account has no channel credentials", {"account_id": account.id})

    credentials = ChannelCredentials(
        access_token=account.channel_access_token,
        refresh_token=account.channel_refresh_token,
        expires_at=account.channel_token_expires_at,
    )
    return adapter.channel_summary(credentials, account.channel_id)
