"""
Admin operations: provisioning and removing password-based editors.
"""
from dataclasses import dataclass
from typing import List

from sqlalchemy.orm import Session

from .auth import get_password_hash
from .database import transaction
from .errors import AccessDenied, Conflict, NotFound, ValidationFailed
from .identity import Identity
from .logging_config import get_logger
from .models.account import Account
from .models.role_assignment import RoleAssignment, ROLE_EDITOR
from .models.user import User, ROLE_ADMIN, ROLE_USER, ORIGIN_PASSWORD
from .policy import require_admin

logger = get_logger("admin")


@dataclass
class ManagedEditor:
    user: User
    account_names: List[str]


@dataclass
class ProvisionedEditor:
    user: User
    assigned_accounts: int


def _owned_accounts(db: Session, identity: Identity) -> List[Account]:
    return db.query(Account).filter(Account.owner_id == identity.user_id).order_by(Account.id).all()


def create_editor(db: Session, identity: Identity, name: str, email: str, password: str) -> ProvisionedEditor:
    """
    Provision an email/password user and make them an editor on every account
    the calling admin owns.
    """
    require_admin(identity)
    if not name or not email or not password:
        raise ValidationFailed("Name, email, and password are required")

    if db.query(User).filter(User.email == email).first() is not None:
        raise Conflict("User with this email already exists")

    accounts = _owned_accounts(db, identity)
    with transaction(db):
        user = User(
            email=email,
            name=name,
            role=ROLE_USER,
            auth_origin=ORIGIN_PASSWORD,
            hashed_password=get_password_hash(password),
        )
        db.add(user)
        db.flush()
        for account in accounts:
            db.add(RoleAssignment(user_id=user.id, account_id=account.id, role=ROLE_EDITOR))

    db.refresh(user)
    logger.info("Editor provisioned", user_id=user.id, assigned_accounts=len(accounts), admin_id=identity.user_id)
    return ProvisionedEditor(user=user, assigned_accounts=len(accounts))


def list_managed_editors(db: Session, identity: Identity) -> List[ManagedEditor]:
    """Editors of the accounts the calling admin owns, with those account names."""
    require_admin(identity)
    accounts = {account.id: account for account in _owned_accounts(db, identity)}
    if not accounts:
        return []

    rows = (
        db.query(User, RoleAssignment.account_id)
        .join(RoleAssignment, RoleAssignment.user_id == User.id)
        .filter(RoleAssignment.account_id.in_(accounts.keys()), RoleAssignment.role == ROLE_EDITOR)
        .order_by(User.email, RoleAssignment.account_id)
        .all()
    )
    editors = {}
    for user, account_id in rows:
        entry = editors.setdefault(user.id, ManagedEditor(user=user, account_names=[]))
        entry.account_names.append(accounts[account_id].name)
    return list(editors.values())


def remove_user(db: Session, identity: Identity, user_id: int) -> bool:
    """
    Take an editor off the calling admin's accounts.

    The user record itself is deleted only when no other role assignment
    remains. Returns True when the user was deleted.
    """
    require_admin(identity)

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise NotFound("User", user_id)
    if user.role == ROLE_ADMIN:
        raise AccessDenied("Cannot delete admin users")

    account_ids = [account.id for account in _owned_accounts(db, identity)]
    if not account_ids:
        raise AccessDenied("You have no accounts to manage editors for")

    editor_rows = (
        db.query(RoleAssignment)
        .filter(
            RoleAssignment.user_id == user.id,
            RoleAssignment.account_id.in_(account_ids),
            RoleAssignment.role == ROLE_EDITOR,
        )
        .all()
    )
    if not editor_rows:
        raise AccessDenied("You can only delete editors from your own accounts")

    with transaction(db):
        for row in editor_rows:
            db.delete(row)
        db.flush()
        remaining = db.query(RoleAssignment).filter(RoleAssignment.user_id == user.id).count()
        deleted = remaining == 0
        if deleted:
            db.delete(user)

    logger.info("Editor removed by admin", user_id=user_id, user_deleted=deleted, admin_id=identity.user_id)
    return deleted
