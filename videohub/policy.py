"""
Access policy evaluation.

Every authorization decision about accounts, editors and videos goes through
this module. Rules, in precedence order:

1. Admins act as owners of exactly the accounts they own or authorized for
   publishing; they never see accounts they merely edit.
2. Everyone else sees the accounts they hold a role assignment on, with the
   role taken from that assignment.
3. Managing editors and publishing need the ``owner`` viewer role.
4. Reviewing needs an ``owner`` assignment on the video's account or the
   global owner sentinel.
"""
from dataclasses import dataclass
from typing import List, Optional, Sequence

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from .errors import AccessDenied, NotFound
from .identity import Identity
from .models.account import Account
from .models.role_assignment import RoleAssignment, ROLE_OWNER, ROLE_EDITOR
from .models.video import Video


@dataclass(frozen=True)
class AccountAccess:
    role: Optional[str]

    @property
    def allowed(self) -> bool:
        return self.role is not None


@dataclass(frozen=True)
class AccessibleAccount:
    account: Account
    viewer_role: str


# ============================================================
# LOOKUPS
# ============================================================

def get_account(db: Session, account_id: int) -> Account:
    account = db.query(Account).filter(Account.id == account_id).first()
    if account is None:
        raise NotFound("Account", account_id)
    return account


def get_video(db: Session, video_id: int) -> Video:
    video = db.query(Video).filter(Video.id == video_id).first()
    if video is None:
        raise NotFound("Video", video_id)
    return video


def _assignment(db: Session, identity: Identity, account_id: int) -> Optional[RoleAssignment]:
    return (
        db.query(RoleAssignment)
        .filter(
            RoleAssignment.user_id == identity.user_id,
            RoleAssignment.account_id == account_id,
        )
        .first()
    )


# ============================================================
# DECISIONS
# ============================================================

def can_access_account(db: Session, identity: Identity, account: Account) -> AccountAccess:
    """Viewer role the identity holds on ``account``, or no role at all."""
    if identity.is_admin:
        owns = identity.user_id in (account.owner_id, account.authorized_by_id)
        return AccountAccess(ROLE_OWNER if owns else None)

    assignment = _assignment(db, identity, account.id)
    return AccountAccess(assignment.role if assignment else None)


def list_accessible_accounts(db: Session, identity: Identity) -> List[AccessibleAccount]:
    if identity.is_admin:
        accounts = (
            db.query(Account)
            .filter(or_(Account.owner_id == identity.user_id, Account.authorized_by_id == identity.user_id))
            .order_by(Account.created_at, Account.id)
            .all()
        )
        return [AccessibleAccount(account, ROLE_OWNER) for account in accounts]

    rows = (
        db.query(Account, RoleAssignment.role)
        .join(RoleAssignment, RoleAssignment.account_id == Account.id)
        .filter(RoleAssignment.user_id == identity.user_id)
        .order_by(Account.created_at, Account.id)
        .all()
    )
    seen = set()
    result = []
    for account, role in rows:
        if account.id in seen:
            continue
        seen.add(account.id)
        result.append(AccessibleAccount(account, role))
    return result


def list_publishable_accounts(db: Session, identity: Identity) -> List[AccessibleAccount]:
    """
    Accounts whose channel the identity can work with.

    Admins get their own accounts that hold channel credentials; everyone else
    gets the accounts they edit that have a channel configured.
    """
    if identity.is_admin:
        return [
            entry for entry in list_accessible_accounts(db, identity)
            if entry.account.has_channel_credentials
        ]

    return [
        entry for entry in list_accessible_accounts(db, identity)
        if entry.viewer_role == ROLE_EDITOR and entry.account.channel_id
    ]


def accessible_account_ids(db: Session, identity: Identity) -> List[int]:
    return [entry.account.id for entry in list_accessible_accounts(db, identity)]


def can_upload(db: Session, identity: Identity, account: Account) -> bool:
    return can_access_account(db, identity, account).allowed


def can_manage_editors(db: Session, identity: Identity, account: Account) -> bool:
    return can_access_account(db, identity, account).role == ROLE_OWNER


def can_publish(db: Session, identity: Identity, account: Account) -> bool:
    return can_access_account(db, identity, account).role == ROLE_OWNER


def can_authorize_channel(db: Session, identity: Identity, account: Account) -> bool:
    return can_access_account(db, identity, account).role == ROLE_OWNER


def can_review(db: Session, identity: Identity, video: Video) -> bool:
    """Owner assignment on the video's account, or the global owner sentinel."""
    grant = (
        db.query(RoleAssignment.id)
        .filter(
            RoleAssignment.user_id == identity.user_id,
            RoleAssignment.role == ROLE_OWNER,
            or_(
                RoleAssignment.account_id == video.account_id,
                and_(RoleAssignment.account_id.is_(None), RoleAssignment.is_global_admin.is_(True)),
            ),
        )
        .first()
    )
    return grant is not None


# ============================================================
# ENFORCEMENT
# ============================================================

def require_admin(identity: Identity) -> None:
    if not identity.is_admin:
        raise AccessDenied("Admin access required")


def require_account_access(db: Session, identity: Identity, account: Account) -> str:
    access = can_access_account(db, identity, account)
    if not access.allowed:
        raise AccessDenied("You do not have access to this account")
    return access.role


def require_upload(db: Session, identity: Identity, account: Account) -> None:
    if not can_upload(db, identity, account):
        raise AccessDenied("Only owners and editors of this account may upload videos")


def require_editor_management(db: Session, identity: Identity, account: Account) -> None:
    if not can_manage_editors(db, identity, account):
        raise AccessDenied("Only account owners may manage editors")


def require_channel_authorization(db: Session, identity: Identity, account: Account) -> None:
    if not can_authorize_channel(db, identity, account):
        raise AccessDenied("Only account owners may authorize the channel")


def require_review(db: Session, identity: Identity, video: Video) -> None:
    if not can_review(db, identity, video):
        raise AccessDenied("Only account owners may review videos")


def require_video_access(db: Session, identity: Identity, video: Video) -> None:
    if not can_access_account(db, identity, video.account).allowed:
        raise AccessDenied("You do not have access to this video")


# ============================================================
# VISIBILITY
# ============================================================

def list_visible_videos(
    db: Session,
    identity: Identity,
    account_ids: Optional[Sequence[int]] = None,
    uploaded_by: Optional[int] = None,
    status: Optional[str] = None,
) -> List[Video]:
    """Videos on accessible accounts, newest first; requested ids outside that set are dropped."""
    allowed = accessible_account_ids(db, identity)
    if account_ids is not None:
        requested = set(account_ids)
        allowed = [account_id for account_id in allowed if account_id in requested]
    if not allowed:
        return []

    query = db.query(Video).filter(Video.account_id.in_(allowed))
    if uploaded_by is not None:
        query = query.filter(Video.uploaded_by_id == uploaded_by)
    if status:
        query = query.filter(Video.status == status)
    return query.order_by(Video.created_at.desc(), Video.id.desc()).all()
