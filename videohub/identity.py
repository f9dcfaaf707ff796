"""
Identity resolution.

Turns a verified principal (Google sign-in or email/password) into a canonical
``Identity`` and keeps the admin bookkeeping rows in place.
"""
from dataclasses import dataclass
from typing import Optional, Tuple

from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from .auth import create_tokens, verify_password, verify_token
from .errors import AuthenticationFailed
from .logging_config import auth_logger
from .models.role_assignment import RoleAssignment, ROLE_OWNER
from .models.user import User, ROLE_ADMIN, ORIGIN_OAUTH, ORIGIN_PASSWORD

EXTERNAL = "external"
LOCAL = "local"


@dataclass(frozen=True)
class UserRef:
    """Canonical user reference: an external subject id or a local user id."""

    kind: str
    id: str

    def __str__(self) -> str:
        return f"{self.kind}:{self.id}"

    @classmethod
    def parse(cls, value: str) -> "UserRef":
        kind, sep, ident = (value or "").partition(":")
        if not sep or not ident or kind not in (EXTERNAL, LOCAL):
            raise ValueError(f"Malformed user reference: {value!r}")
        return cls(kind, ident)

    @classmethod
    def for_user(cls, user: User) -> "UserRef":
        if user.auth_origin == ORIGIN_OAUTH and user.google_id:
            return cls(EXTERNAL, user.google_id)
        return cls(LOCAL, str(user.id))


@dataclass(frozen=True)
class VerifiedPrincipal:
    """Output of an external sign-in verification."""

    subject_id: str
    email: str
    name: Optional[str] = None
    avatar_url: Optional[str] = None


@dataclass(frozen=True)
class Identity:
    user_id: int
    ref: UserRef
    role: str
    email: str
    name: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @classmethod
    def from_user(cls, user: User) -> "Identity":
        return cls(
            user_id=user.id,
            ref=UserRef.for_user(user),
            role=user.role,
            email=user.email,
            name=user.name,
        )


def resolve_oauth_principal(db: Session, principal: VerifiedPrincipal) -> Identity:
    """
    Sign in (or sign up) a Google-verified user.

    Lookup order is subject id, then email. A password account with the same
    email is linked to the Google identity and signs in through Google from
    then on. Every Google sign-in is trusted as an administrator.
    """
    if not principal.subject_id or not principal.email:
        raise AuthenticationFailed()

    user = db.query(User).filter(User.google_id == principal.subject_id).first()

    if user is None:
        user = db.query(User).filter(User.email == principal.email).first()
        if user is not None:
            if user.google_id is not None:
                # Same email already bound to another Google subject
                auth_logger.warning("Google subject mismatch for email", user_id=user.id)
                raise AuthenticationFailed()
            auth_logger.info("Linking Google identity to existing user", user_id=user.id)
            user.google_id = principal.subject_id
            user.auth_origin = ORIGIN_OAUTH
            user.hashed_password = None

    if user is None:
        user = User(
            google_id=principal.subject_id,
            email=principal.email,
            auth_origin=ORIGIN_OAUTH,
        )
        db.add(user)
        auth_logger.info("Creating user from Google sign-in", email=principal.email)

    # TODO: gate admin promotion behind an allow-list once product confirms who may use Google sign-in
    user.role = ROLE_ADMIN
    user.name = principal.name or user.name
    user.avatar_url = principal.avatar_url or user.avatar_url
    db.commit()
    db.refresh(user)

    ensure_global_owner_sentinel(db, user)
    return Identity.from_user(user)


def resolve_password_login(db: Session, email: str, password: str) -> Identity:
    """Check email/password credentials for an admin-provisioned account."""
    user = (
        db.query(User)
        .filter(User.email == email, User.auth_origin == ORIGIN_PASSWORD)
        .first()
    )
    if (
        user is None
        or not user.hashed_password
        or not verify_password(password, user.hashed_password)
    ):
        auth_logger.warning("Password sign-in rejected", email=email)
        raise AuthenticationFailed("Invalid email or password")
    return Identity.from_user(user)


def resolve_bearer(db: Session, ref: UserRef) -> Optional[Identity]:
    """Load the identity behind a token subject, or None if it no longer exists."""
    if ref.kind == EXTERNAL:
        user = db.query(User).filter(User.google_id == ref.id).first()
    else:
        try:
            user_id = int(ref.id)
        except ValueError:
            return None
        user = (
            db.query(User)
            .filter(User.id == user_id, User.auth_origin == ORIGIN_PASSWORD)
            .first()
        )
    return Identity.from_user(user) if user else None


def ensure_global_owner_sentinel(db: Session, user: User) -> RoleAssignment:
    """Create the admin's global owner sentinel unless it already exists."""
    insert = postgresql_insert if db.get_bind().dialect.name == "postgresql" else sqlite_insert
    stmt = (
        insert(RoleAssignment)
        .values(user_id=user.id, account_id=None, role=ROLE_OWNER, is_global_admin=True)
        .on_conflict_do_nothing(
            index_elements=[RoleAssignment.user_id],
            index_where=RoleAssignment.account_id.is_(None),
        )
    )
    db.execute(stmt)
    db.commit()
    return (
        db.query(RoleAssignment)
        .filter(RoleAssignment.user_id == user.id, RoleAssignment.account_id.is_(None))
        .one()
    )


def issue_tokens(identity: Identity) -> Tuple[str, str]:
    return create_tokens(str(identity.ref))


def refresh_session(db: Session, refresh_token: str) -> Optional[Tuple[str, str]]:
    """Use a refresh token to get new access and refresh tokens."""
    payload = verify_token(refresh_token, "refresh")
    if not payload:
        return None
    try:
        ref = UserRef.parse(payload.get("sub"))
    except ValueError:
        return None

    # Verify user still exists
    identity = resolve_bearer(db, ref)
    if identity is None:
        return None
    return issue_tokens(identity)
