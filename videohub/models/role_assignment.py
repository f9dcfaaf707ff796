"""
RoleAssignment model: the user <-> account edge carrying owner/editor.

A row with no account, role ``owner`` and ``is_global_admin`` set is the
global owner sentinel written for admins on sign-in.
"""
from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, Index, UniqueConstraint, text
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from ..database import Base

ROLE_OWNER = "owner"
ROLE_EDITOR = "editor"


class RoleAssignment(Base):
    __tablename__ = "role_assignments"
    __table_args__ = (
        UniqueConstraint("user_id", "account_id", name="uq_role_assignment_user_account"),
        Index(
            "uq_role_assignment_global_owner",
            "user_id",
            unique=True,
            sqlite_where=text("account_id IS NULL"),
            postgresql_where=text("account_id IS NULL"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=True, index=True)
    role = Column(String(20), nullable=False)  # owner, editor
    is_global_admin = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    user = relationship("User", back_populates="role_assignments")
    account = relationship("Account", back_populates="role_assignments")
