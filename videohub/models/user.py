"""
User model for authentication and ownership.
"""
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from ..database import Base

ROLE_ADMIN = "admin"
ROLE_USER = "user"

ORIGIN_OAUTH = "oauth"
ORIGIN_PASSWORD = "password"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    google_id = Column(String(255), unique=True, index=True, nullable=True)  # external subject id
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(100))
    avatar_url = Column(String(1024), nullable=True)
    role = Column(String(20), default=ROLE_USER, nullable=False)  # admin, user
    auth_origin = Column(String(20), nullable=False, index=True)  # oauth, password
    hashed_password = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # Relationships
    role_assignments = relationship("RoleAssignment", back_populates="user", cascade="all, delete-orphan")
    owned_accounts = relationship("Account", foreign_keys="Account.owner_id", viewonly=True)
