#!/usr/bin/env python3
"""
Backfill Global Owner Sentinels
===============================
Admins created before sign-in wrote the global owner sentinel have no review
rights outside their own accounts. This script creates the missing sentinel
for every admin. Safe to run repeatedly.

Usage:
    python scripts/backfill_admin_sentinels.py [--dry-run]
"""

import argparse

from videohub import models  # noqa: F401
from videohub.database import Base, SessionLocal, engine
from videohub.identity import ensure_global_owner_sentinel
from videohub.models.role_assignment import RoleAssignment
from videohub.models.user import User, ROLE_ADMIN


def backfill(dry_run: bool = False):
    """Create missing sentinels; returns (created, skipped)."""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    created = skipped = 0
    try:
        admins = db.query(User).filter(User.role == ROLE_ADMIN).order_by(User.id).all()
        if not admins:
            print("No admin users found")
            return created, skipped

        print(f"Found {len(admins)} admin users")
        print("-" * 50)

        for user in admins:
            has_sentinel = (
                db.query(RoleAssignment)
                .filter(RoleAssignment.user_id == user.id, RoleAssignment.account_id.is_(None))
                .first()
                is not None
            )
            if has_sentinel:
                print(f"✓ Exists: {user.email}")
                skipped += 1
            elif dry_run:
                print(f"[DRY RUN] Would create sentinel: {user.email}")
                created += 1
            else:
                ensure_global_owner_sentinel(db, user)
                print(f"✓ Created sentinel: {user.email}")
                created += 1
    finally:
        db.close()

    print("-" * 50)
    print(f"Created: {created}, already present: {skipped}")
    return created, skipped


def main():
    parser = argparse.ArgumentParser(description="Create missing global owner sentinels for admins")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be created without making changes"
    )
    args = parser.parse_args()

    backfill(args.dry_run)


if __name__ == "__main__":
    main()
