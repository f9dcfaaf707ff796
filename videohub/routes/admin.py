"""
Admin routes for managing password-based editors.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from ..admin import create_editor, list_managed_editors, remove_user
from ..database import get_db
from ..dependencies import get_admin_identity
from ..identity import Identity
from ..responses import deleted
from ..schemas.admin import EditorCreate, ManagedEditorResponse, ProvisionedEditorResponse

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/users", response_model=List[ManagedEditorResponse])
def get_users(
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_admin_identity),
):
    """Editors on the accounts the caller owns."""
    return [
        ManagedEditorResponse(
            id=entry.user.id,
            email=entry.user.email,
            name=entry.user.name,
            auth_origin=entry.user.auth_origin,
            accounts=entry.account_names,
        )
        for entry in list_managed_editors(db, identity)
    ]


@router.post("/editors", response_model=ProvisionedEditorResponse)
def post_editor(
    body: EditorCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_admin_identity),
):
    """Create a password user and make them an editor on every account the caller owns."""
    provisioned = create_editor(db, identity, body.name, body.email, body.password)
    return ProvisionedEditorResponse(
        id=provisioned.user.id,
        email=provisioned.user.email,
        name=provisioned.user.name,
        assigned_accounts=provisioned.assigned_accounts,
    )


@router.delete("/users/{user_id}")
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_admin_identity),
):
    user_deleted = remove_user(db, identity, user_id)
    message = "User deleted" if user_deleted else "Editor removed from your accounts"
    return deleted(message, meta={"user_deleted": user_deleted})
