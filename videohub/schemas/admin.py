from pydantic import BaseModel, EmailStr
from typing import List, Optional


class EditorCreate(BaseModel):
    name: str
    email: EmailStr
    password: str


class ManagedEditorResponse(BaseModel):
    id: int
    email: str
    name: Optional[str] = None
    auth_origin: str
    accounts: List[str]


class ProvisionedEditorResponse(BaseModel):
    id: int
    email: str
    name: Optional[str] = None
    assigned_accounts: int
