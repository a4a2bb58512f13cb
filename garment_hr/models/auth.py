from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from garment_hr.core.rbac import PermissionSet, Role


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime


class Session(BaseModel):
    """Identity and permission snapshot taken at login."""

    user_id: int
    username: str
    full_name: str
    role: Role
    department_access: Optional[str] = None
    permissions: PermissionSet


class UserAccount(BaseModel):
    id: int
    username: str
    full_name: str
    role: Role
    department_access: Optional[str] = None
    is_active: bool = True
    permissions: PermissionSet
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None


class CreateUserRequest(BaseModel):
    username: str
    password: str
    full_name: str
    role: Role = Role.VIEWER
    department_access: Optional[str] = None
    permissions: Optional[PermissionSet] = None


class UpdateUserRequest(BaseModel):
    full_name: str
    role: Role
    department_access: Optional[str] = None
    is_active: bool = True
    permissions: Optional[PermissionSet] = None


class ResetPasswordRequest(BaseModel):
    new_password: str = Field(min_length=1)


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str
