from fastapi import APIRouter, Depends, status

from garment_hr.api.deps import require_capability
from garment_hr.core.rbac import Capability
from garment_hr.models.auth import (
    CreateUserRequest,
    ResetPasswordRequest,
    Session,
    UpdateUserRequest,
    UserAccount,
)
from garment_hr.services.container import account_service


router = APIRouter(prefix="/users", tags=["User Management"])

manage_users = require_capability(Capability.MANAGE_USERS)


@router.get("", response_model=list[UserAccount])
def list_users(session: Session = Depends(manage_users)) -> list[UserAccount]:
    return account_service.list_accounts(session)


@router.get("/{user_id}", response_model=UserAccount)
def get_user(user_id: int, session: Session = Depends(manage_users)) -> UserAccount:
    return account_service.get_account(session, user_id)


@router.post("", response_model=UserAccount, status_code=status.HTTP_201_CREATED)
def create_user(payload: CreateUserRequest, session: Session = Depends(manage_users)) -> UserAccount:
    return account_service.create_account(session, payload)


@router.put("/{user_id}", response_model=UserAccount)
def update_user(
    user_id: int,
    payload: UpdateUserRequest,
    session: Session = Depends(manage_users),
) -> UserAccount:
    return account_service.update_account(session, user_id, payload)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: int, session: Session = Depends(manage_users)) -> None:
    account_service.delete_account(session, user_id)


@router.post("/{user_id}/reset-password")
def reset_password(
    user_id: int,
    payload: ResetPasswordRequest,
    session: Session = Depends(manage_users),
) -> dict[str, str]:
    account_service.reset_password(session, user_id, payload.new_password)
    return {"message": "Password reset successfully"}
