from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm

from garment_hr.api.deps import get_current_session, oauth2_scheme
from garment_hr.models.auth import ChangePasswordRequest, Session, Token
from garment_hr.services.container import auth_service


router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/token", response_model=Token)
def login_for_access_token(form_data: OAuth2PasswordRequestForm = Depends()) -> Token:
    session = auth_service.login(form_data.username, form_data.password)
    return auth_service.issue_token(session)


@router.get("/me", response_model=Session)
def read_me(session: Session = Depends(get_current_session)) -> Session:
    return session


@router.post("/logout")
def logout(
    token: str = Depends(oauth2_scheme),
    session: Session = Depends(get_current_session),
) -> dict[str, str]:
    _ = session
    auth_service.logout(token)
    return {"message": "Signed out"}


@router.post("/password")
def change_password(
    payload: ChangePasswordRequest,
    session: Session = Depends(get_current_session),
) -> dict[str, str]:
    auth_service.change_own_password(session, payload.current_password, payload.new_password)
    return {"message": "Password changed"}
