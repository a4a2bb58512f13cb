from collections.abc import Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from garment_hr.core.exceptions import AuthenticationError
from garment_hr.core.rbac import Capability, authorize
from garment_hr.models.auth import Session
from garment_hr.services.container import auth_service


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")


def get_current_session(token: str = Depends(oauth2_scheme)) -> Session:
    try:
        return auth_service.session_from_token(token)
    except AuthenticationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=exc.message,
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


def require_capability(capability: Capability) -> Callable[[Session], Session]:
    def dependency(session: Session = Depends(get_current_session)) -> Session:
        if not authorize(session, capability):
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return session

    return dependency
