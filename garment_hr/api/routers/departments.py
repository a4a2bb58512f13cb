from fastapi import APIRouter, Depends

from garment_hr.api.deps import get_current_session
from garment_hr.models.auth import Session
from garment_hr.services.container import directory_service


router = APIRouter(prefix="/departments", tags=["Departments"])


@router.get("", response_model=list[str])
def list_departments(session: Session = Depends(get_current_session)) -> list[str]:
    _ = session
    return directory_service.list_departments()
