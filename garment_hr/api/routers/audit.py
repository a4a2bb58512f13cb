from typing import Optional

from fastapi import APIRouter, Depends, Query

from garment_hr.api.deps import require_capability
from garment_hr.core.rbac import Capability
from garment_hr.models.audit import AuditAction, AuditEntity, AuditLogResult, AuditSummary
from garment_hr.models.auth import Session
from garment_hr.services.container import audit_logger


router = APIRouter(prefix="/audit", tags=["Audit Log"])


@router.get("/events", response_model=AuditLogResult)
def list_events(
    action: Optional[AuditAction] = None,
    entity_type: Optional[AuditEntity] = None,
    username: Optional[str] = None,
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    session: Session = Depends(require_capability(Capability.MANAGE_USERS)),
) -> AuditLogResult:
    _ = session
    return audit_logger.query(
        action=action,
        entity_type=entity_type,
        username=username,
        limit=limit,
        offset=offset,
    )


@router.get("/summary", response_model=AuditSummary)
def get_summary(
    session: Session = Depends(require_capability(Capability.MANAGE_USERS)),
) -> AuditSummary:
    _ = session
    return audit_logger.summary()
