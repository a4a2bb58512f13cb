from fastapi import APIRouter, Depends

from garment_hr.api.deps import get_current_session
from garment_hr.core.capabilities import permissions_by_category, selectable_roles
from garment_hr.core.rbac import resolve_permissions
from garment_hr.models.auth import Session
from garment_hr.models.permissions import CapabilityGroup, CapabilityOption, RoleOption


router = APIRouter(prefix="/permissions", tags=["Permissions"])


@router.get("/roles", response_model=list[RoleOption])
def list_roles(session: Session = Depends(get_current_session)) -> list[RoleOption]:
    _ = session
    return [
        RoleOption(
            role=info.role,
            label=info.label,
            description=info.description,
            permissions=resolve_permissions(info.role),
        )
        for info in selectable_roles()
    ]


@router.get("/categories", response_model=list[CapabilityGroup])
def list_categories(session: Session = Depends(get_current_session)) -> list[CapabilityGroup]:
    _ = session
    return [
        CapabilityGroup(
            category=category,
            capabilities=[
                CapabilityOption(capability=i.capability, label=i.label, description=i.description)
                for i in infos
            ],
        )
        for category, infos in permissions_by_category().items()
    ]
