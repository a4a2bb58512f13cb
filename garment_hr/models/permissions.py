from pydantic import BaseModel

from garment_hr.core.capabilities import CapabilityCategory
from garment_hr.core.rbac import Capability, PermissionSet, Role


class RoleOption(BaseModel):
    role: Role
    label: str
    description: str
    permissions: PermissionSet


class CapabilityOption(BaseModel):
    capability: Capability
    label: str
    description: str


class CapabilityGroup(BaseModel):
    category: CapabilityCategory
    capabilities: list[CapabilityOption]
