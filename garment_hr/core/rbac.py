from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Iterable, Optional

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from garment_hr.models.auth import Session


class Role(str, Enum):
    ADMIN = "admin"
    HR_MANAGER = "hr_manager"
    HR_STAFF = "hr_staff"
    VIEWER = "viewer"
    CUSTOM = "custom"


class Capability(str, Enum):
    VIEW_EMPLOYEES = "view_employees"
    ADD_EMPLOYEES = "add_employees"
    EDIT_EMPLOYEES = "edit_employees"
    DELETE_EMPLOYEES = "delete_employees"
    MANAGE_USERS = "manage_users"
    VIEW_ALL_DEPARTMENTS = "view_all_departments"
    EXPORT_DATA = "export_data"
    VIEW_REPORTS = "view_reports"
    MANAGE_SETTINGS = "manage_settings"


class PermissionSet(BaseModel):
    """Complete set of capability flags; every flag is required."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    view_employees: bool
    add_employees: bool
    edit_employees: bool
    delete_employees: bool
    manage_users: bool
    view_all_departments: bool
    export_data: bool
    view_reports: bool
    manage_settings: bool

    @classmethod
    def from_granted(cls, granted: Iterable[Capability]) -> PermissionSet:
        granted = set(granted)
        return cls(**{cap.value: cap in granted for cap in Capability})

    def has(self, capability: Capability) -> bool:
        return bool(getattr(self, capability.value))

    def granted(self) -> frozenset[Capability]:
        return frozenset(cap for cap in Capability if self.has(cap))

    def with_flag(self, capability: Capability, value: bool) -> PermissionSet:
        return PermissionSet(**{**self.model_dump(), capability.value: bool(value)})


PRESET_ROLES: tuple[Role, ...] = (Role.ADMIN, Role.HR_MANAGER, Role.HR_STAFF, Role.VIEWER)

ROLE_PERMISSIONS: dict[Role, frozenset[Capability]] = {
    Role.ADMIN: frozenset(Capability),
    Role.HR_MANAGER: frozenset(
        {
            Capability.VIEW_EMPLOYEES,
            Capability.ADD_EMPLOYEES,
            Capability.EDIT_EMPLOYEES,
            Capability.DELETE_EMPLOYEES,
            Capability.VIEW_ALL_DEPARTMENTS,
            Capability.EXPORT_DATA,
            Capability.VIEW_REPORTS,
        }
    ),
    Role.HR_STAFF: frozenset(
        {
            Capability.VIEW_EMPLOYEES,
            Capability.ADD_EMPLOYEES,
        }
    ),
    Role.VIEWER: frozenset(
        {
            Capability.VIEW_EMPLOYEES,
        }
    ),
}


def parse_role(role: Role | str) -> Optional[Role]:
    try:
        return Role(role)
    except ValueError:
        return None


def parse_capability(capability: Capability | str) -> Optional[Capability]:
    try:
        return Capability(capability)
    except ValueError:
        return None


def resolve_permissions(role: Role | str) -> PermissionSet:
    """Return the preset permission set of a concrete role.

    ``custom`` and unknown tags have no preset and resolve to the viewer set,
    the most restrictive one.
    """
    granted = ROLE_PERMISSIONS.get(parse_role(role), ROLE_PERMISSIONS[Role.VIEWER])
    return PermissionSet.from_granted(granted)


def is_custom(current: PermissionSet, role: Role | str) -> bool:
    return current != resolve_permissions(role)


def bind_role(
    role: Role | str,
    permissions: Optional[PermissionSet] = None,
) -> tuple[Role, PermissionSet]:
    """Normalize a requested (role, permissions) pair before it is stored.

    Without permissions the role's preset is used. Permissions that differ
    from a concrete role's preset relabel the role as ``custom``.
    """
    parsed = parse_role(role)
    if parsed is None:
        raise ValueError(f"Unknown role '{role}'")

    if permissions is None:
        return parsed, resolve_permissions(parsed)
    if parsed != Role.CUSTOM and is_custom(permissions, parsed):
        return Role.CUSTOM, permissions
    return parsed, permissions


def authorize(session: Optional[Session], capability: Capability | str) -> bool:
    if session is None:
        return False
    parsed = parse_capability(capability)
    if parsed is None:
        return False
    return session.permissions.has(parsed)
