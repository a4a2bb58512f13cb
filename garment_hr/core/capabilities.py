"""Display metadata for capabilities and roles.

Every capability must carry a label, a description and a category; the
mapping is checked when this module is imported so a missing entry fails at
startup instead of rendering as a blank toggle.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from garment_hr.core.rbac import PRESET_ROLES, Capability, Role


class CapabilityCategory(str, Enum):
    EMPLOYEES = "Employees"
    DATA = "Data"
    ADMINISTRATION = "Administration"


@dataclass(frozen=True)
class CapabilityInfo:
    capability: Capability
    label: str
    description: str
    category: CapabilityCategory


@dataclass(frozen=True)
class RoleInfo:
    role: Role
    label: str
    description: str


CAPABILITY_METADATA: dict[Capability, CapabilityInfo] = {
    info.capability: info
    for info in (
        CapabilityInfo(
            Capability.VIEW_EMPLOYEES,
            "View Employees",
            "Can view employee list and profiles",
            CapabilityCategory.EMPLOYEES,
        ),
        CapabilityInfo(
            Capability.ADD_EMPLOYEES,
            "Add Employees",
            "Can add new employees to the system",
            CapabilityCategory.EMPLOYEES,
        ),
        CapabilityInfo(
            Capability.EDIT_EMPLOYEES,
            "Edit Employees",
            "Can modify existing employee information",
            CapabilityCategory.EMPLOYEES,
        ),
        CapabilityInfo(
            Capability.DELETE_EMPLOYEES,
            "Delete Employees",
            "Can remove employees from the system",
            CapabilityCategory.EMPLOYEES,
        ),
        CapabilityInfo(
            Capability.VIEW_ALL_DEPARTMENTS,
            "View All Departments",
            "Can view employees from all departments",
            CapabilityCategory.EMPLOYEES,
        ),
        CapabilityInfo(
            Capability.EXPORT_DATA,
            "Export Data",
            "Can export employee data to Excel/CSV/PDF",
            CapabilityCategory.DATA,
        ),
        CapabilityInfo(
            Capability.VIEW_REPORTS,
            "View Reports",
            "Can access analytics and reports",
            CapabilityCategory.DATA,
        ),
        CapabilityInfo(
            Capability.MANAGE_USERS,
            "Manage Users",
            "Can create, edit, and delete user accounts",
            CapabilityCategory.ADMINISTRATION,
        ),
        CapabilityInfo(
            Capability.MANAGE_SETTINGS,
            "Manage Settings",
            "Can modify application settings",
            CapabilityCategory.ADMINISTRATION,
        ),
    )
}

ROLE_METADATA: dict[Role, RoleInfo] = {
    Role.ADMIN: RoleInfo(Role.ADMIN, "Administrator", "Full system access - all permissions enabled"),
    Role.HR_MANAGER: RoleInfo(Role.HR_MANAGER, "HR Manager", "Can manage employees and view reports"),
    Role.HR_STAFF: RoleInfo(Role.HR_STAFF, "HR Staff", "Can view and add employees only"),
    Role.VIEWER: RoleInfo(Role.VIEWER, "Viewer", "Read-only access to employee data"),
    Role.CUSTOM: RoleInfo(Role.CUSTOM, "Custom", "Custom permissions configured manually"),
}


def validate_metadata() -> None:
    missing = [cap.value for cap in Capability if cap not in CAPABILITY_METADATA]
    if missing:
        raise RuntimeError(f"Capabilities without display metadata: {', '.join(missing)}")

    mismatched = [cap.value for cap, info in CAPABILITY_METADATA.items() if info.capability != cap]
    if mismatched:
        raise RuntimeError(f"Capability metadata filed under the wrong key: {', '.join(mismatched)}")

    missing_roles = [role.value for role in Role if role not in ROLE_METADATA]
    if missing_roles:
        raise RuntimeError(f"Roles without display metadata: {', '.join(missing_roles)}")


def permissions_by_category() -> dict[CapabilityCategory, list[CapabilityInfo]]:
    grouped: dict[CapabilityCategory, list[CapabilityInfo]] = {category: [] for category in CapabilityCategory}
    for info in CAPABILITY_METADATA.values():
        grouped[info.category].append(info)
    return grouped


def role_label(role: Role | str) -> str:
    try:
        return ROLE_METADATA[Role(role)].label
    except ValueError:
        return str(role)


def selectable_roles() -> list[RoleInfo]:
    """Roles offered in a role selector; ``custom`` is reached by editing flags."""
    return [ROLE_METADATA[role] for role in PRESET_ROLES]


validate_metadata()
