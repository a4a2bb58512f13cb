"""Role/permission editing for one account form.

An editor keeps the ``(role, permissions)`` pair of a create or update form
consistent while the user picks a role preset and flips individual flags:

* picking a concrete role resets the flags to that role's preset, dropping
  any hand edits;
* flipping a flag relabels the role ``custom`` as soon as the flags stop
  matching the preset of the last concrete role, and back again if they
  match it once more.

When the account being edited is the signed-in user's own, the
``manage_users`` flag and the active switch are locked so the user cannot
lock themselves out of user management.

This is the edit-session API behind the account form; the HTTP routes take
finished create/update requests and go straight to the account store.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from enum import Enum
from typing import Callable, Optional, TypeVar

from garment_hr.core.config import settings
from garment_hr.core.exceptions import (
    AuthorizationDenied,
    SelfLockoutPrevented,
    StoreTimeout,
    ValidationError,
)
from garment_hr.core.rbac import (
    PRESET_ROLES,
    Capability,
    PermissionSet,
    Role,
    authorize,
    is_custom,
    parse_capability,
    parse_role,
    resolve_permissions,
)
from garment_hr.core.validators import (
    full_name_errors,
    normalize_department,
    password_errors,
    username_errors,
)
from garment_hr.models.auth import CreateUserRequest, Session, UpdateUserRequest, UserAccount
from garment_hr.services.account_service import AccountService

logger = logging.getLogger(__name__)

T = TypeVar("T")

ACTIVE_CONTROL = "is_active"


class EditState(str, Enum):
    PRESET = "preset"
    CUSTOM = "custom"


def call_with_timeout(func: Callable[[], T], timeout: Optional[float]) -> T:
    if timeout is None:
        return func()
    executor = ThreadPoolExecutor(max_workers=1)
    future = executor.submit(func)
    try:
        return future.result(timeout=timeout)
    except FutureTimeout as exc:
        raise StoreTimeout(f"The account store did not answer within {timeout:g} seconds") from exc
    finally:
        executor.shutdown(wait=False)


class PermissionEditor:
    def __init__(self, actor: Session, account: Optional[UserAccount] = None) -> None:
        self.actor = actor
        self.account = account

        if account is None:
            self.base_role = Role.VIEWER
            self.permissions = resolve_permissions(Role.VIEWER)
            self.full_name = ""
            self.department_access: Optional[str] = None
            self.is_active = True
        else:
            # A stored custom role has no preset to drift from; measure against viewer.
            self.base_role = account.role if account.role in PRESET_ROLES else Role.VIEWER
            self.permissions = account.permissions
            self.full_name = account.full_name
            self.department_access = account.department_access
            self.is_active = account.is_active

        if account is not None and account.role == Role.CUSTOM:
            self.role = Role.CUSTOM
        else:
            self.role = Role.CUSTOM if is_custom(self.permissions, self.base_role) else self.base_role

    @classmethod
    def for_new_account(cls, actor: Session) -> PermissionEditor:
        return cls(actor)

    @classmethod
    def for_account(cls, actor: Session, account: UserAccount) -> PermissionEditor:
        return cls(actor, account)

    @property
    def state(self) -> EditState:
        return EditState.CUSTOM if self.role == Role.CUSTOM else EditState.PRESET

    @property
    def is_self_edit(self) -> bool:
        return self.account is not None and self.account.id == self.actor.user_id

    @property
    def locked_controls(self) -> frozenset[str]:
        """Controls a form must render disabled."""
        if not self.is_self_edit:
            return frozenset()
        return frozenset({Capability.MANAGE_USERS.value, ACTIVE_CONTROL})

    def select_role(self, role: Role | str) -> PermissionSet:
        parsed = parse_role(role)
        if parsed is None:
            raise ValidationError(f"Invalid role '{role}'")
        if parsed == Role.CUSTOM:
            raise ValidationError("Custom is set by changing individual permissions")

        preset = resolve_permissions(parsed)
        if self.is_self_edit and not preset.manage_users:
            raise SelfLockoutPrevented("You cannot remove your own user management permission")

        # Hand edits are discarded without confirmation.
        self.base_role = parsed
        self.permissions = preset
        self.role = parsed
        return self.permissions

    def toggle(self, capability: Capability | str, value: Optional[bool] = None) -> PermissionSet:
        parsed = parse_capability(capability)
        if parsed is None:
            raise ValidationError(f"Unknown permission '{capability}'")

        new_value = (not self.permissions.has(parsed)) if value is None else bool(value)
        if parsed == Capability.MANAGE_USERS and self.is_self_edit and not new_value:
            raise SelfLockoutPrevented("You cannot remove your own user management permission")

        self.permissions = self.permissions.with_flag(parsed, new_value)
        self.role = Role.CUSTOM if is_custom(self.permissions, self.base_role) else self.base_role
        return self.permissions

    def set_full_name(self, full_name: str) -> None:
        self.full_name = full_name

    def set_department_access(self, department: Optional[str]) -> None:
        self.department_access = normalize_department(department)

    def set_active(self, is_active: bool) -> None:
        if self.is_self_edit and not is_active:
            raise SelfLockoutPrevented("You cannot deactivate your own account")
        self.is_active = bool(is_active)

    def create_request(self, username: str, password: str) -> CreateUserRequest:
        if self.account is not None:
            raise ValidationError("This form edits an existing account")
        errors = username_errors(username) + password_errors(password) + full_name_errors(self.full_name)
        if errors:
            raise ValidationError(errors)
        return CreateUserRequest(
            username=username,
            password=password,
            full_name=self.full_name.strip(),
            role=self.role,
            department_access=self.department_access,
            permissions=self.permissions,
        )

    def update_request(self) -> UpdateUserRequest:
        if self.account is None:
            raise ValidationError("This form creates a new account")
        errors = full_name_errors(self.full_name)
        if errors:
            raise ValidationError(errors)
        return UpdateUserRequest(
            full_name=self.full_name.strip(),
            role=self.role,
            department_access=self.department_access,
            is_active=self.is_active,
            permissions=self.permissions,
        )

    def submit(
        self,
        accounts: AccountService,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: Optional[float] = settings.store_timeout_seconds,
    ) -> UserAccount:
        """Send the form to the account store.

        Failures propagate unchanged and leave the editor as it was, so the
        caller can correct the form and submit again.
        """
        if not authorize(self.actor, Capability.MANAGE_USERS):
            raise AuthorizationDenied("Permission denied. Only user managers can change accounts.")

        # The store refuses to write past the deadline, so an abandoned call
        # never lands after StoreTimeout has been raised here.
        deadline = None if timeout is None else time.monotonic() + timeout
        if self.account is None:
            request = self.create_request(username or "", password or "")
            result = call_with_timeout(
                lambda: accounts.create_account(self.actor, request, deadline=deadline), timeout
            )
        else:
            request = self.update_request()
            account_id = self.account.id
            result = call_with_timeout(
                lambda: accounts.update_account(self.actor, account_id, request, deadline=deadline), timeout
            )

        logger.debug("Submitted %s as %s", result.username, result.role.value)
        self.account = result
        return result
