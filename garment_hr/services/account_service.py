from __future__ import annotations

import logging
import time
from typing import Any, Optional

from garment_hr.core.exceptions import (
    AuthorizationDenied,
    PersistenceFailure,
    SelfLockoutPrevented,
    StoreTimeout,
)
from garment_hr.core.rbac import Capability, PermissionSet, Role, authorize, bind_role, resolve_permissions
from garment_hr.core.security import hash_password
from garment_hr.core.validators import (
    normalize_department,
    require_full_name,
    require_password,
    validate_new_account,
)
from garment_hr.models.audit import AuditAction, AuditEntity
from garment_hr.models.auth import CreateUserRequest, Session, UpdateUserRequest, UserAccount
from garment_hr.repositories.data_store import DataStore, utcnow
from garment_hr.services.audit_service import AuditLogger

logger = logging.getLogger(__name__)


class AccountService:
    """Account persistence store.

    Every operation is gated on the acting session's ``manage_users`` flag and
    re-checks the self-lockout rule that editors enforce on their side.
    """

    def __init__(self, store: DataStore, audit_logger: AuditLogger) -> None:
        self.store = store
        self.audit_logger = audit_logger

    def ensure_default_admin(self, username: str, password: str) -> None:
        with self.store.lock:
            if self.store.users:
                return
            user_id = self.store.next_user_id()
            self.store.users[user_id] = {
                "id": user_id,
                "username": username,
                "hashed_password": hash_password(password),
                "full_name": "System Administrator",
                "role": Role.ADMIN,
                "department_access": None,
                "is_active": True,
                "permissions": resolve_permissions(Role.ADMIN),
                "created_at": utcnow(),
                "last_login": None,
            }
        logger.warning("Created default admin user '%s'; change its password after first login", username)

    @staticmethod
    def _require_manager(actor: Optional[Session], action: str) -> Session:
        if not authorize(actor, Capability.MANAGE_USERS):
            logger.info("Refused %s for %s", action, actor.username if actor else "anonymous session")
            raise AuthorizationDenied(f"Permission denied. Only user managers can {action}.")
        return actor

    @staticmethod
    def _check_deadline(deadline: Optional[float]) -> None:
        # Called under the store lock, right before a write.
        if deadline is not None and time.monotonic() > deadline:
            raise StoreTimeout("The account store did not answer in time; nothing was saved")

    @staticmethod
    def as_account(record: dict[str, Any]) -> UserAccount:
        return UserAccount(
            id=record["id"],
            username=record["username"],
            full_name=record["full_name"],
            role=record["role"],
            department_access=record.get("department_access"),
            is_active=bool(record.get("is_active", True)),
            permissions=record["permissions"],
            created_at=record.get("created_at"),
            last_login=record.get("last_login"),
        )

    def _get_record(self, user_id: int) -> dict[str, Any]:
        record = self.store.users.get(user_id)
        if not record:
            raise PersistenceFailure("User not found", status_code=404)
        return record

    def find_by_username(self, username: str) -> Optional[dict[str, Any]]:
        with self.store.lock:
            return next((u for u in self.store.users.values() if u["username"] == username), None)

    def list_accounts(self, actor: Optional[Session]) -> list[UserAccount]:
        self._require_manager(actor, "list users")
        with self.store.lock:
            records = sorted(self.store.users.values(), key=lambda r: r["id"])
            return [self.as_account(r) for r in records]

    def get_account(self, actor: Optional[Session], user_id: int) -> UserAccount:
        self._require_manager(actor, "view users")
        with self.store.lock:
            return self.as_account(self._get_record(user_id))

    def create_account(
        self,
        actor: Optional[Session],
        request: CreateUserRequest,
        deadline: Optional[float] = None,
    ) -> UserAccount:
        actor = self._require_manager(actor, "create users")
        validate_new_account(request.username, request.password, request.full_name)
        role, permissions = bind_role(request.role, request.permissions)
        hashed_password = hash_password(request.password)

        with self.store.lock:
            self._check_deadline(deadline)
            if self.find_by_username(request.username):
                raise PersistenceFailure("Username already exists", status_code=409)
            user_id = self.store.next_user_id()
            record = {
                "id": user_id,
                "username": request.username,
                "hashed_password": hashed_password,
                "full_name": request.full_name.strip(),
                "role": role,
                "department_access": normalize_department(request.department_access),
                "is_active": True,
                "permissions": permissions,
                "created_at": utcnow(),
                "last_login": None,
            }
            self.store.users[user_id] = record
            account = self.as_account(record)

        logger.info("User '%s' created by '%s' with role %s", account.username, actor.username, role.value)
        self.audit_logger.log_event(
            action=AuditAction.CREATE,
            entity_type=AuditEntity.USER,
            actor_id=actor.user_id,
            actor_username=actor.username,
            entity_id=str(user_id),
            details={"username": account.username, "role": role.value},
        )
        return account

    def update_account(
        self,
        actor: Optional[Session],
        user_id: int,
        request: UpdateUserRequest,
        deadline: Optional[float] = None,
    ) -> UserAccount:
        actor = self._require_manager(actor, "update users")
        full_name = require_full_name(request.full_name)
        role, permissions = bind_role(request.role, request.permissions)

        if actor.user_id == user_id:
            self._guard_self_update(permissions, request.is_active)

        with self.store.lock:
            self._check_deadline(deadline)
            record = self._get_record(user_id)
            previous_role = record["role"]
            record.update(
                {
                    "full_name": full_name,
                    "role": role,
                    "department_access": normalize_department(request.department_access),
                    "is_active": request.is_active,
                    "permissions": permissions,
                }
            )
            account = self.as_account(record)

        logger.info("User '%s' updated by '%s'", account.username, actor.username)
        self.audit_logger.log_event(
            action=AuditAction.UPDATE,
            entity_type=AuditEntity.USER,
            actor_id=actor.user_id,
            actor_username=actor.username,
            entity_id=str(user_id),
            details={
                "username": account.username,
                "previous_role": Role(previous_role).value,
                "role": role.value,
                "is_active": request.is_active,
                "granted": sorted(cap.value for cap in permissions.granted()),
            },
        )
        return account

    @staticmethod
    def _guard_self_update(permissions: PermissionSet, is_active: bool) -> None:
        if not permissions.manage_users:
            raise SelfLockoutPrevented("You cannot revoke your own user management permission")
        if not is_active:
            raise SelfLockoutPrevented("You cannot deactivate your own account")

    def delete_account(self, actor: Optional[Session], user_id: int) -> None:
        actor = self._require_manager(actor, "delete users")
        if actor.user_id == user_id:
            raise SelfLockoutPrevented("Cannot delete your own account")

        with self.store.lock:
            record = self._get_record(user_id)
            del self.store.users[user_id]

        logger.info("User '%s' deleted by '%s'", record["username"], actor.username)
        self.audit_logger.log_event(
            action=AuditAction.DELETE,
            entity_type=AuditEntity.USER,
            actor_id=actor.user_id,
            actor_username=actor.username,
            entity_id=str(user_id),
            details={"username": record["username"]},
        )

    def reset_password(self, actor: Optional[Session], user_id: int, new_password: str) -> None:
        actor = self._require_manager(actor, "reset passwords")
        require_password(new_password)

        with self.store.lock:
            record = self._get_record(user_id)
            record["hashed_password"] = hash_password(new_password)

        self.audit_logger.log_event(
            action=AuditAction.PASSWORD_RESET,
            entity_type=AuditEntity.USER,
            actor_id=actor.user_id,
            actor_username=actor.username,
            entity_id=str(user_id),
            details={"username": record["username"]},
        )

    def set_password(self, user_id: int, new_password: str) -> None:
        with self.store.lock:
            self._get_record(user_id)["hashed_password"] = hash_password(new_password)

    def stamp_login(self, user_id: int) -> None:
        with self.store.lock:
            record = self.store.users.get(user_id)
            if record:
                record["last_login"] = utcnow()

