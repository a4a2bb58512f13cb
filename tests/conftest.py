from __future__ import annotations

import os
import tempfile

# Must run before garment_hr.core.config is imported anywhere.
os.environ.setdefault("GARMENT_HR_DATA_DIR", tempfile.mkdtemp(prefix="garment-hr-tests-"))

from typing import Callable, Optional

import pytest

from garment_hr.core.rbac import Role, resolve_permissions
from garment_hr.models.auth import Session
from garment_hr.repositories.data_store import DataStore
from garment_hr.services.account_service import AccountService
from garment_hr.services.audit_service import AuditLogger
from garment_hr.services.auth_service import AuthService


@pytest.fixture
def make_session() -> Callable[..., Session]:
    def factory(role: Role = Role.ADMIN, user_id: int = 1, username: Optional[str] = None) -> Session:
        return Session(
            user_id=user_id,
            username=username or f"{role.value}_{user_id}",
            full_name="Test User",
            role=role,
            department_access=None,
            permissions=resolve_permissions(role),
        )

    return factory


@pytest.fixture
def audit_logger(tmp_path) -> AuditLogger:
    return AuditLogger(log_path=tmp_path / "audit.jsonl")


@pytest.fixture
def store() -> DataStore:
    return DataStore(departments=["Sewing", "Cutting", "Packing"])


@pytest.fixture
def accounts(store, audit_logger) -> AccountService:
    service = AccountService(store=store, audit_logger=audit_logger)
    service.ensure_default_admin("admin", "admin123")
    return service


@pytest.fixture
def auth(store, accounts, audit_logger) -> AuthService:
    return AuthService(store=store, accounts=accounts, audit_logger=audit_logger)


@pytest.fixture
def admin_session(auth) -> Session:
    return auth.login("admin", "admin123")
