from __future__ import annotations

import time

import pytest

from garment_hr.core.exceptions import (
    AuthorizationDenied,
    PersistenceFailure,
    SelfLockoutPrevented,
    StoreTimeout,
    ValidationError,
)
from garment_hr.core.rbac import Capability, Role, resolve_permissions
from garment_hr.models.auth import CreateUserRequest, UserAccount
from garment_hr.services.permission_editor import EditState, PermissionEditor


class FailingAccounts:
    def __init__(self, error: Exception):
        self.error = error
        self.calls = 0

    def create_account(self, actor, request, deadline=None):
        self.calls += 1
        raise self.error

    def update_account(self, actor, user_id, request, deadline=None):
        self.calls += 1
        raise self.error


class SlowAccounts:
    """The real account store behind a slow link."""

    def __init__(self, accounts, delay=0.3):
        self.accounts = accounts
        self.delay = delay

    def create_account(self, actor, request, deadline=None):
        time.sleep(self.delay)
        return self.accounts.create_account(actor, request, deadline=deadline)

    def update_account(self, actor, user_id, request, deadline=None):
        time.sleep(self.delay)
        return self.accounts.update_account(actor, user_id, request, deadline=deadline)


def test_new_account_starts_as_viewer_preset(make_session):
    editor = PermissionEditor.for_new_account(make_session(Role.ADMIN))

    assert editor.role == Role.VIEWER
    assert editor.state == EditState.PRESET
    assert editor.permissions == resolve_permissions(Role.VIEWER)
    assert editor.locked_controls == frozenset()


def test_toggle_from_hr_staff_becomes_custom(make_session):
    editor = PermissionEditor.for_new_account(make_session(Role.ADMIN))
    editor.select_role(Role.HR_STAFF)
    baseline = resolve_permissions(Role.HR_STAFF)

    editor.toggle(Capability.EDIT_EMPLOYEES, True)

    assert editor.state == EditState.CUSTOM
    assert editor.role == Role.CUSTOM
    assert editor.permissions.edit_employees is True
    for capability in Capability:
        if capability != Capability.EDIT_EMPLOYEES:
            assert editor.permissions.has(capability) == baseline.has(capability)


def test_toggling_back_returns_to_preset(make_session):
    editor = PermissionEditor.for_new_account(make_session(Role.ADMIN))
    editor.select_role(Role.HR_MANAGER)

    editor.toggle("export_data")
    assert editor.state == EditState.CUSTOM

    editor.toggle("export_data")
    assert editor.state == EditState.PRESET
    assert editor.role == Role.HR_MANAGER


def test_selecting_role_discards_custom_edits(make_session):
    editor = PermissionEditor.for_new_account(make_session(Role.ADMIN))
    editor.toggle(Capability.EXPORT_DATA, True)
    editor.toggle(Capability.VIEW_REPORTS, True)
    assert editor.state == EditState.CUSTOM

    editor.select_role(Role.HR_STAFF)

    assert editor.state == EditState.PRESET
    assert editor.role == Role.HR_STAFF
    assert editor.permissions == resolve_permissions(Role.HR_STAFF)


def test_custom_and_unknown_roles_cannot_be_selected(make_session):
    editor = PermissionEditor.for_new_account(make_session(Role.ADMIN))
    with pytest.raises(ValidationError):
        editor.select_role(Role.CUSTOM)
    with pytest.raises(ValidationError):
        editor.select_role("auditor")
    assert editor.role == Role.VIEWER


def test_unknown_capability_toggle_is_rejected(make_session):
    editor = PermissionEditor.for_new_account(make_session(Role.ADMIN))
    with pytest.raises(ValidationError):
        editor.toggle("can_fly")
    assert editor.permissions == resolve_permissions(Role.VIEWER)


def test_self_edit_cannot_revoke_manage_users(accounts, admin_session):
    own_account = accounts.get_account(admin_session, admin_session.user_id)
    editor = PermissionEditor.for_account(admin_session, own_account)

    assert editor.is_self_edit
    assert editor.locked_controls == {"manage_users", "is_active"}

    with pytest.raises(SelfLockoutPrevented):
        editor.toggle(Capability.MANAGE_USERS, False)
    with pytest.raises(SelfLockoutPrevented):
        editor.toggle(Capability.MANAGE_USERS)
    with pytest.raises(SelfLockoutPrevented):
        editor.select_role(Role.HR_MANAGER)
    with pytest.raises(SelfLockoutPrevented):
        editor.set_active(False)

    editor.set_full_name("Factory Administrator")
    submitted = editor.submit(accounts, timeout=None)

    assert submitted.permissions.manage_users is True
    assert submitted.is_active is True
    assert submitted.role == Role.ADMIN
    assert submitted.full_name == "Factory Administrator"


def test_self_edit_may_drop_other_flags(accounts, admin_session):
    own_account = accounts.get_account(admin_session, admin_session.user_id)
    editor = PermissionEditor.for_account(admin_session, own_account)

    editor.toggle(Capability.MANAGE_SETTINGS, False)

    assert editor.role == Role.CUSTOM
    assert editor.permissions.manage_users is True


def test_new_viewer_with_export_is_submitted_as_custom(accounts, admin_session):
    editor = PermissionEditor.for_new_account(admin_session)
    editor.set_full_name("Nimali Perera")
    editor.toggle(Capability.EXPORT_DATA, True)

    created = editor.submit(accounts, username="nimali", password="secret1", timeout=None)

    assert created.role == Role.CUSTOM
    expected = resolve_permissions(Role.VIEWER).with_flag(Capability.EXPORT_DATA, True)
    assert created.permissions == expected
    assert accounts.get_account(admin_session, created.id).role == Role.CUSTOM


def test_submit_validates_before_calling_store(make_session):
    editor = PermissionEditor.for_new_account(make_session(Role.ADMIN))
    store = FailingAccounts(PersistenceFailure("unreachable"))

    with pytest.raises(ValidationError) as excinfo:
        editor.submit(store, username="ab", password="123", timeout=None)

    assert store.calls == 0
    assert "Username must be at least 3 characters" in excinfo.value.errors
    assert "Password must be at least 6 characters" in excinfo.value.errors
    assert "Full Name is required" in excinfo.value.errors


def test_submit_requires_manage_users(make_session):
    editor = PermissionEditor.for_new_account(make_session(Role.HR_MANAGER))
    editor.set_full_name("Someone")
    store = FailingAccounts(PersistenceFailure("unreachable"))

    with pytest.raises(AuthorizationDenied):
        editor.submit(store, username="someone", password="secret1", timeout=None)
    assert store.calls == 0


def test_store_failure_keeps_edit_state(make_session):
    editor = PermissionEditor.for_new_account(make_session(Role.ADMIN))
    editor.set_full_name("Kasun Silva")
    editor.select_role(Role.HR_STAFF)
    editor.toggle(Capability.VIEW_REPORTS, True)
    before = (editor.role, editor.permissions, editor.full_name)

    with pytest.raises(PersistenceFailure, match="Username already exists"):
        editor.submit(FailingAccounts(PersistenceFailure("Username already exists", 409)),
                      username="kasun", password="secret1", timeout=None)

    assert (editor.role, editor.permissions, editor.full_name) == before
    assert editor.account is None


def test_store_timeout_keeps_edit_state(accounts, admin_session):
    editor = PermissionEditor.for_new_account(admin_session)
    editor.set_full_name("Slow Store")
    editor.toggle(Capability.ADD_EMPLOYEES, True)
    before = (editor.role, editor.permissions)

    with pytest.raises(StoreTimeout):
        editor.submit(SlowAccounts(accounts), username="slow_store", password="secret1", timeout=0.05)

    assert (editor.role, editor.permissions) == before
    assert editor.account is None


def test_timed_out_create_is_not_saved_and_can_be_retried(accounts, admin_session):
    editor = PermissionEditor.for_new_account(admin_session)
    editor.set_full_name("Late Arrival")

    with pytest.raises(StoreTimeout):
        editor.submit(SlowAccounts(accounts), username="late_arrival", password="secret1", timeout=0.05)
    time.sleep(0.5)

    usernames = [account.username for account in accounts.list_accounts(admin_session)]
    assert "late_arrival" not in usernames

    created = editor.submit(accounts, username="late_arrival", password="secret1", timeout=None)
    assert created.username == "late_arrival"
    assert editor.account == created


def test_timed_out_update_does_not_overwrite_later_save(accounts, admin_session):
    editor = PermissionEditor.for_new_account(admin_session)
    editor.set_full_name("Shift Supervisor")
    created = editor.submit(accounts, username="supervisor", password="secret1", timeout=None)

    editor.select_role(Role.HR_MANAGER)
    with pytest.raises(StoreTimeout):
        editor.submit(SlowAccounts(accounts), timeout=0.05)

    editor.select_role(Role.HR_STAFF)
    editor.submit(accounts, timeout=None)
    time.sleep(0.5)

    stored = accounts.get_account(admin_session, created.id)
    assert stored.role == Role.HR_STAFF
    assert stored.permissions == resolve_permissions(Role.HR_STAFF)


def test_existing_custom_account_opens_in_custom_state(make_session):
    permissions = resolve_permissions(Role.HR_STAFF).with_flag(Capability.VIEW_REPORTS, True)
    account = UserAccount(
        id=7,
        username="ruwan",
        full_name="Ruwan Fernando",
        role=Role.CUSTOM,
        permissions=permissions,
    )
    editor = PermissionEditor.for_account(make_session(Role.ADMIN), account)

    assert editor.state == EditState.CUSTOM
    assert editor.base_role == Role.VIEWER
    assert editor.permissions == permissions
    assert not editor.is_self_edit


def test_update_request_carries_form_state(make_session):
    account = UserAccount(
        id=3,
        username="dilani",
        full_name="Dilani Jayasinghe",
        role=Role.HR_STAFF,
        department_access="Sewing",
        permissions=resolve_permissions(Role.HR_STAFF),
    )
    editor = PermissionEditor.for_account(make_session(Role.ADMIN), account)
    editor.set_department_access("  ")
    editor.set_active(False)
    editor.select_role(Role.HR_MANAGER)

    request = editor.update_request()

    assert request.department_access is None
    assert request.is_active is False
    assert request.role == Role.HR_MANAGER
    assert request.permissions == resolve_permissions(Role.HR_MANAGER)


def test_create_request_on_existing_account_is_rejected(make_session):
    account = UserAccount(
        id=3,
        username="dilani",
        full_name="Dilani",
        role=Role.VIEWER,
        permissions=resolve_permissions(Role.VIEWER),
    )
    editor = PermissionEditor.for_account(make_session(Role.ADMIN), account)
    with pytest.raises(ValidationError):
        editor.create_request("other", "secret1")


def test_create_request_type(make_session):
    editor = PermissionEditor.for_new_account(make_session(Role.ADMIN))
    editor.set_full_name(" Chamari ")
    request = editor.create_request("chamari", "secret1")

    assert isinstance(request, CreateUserRequest)
    assert request.full_name == "Chamari"
    assert request.role == Role.VIEWER


def test_existing_account_drifted_from_its_role_keeps_that_role_as_base(make_session):
    permissions = resolve_permissions(Role.HR_STAFF).with_flag(Capability.EXPORT_DATA, True)
    account = UserAccount(
        id=9,
        username="tharindu",
        full_name="Tharindu Bandara",
        role=Role.HR_STAFF,
        permissions=permissions,
    )
    editor = PermissionEditor.for_account(make_session(Role.ADMIN), account)

    assert editor.state == EditState.CUSTOM
    assert editor.role == Role.CUSTOM
    assert editor.base_role == Role.HR_STAFF

    editor.toggle(Capability.EXPORT_DATA, False)

    assert editor.state == EditState.PRESET
    assert editor.role == Role.HR_STAFF
