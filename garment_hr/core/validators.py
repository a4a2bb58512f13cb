from __future__ import annotations

import re
from typing import Optional

from garment_hr.core.config import settings
from garment_hr.core.exceptions import ValidationError

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]+$")


def username_errors(username: Optional[str]) -> list[str]:
    if not username or not username.strip():
        return ["Username is required"]
    if len(username) < settings.username_min_length:
        return [f"Username must be at least {settings.username_min_length} characters"]
    if not USERNAME_PATTERN.match(username):
        return ["Username can only contain letters, numbers, and underscores"]
    return []


def password_errors(password: Optional[str], *, required: bool = True) -> list[str]:
    if not password:
        return ["Password is required"] if required else []
    if len(password) < settings.password_min_length:
        return [f"Password must be at least {settings.password_min_length} characters"]
    return []


def full_name_errors(full_name: Optional[str]) -> list[str]:
    if not full_name or not full_name.strip():
        return ["Full Name is required"]
    return []


def validate_new_account(username: str, password: str, full_name: str) -> None:
    errors = username_errors(username) + password_errors(password) + full_name_errors(full_name)
    if errors:
        raise ValidationError(errors)


def require_password(password: str) -> str:
    errors = password_errors(password)
    if errors:
        raise ValidationError(errors)
    return password


def require_full_name(full_name: str) -> str:
    errors = full_name_errors(full_name)
    if errors:
        raise ValidationError(errors)
    return full_name.strip()


def normalize_department(department_access: Optional[str]) -> Optional[str]:
    if department_access is None or not department_access.strip():
        return None
    return department_access.strip()
