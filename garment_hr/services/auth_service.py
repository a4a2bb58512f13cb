from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import ValidationError as ModelValidationError

from garment_hr.core.exceptions import AuthenticationError
from garment_hr.core.security import create_access_token, decode_access_token, verify_password
from garment_hr.core.validators import require_password
from garment_hr.models.audit import AuditAction, AuditEntity
from garment_hr.models.auth import Session, Token
from garment_hr.repositories.data_store import DataStore
from garment_hr.services.account_service import AccountService
from garment_hr.services.audit_service import AuditLogger

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid username or password"


class AuthService:
    """Login/session store.

    The session is a snapshot of the account taken at login and carried in
    the signed token; later edits to the account do not reach it until the
    user signs in again.
    """

    def __init__(self, store: DataStore, accounts: AccountService, audit_logger: AuditLogger) -> None:
        self.store = store
        self.accounts = accounts
        self.audit_logger = audit_logger

    def authenticate(self, username: str, password: str) -> dict[str, Any] | None:
        user = self.accounts.find_by_username(username)
        if not user:
            return None
        if not verify_password(password, user["hashed_password"]):
            return None
        return user

    def login(self, username: str, password: str) -> Session:
        user = self.authenticate(username, password)
        if not user:
            logger.info("Failed sign-in for '%s'", username)
            raise AuthenticationError(INVALID_CREDENTIALS)
        if not user.get("is_active", True):
            raise AuthenticationError("Account is deactivated. Please contact administrator.")

        self.accounts.stamp_login(user["id"])
        session = Session(
            user_id=user["id"],
            username=user["username"],
            full_name=user["full_name"],
            role=user["role"],
            department_access=user.get("department_access"),
            permissions=user["permissions"],
        )
        self.audit_logger.log_event(
            action=AuditAction.LOGIN,
            entity_type=AuditEntity.SYSTEM,
            actor_id=session.user_id,
            actor_username=session.username,
        )
        logger.info("User '%s' signed in", session.username)
        return session

    def issue_token(self, session: Session) -> Token:
        token, _, expires_at = create_access_token(
            subject=str(session.user_id),
            claims={"session": session.model_dump(mode="json")},
        )
        return Token(access_token=token, expires_at=expires_at)

    def _decode(self, token: str) -> dict[str, Any]:
        try:
            payload = decode_access_token(token)
        except ValueError as exc:
            raise AuthenticationError("Could not validate credentials") from exc

        with self.store.lock:
            revoked = payload.get("jti") in self.store.revoked_tokens
        if revoked:
            raise AuthenticationError("Session has ended, please sign in again")
        return payload

    def session_from_token(self, token: str) -> Session:
        payload = self._decode(token)
        try:
            return Session.model_validate(payload.get("session"))
        except ModelValidationError as exc:
            raise AuthenticationError("Could not validate credentials") from exc

    def current_session(self, token: Optional[str]) -> Optional[Session]:
        if not token:
            return None
        try:
            return self.session_from_token(token)
        except AuthenticationError:
            return None

    def logout(self, token: str) -> None:
        payload = self._decode(token)
        with self.store.lock:
            self.store.revoked_tokens.add(payload["jti"])

        session = payload.get("session") or {}
        self.audit_logger.log_event(
            action=AuditAction.LOGOUT,
            entity_type=AuditEntity.SYSTEM,
            actor_id=session.get("user_id"),
            actor_username=session.get("username"),
            details={"expires_at": datetime.fromtimestamp(payload["exp"], tz=timezone.utc).isoformat()},
        )

    def change_own_password(self, session: Session, current_password: str, new_password: str) -> None:
        user = self.accounts.find_by_username(session.username)
        if not user or user["id"] != session.user_id:
            raise AuthenticationError("User not found")
        if not verify_password(current_password, user["hashed_password"]):
            raise AuthenticationError("Current password is incorrect")
        require_password(new_password)

        self.accounts.set_password(session.user_id, new_password)
        self.audit_logger.log_event(
            action=AuditAction.PASSWORD_CHANGE,
            entity_type=AuditEntity.USER,
            actor_id=session.user_id,
            actor_username=session.username,
            entity_id=str(session.user_id),
        )
