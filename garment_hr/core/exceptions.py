"""Error kinds raised by the permission model and the account/session stores."""

from typing import Iterable


class HRRecordsError(Exception):
    """Base exception for HR records errors."""

    status_code: int = 400

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


class ValidationError(HRRecordsError):
    """Raised when input fails local validation, before any store call."""

    def __init__(self, errors: str | Iterable[str]):
        self.errors = [errors] if isinstance(errors, str) else list(errors)
        super().__init__("; ".join(self.errors))


class AuthenticationError(HRRecordsError):
    """Raised when credentials or a session token are not accepted."""

    status_code = 401


class AuthorizationDenied(HRRecordsError):
    """Raised when the acting session lacks the capability for a store call."""

    status_code = 403


class SelfLockoutPrevented(HRRecordsError):
    """Raised when a user tries to revoke their own access to user management."""

    status_code = 409


class PersistenceFailure(HRRecordsError):
    """Raised by the account store; the message is shown to the caller verbatim."""

    def __init__(self, message: str, status_code: int = 400):
        self.status_code = status_code
        super().__init__(message)


class StoreTimeout(HRRecordsError):
    """Raised when a store call does not finish within the caller's timeout."""

    status_code = 504
