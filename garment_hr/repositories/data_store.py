from __future__ import annotations

from datetime import datetime, timezone
from itertools import count
from threading import RLock
from typing import Any, Iterable


class DataStore:
    """Simple in-memory repository for user accounts and session state."""

    def __init__(self, departments: Iterable[str] = ()) -> None:
        self.lock = RLock()
        self.users: dict[int, dict[str, Any]] = {}
        self.departments: set[str] = set(departments)
        self.revoked_tokens: set[str] = set()
        self._user_ids = count(1)

    def next_user_id(self) -> int:
        with self.lock:
            return next(self._user_ids)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
