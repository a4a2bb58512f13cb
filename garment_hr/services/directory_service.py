from __future__ import annotations

from garment_hr.repositories.data_store import DataStore


class DirectoryService:
    """Read-only department directory used to fill department-access selectors."""

    def __init__(self, store: DataStore) -> None:
        self.store = store

    def list_departments(self) -> list[str]:
        with self.store.lock:
            return sorted(d for d in self.store.departments if d.strip())
