from __future__ import annotations

import json
import logging
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from threading import RLock
from typing import Any, Optional

from pydantic import ValidationError as ModelValidationError

from garment_hr.core.config import settings
from garment_hr.models.audit import (
    AuditAction,
    AuditEntity,
    AuditEvent,
    AuditLogResult,
    AuditSummary,
)

logger = logging.getLogger(__name__)


class AuditLogger:
    """Append-only audit trail, one JSON object per line."""

    def __init__(self, log_path: Path | None = None) -> None:
        self.log_path = log_path or settings.audit_log_path
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        self.lock = RLock()

    def log_event(
        self,
        action: AuditAction,
        entity_type: AuditEntity,
        actor_id: Optional[int],
        actor_username: Optional[str],
        entity_id: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> AuditEvent:
        event = AuditEvent(
            timestamp=datetime.now(timezone.utc),
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            actor_id=actor_id,
            actor_username=actor_username,
            details=details or {},
        )
        line = event.model_dump_json()
        with self.lock:
            with self.log_path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
        return event

    def read_events(self) -> list[AuditEvent]:
        if not self.log_path.exists():
            return []

        with self.lock:
            lines = self.log_path.read_text(encoding="utf-8").splitlines()

        events: list[AuditEvent] = []
        for raw in lines:
            if not raw.strip():
                continue
            try:
                events.append(AuditEvent.model_validate(json.loads(raw)))
            except (json.JSONDecodeError, ModelValidationError):
                logger.warning("Skipping unreadable audit line: %.80s", raw)
                continue
        return events

    def query(
        self,
        action: Optional[AuditAction] = None,
        entity_type: Optional[AuditEntity] = None,
        username: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> AuditLogResult:
        events = self.read_events()
        if action:
            events = [e for e in events if e.action == action]
        if entity_type:
            events = [e for e in events if e.entity_type == entity_type]
        if username:
            needle = username.lower()
            events = [e for e in events if e.actor_username and needle in e.actor_username.lower()]

        # newest first
        events.reverse()
        return AuditLogResult(events=events[offset : offset + limit], total_count=len(events))

    def summary(self) -> AuditSummary:
        events = self.read_events()
        return AuditSummary(
            total_events=len(events),
            by_action=dict(Counter(e.action.value for e in events)),
            by_actor=dict(Counter(e.actor_username or "UNKNOWN" for e in events)),
            last_event_at=events[-1].timestamp if events else None,
        )
