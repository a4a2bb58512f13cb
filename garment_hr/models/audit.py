from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class AuditAction(str, Enum):
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    PASSWORD_RESET = "PASSWORD_RESET"
    PASSWORD_CHANGE = "PASSWORD_CHANGE"


class AuditEntity(str, Enum):
    USER = "USER"
    SYSTEM = "SYSTEM"


class AuditEvent(BaseModel):
    timestamp: datetime
    action: AuditAction
    entity_type: AuditEntity
    entity_id: Optional[str] = None
    actor_id: Optional[int] = None
    actor_username: Optional[str] = None
    details: dict[str, Any] = Field(default_factory=dict)


class AuditLogResult(BaseModel):
    events: list[AuditEvent]
    total_count: int


class AuditSummary(BaseModel):
    total_events: int
    by_action: dict[str, int]
    by_actor: dict[str, int]
    last_event_at: Optional[datetime] = None
