"""Pydantic schemas for audit event responses."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


class ActorInfo(BaseModel):
    user_id: Optional[str] = None
    role: Optional[str] = None


class AuditEventResponse(BaseModel):
    id: str
    certificate_id: str
    event_type: str
    actor: ActorInfo
    details: dict[str, Any] = {}
    created_at: datetime

    @classmethod
    def from_model(cls, event) -> "AuditEventResponse":
        return cls(
            id=event.id,
            certificate_id=event.certificate_id,
            event_type=event.event_type,
            actor=ActorInfo(user_id=event.actor_user_id, role=event.actor_role),
            details=event.details or {},
            created_at=event.created_at,
        )
