"""Audit service — append and query certificate events."""

from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from certledger.audit.models import AuditEventModel

VALID_EVENT_TYPES: frozenset[str] = frozenset({
    "issued",
    "comment",
    "revoked",
    "verified",
})


class AuditService:
    """Append-only event log per certificate."""

    # ── Write ──

    async def record_event(
        self,
        session: AsyncSession,
        certificate_id: str,
        event_type: str,
        actor_user_id: str | None = None,
        actor_role: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> AuditEventModel:
        """Append a new event to the certificate's trail."""
        if event_type not in VALID_EVENT_TYPES:
            raise ValueError(f"Unknown audit event type: {event_type!r}")
        event = AuditEventModel(
            certificate_id=certificate_id,
            event_type=event_type,
            actor_user_id=actor_user_id,
            actor_role=actor_role,
            details=details or {},
        )
        session.add(event)
        await session.flush()
        return event

    async def delete_for_certificate(
        self, session: AsyncSession, certificate_id: str,
    ) -> int:
        """Remove every event of a certificate. Returns the number deleted."""
        result = await session.execute(
            delete(AuditEventModel).where(
                AuditEventModel.certificate_id == certificate_id
            )
        )
        return result.rowcount or 0

    # ── Read ──

    async def get_events(
        self,
        session: AsyncSession,
        certificate_id: str,
        event_type: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[AuditEventModel]:
        """Paginated event list, newest first."""
        query = (
            select(AuditEventModel)
            .where(AuditEventModel.certificate_id == certificate_id)
        )
        if event_type:
            query = query.where(AuditEventModel.event_type == event_type)
        query = (
            query.order_by(AuditEventModel.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await session.execute(query)
        return list(result.scalars().all())

    async def latest_by_certificate(
        self, session: AsyncSession, certificate_ids: list[str],
    ) -> dict[str, AuditEventModel]:
        """Most recent event for each of ``certificate_ids``."""
        if not certificate_ids:
            return {}
        latest = (
            select(
                AuditEventModel.certificate_id,
                func.max(AuditEventModel.created_at).label("latest_at"),
            )
            .where(AuditEventModel.certificate_id.in_(certificate_ids))
            .group_by(AuditEventModel.certificate_id)
            .subquery()
        )
        result = await session.execute(
            select(AuditEventModel)
            .join(
                latest,
                (AuditEventModel.certificate_id == latest.c.certificate_id)
                & (AuditEventModel.created_at == latest.c.latest_at),
            )
        )
        return {e.certificate_id: e for e in result.scalars().all()}
