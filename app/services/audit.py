"""Append-only audit logging."""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.booking.actor import ActorContext
from app.core.logging import audit_logger
from app.models.audit_event import AuditAction, AuditEvent

logger = logging.getLogger(__name__)


async def write_audit_event(
    session: AsyncSession,
    action: AuditAction,
    entity_type: str,
    entity_id: int | None,
    actor_id: int | None = None,
    old_values: dict[str, Any] | None = None,
    new_values: dict[str, Any] | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> AuditEvent:
    """Write an audit event to the database.

    Events are append-only and cannot be modified or deleted.

    Args:
        session: Database session
        action: Action performed
        entity_type: Type of entity affected ("booking", "admin_user")
        entity_id: ID of the affected entity
        actor_id: Admin user id, None for anonymous callers
        old_values: State before the change
        new_values: State after the change
        ip_address: Client IP address
        user_agent: Client user agent string

    Returns:
        Created AuditEvent instance
    """
    event = AuditEvent(
        action=action.value,
        entity_type=entity_type,
        entity_id=entity_id,
        actor_id=actor_id,
        old_values=old_values,
        new_values=new_values,
        ip_address=ip_address,
        user_agent=user_agent,
    )

    session.add(event)
    await session.commit()
    await session.refresh(event)

    audit_logger.log(
        action=action.value,
        actor_id=actor_id,
        entity_type=entity_type,
        entity_id=entity_id,
        metadata=new_values or old_values,
    )

    return event


class AuditRecorder:
    """Best-effort audit writer.

    A failure to record an event is logged and rolled back but never
    propagated: the operation being audited has already been committed.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def record(
        self,
        action: AuditAction,
        entity_type: str,
        entity_id: int | None,
        actor: ActorContext,
        old_values: dict[str, Any] | None = None,
        new_values: dict[str, Any] | None = None,
    ) -> AuditEvent | None:
        try:
            return await write_audit_event(
                session=self.session,
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                actor_id=actor.actor_id,
                old_values=old_values,
                new_values=new_values,
                ip_address=actor.ip_address,
                user_agent=actor.user_agent,
            )
        except Exception:
            logger.exception(f"Failed to write audit event {action.value} for {entity_type}:{entity_id}")
            try:
                await self.session.rollback()
            except Exception:
                logger.exception("Rollback after audit failure also failed")
            return None

    async def list_events(
        self,
        entity_type: str | None = None,
        entity_id: int | None = None,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """Most recent events first, optionally for one entity."""
        query = select(AuditEvent).order_by(AuditEvent.created_at.desc(), AuditEvent.id.desc())

        if entity_type:
            query = query.where(AuditEvent.entity_type == entity_type)
        if entity_id is not None:
            query = query.where(AuditEvent.entity_id == entity_id)

        result = await self.session.execute(query.limit(limit))
        return list(result.scalars().all())
