"""Audit event endpoints.

Read-only: audit events are written internally by ``AuditRecorder`` and
no endpoint exists to create, change or remove them.
"""

from fastapi import APIRouter, Query, status

from app.api.deps import CurrentAdmin, DbSession
from app.schemas.audit_event import AuditEventFilter, AuditEventRead
from app.services.audit import AuditRecorder

router = APIRouter()


@router.get(
    "/events",
    response_model=list[AuditEventRead],
    status_code=status.HTTP_200_OK,
    summary="List audit events",
    description="Most recent audit events first (admin only)",
)
async def list_audit_events(
    session: DbSession,
    user: CurrentAdmin,
    entity_type: str | None = None,
    entity_id: int | None = None,
    limit: int = Query(100, ge=1, le=500),
) -> list[AuditEventRead]:
    """Query audit events, optionally for one entity."""
    filters = AuditEventFilter(entity_type=entity_type, entity_id=entity_id, limit=limit)

    events = await AuditRecorder(session).list_events(
        entity_type=filters.entity_type,
        entity_id=filters.entity_id,
        limit=filters.limit,
    )
    return [AuditEventRead.model_validate(e) for e in events]
