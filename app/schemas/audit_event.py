"""Audit event schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class AuditEventRead(BaseModel):
    """Schema for reading audit event data."""

    id: int
    action: str
    entity_type: str
    entity_id: int | None
    actor_id: int | None
    old_values: dict[str, Any] | None
    new_values: dict[str, Any] | None
    ip_address: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class AuditEventFilter(BaseModel):
    """Filter parameters for querying audit events."""

    entity_type: str | None = None
    entity_id: int | None = None
    limit: int = Field(default=100, ge=1, le=500)
