"""Schemas for event ingestion endpoints."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class EventCreate(BaseModel):
    entity_type: str = Field(..., description="Kind of entity the event is about, e.g. dossier")
    entity_id: str = Field(..., description="Identifier of that entity")
    event_type: str = Field(..., description="Domain fact that happened")
    actor_type: str = Field(..., description="SYSTEM, ADMIN, AGENT or CLIENT")
    actor_id: str | None = None
    payload: dict[str, Any] = Field(default_factory=dict)


class EventRead(BaseModel):
    id: str
    entity_type: str
    entity_id: str
    event_type: str
    actor_type: str
    actor_id: str | None
    payload: dict[str, Any]
    created_at: datetime | None

    model_config = ConfigDict(from_attributes=True)
