"""Use case for appending a domain event to the event log."""

from typing import Any

from sqlalchemy.orm import Session

from notification_engine.domain.entities import ACTOR_TYPES, EVENT_TYPES, Event
from notification_engine.domain.errors import ValidationError
from notification_engine.infrastructure.repositories import EventRepository
from notification_engine.utils import now_in_app_timezone


def record_event(
    session: Session,
    *,
    entity_type: str,
    entity_id: str,
    event_type: str,
    actor_type: str,
    actor_id: str | None = None,
    payload: dict[str, Any] | None = None,
) -> Event:
    """Validate and persist an event stamped with the server time."""

    entity_type = (entity_type or "").strip()
    entity_id = (entity_id or "").strip()
    if not entity_type:
        raise ValidationError("entity_type is required")
    if not entity_id:
        raise ValidationError("entity_id is required")
    if event_type not in EVENT_TYPES:
        raise ValidationError(
            f"Invalid event_type: {event_type}", valid_event_types=sorted(EVENT_TYPES)
        )
    if actor_type not in ACTOR_TYPES:
        raise ValidationError(
            f"Invalid actor_type: {actor_type}", valid_actor_types=sorted(ACTOR_TYPES)
        )
    if payload is not None and not isinstance(payload, dict):
        raise ValidationError("payload must be an object")

    entity = Event(
        id=None,
        entity_type=entity_type,
        entity_id=entity_id,
        event_type=event_type,
        actor_type=actor_type,
        actor_id=(actor_id or "").strip() or None,
        payload=dict(payload or {}),
        created_at=now_in_app_timezone(),
    )
    return EventRepository(session).append(entity)
