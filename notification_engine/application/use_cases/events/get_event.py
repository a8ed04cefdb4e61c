"""Use case for retrieving a recorded event."""

from sqlalchemy.orm import Session

from notification_engine.domain.entities import Event
from notification_engine.domain.errors import NotFoundError
from notification_engine.infrastructure.repositories import EventRepository


def get_event(session: Session, event_id: str) -> Event:
    event = EventRepository(session).get(event_id)
    if event is None:
        raise NotFoundError("Event not found", event_id=event_id)
    return event
