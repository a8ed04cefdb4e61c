"""Routes for recording and reading domain events."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from notification_engine.application.use_cases.events import get_event, record_event
from notification_engine.domain.entities import Event
from notification_engine.domain.errors import NotFoundError, ValidationError
from notification_engine.infrastructure.database import get_db
from notification_engine.interfaces.api.dependencies import http_error
from notification_engine.interfaces.api.schemas import EventCreate, EventRead

router = APIRouter(prefix="/events", tags=["events"])


def _to_read_model(event: Event) -> EventRead:
    return EventRead.model_validate(event)


@router.post("/", response_model=EventRead, status_code=status.HTTP_201_CREATED)
def create_event(event_in: EventCreate, db: Session = Depends(get_db)) -> EventRead:
    """Append an event to the log. It is processed by the next scheduler run."""

    try:
        event = record_event(db, **event_in.model_dump())
    except ValidationError as exc:
        raise http_error(exc, status.HTTP_400_BAD_REQUEST) from exc
    return _to_read_model(event)


@router.get("/{event_id}", response_model=EventRead)
def read_event(event_id: str, db: Session = Depends(get_db)) -> EventRead:
    try:
        event = get_event(db, event_id)
    except NotFoundError as exc:
        raise http_error(exc, status.HTTP_404_NOT_FOUND) from exc
    return _to_read_model(event)
