"""Persistence layer for the append-only event log."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from notification_engine.domain.entities import Event
from notification_engine.infrastructure.models import EventModel
from notification_engine.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)


class EventRepository:
    """Append and read domain events. Events are never updated or deleted."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def append(self, event: Event) -> Event:
        model = EventModel(
            entity_type=event.entity_type,
            entity_id=event.entity_id,
            event_type=event.event_type,
            actor_type=event.actor_type,
            actor_id=event.actor_id,
            payload=dict(event.payload or {}),
            created_at=ensure_app_naive_datetime(event.created_at or now_in_app_timezone()),
        )
        if event.id is not None:
            model.id = event.id
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def get(self, event_id: str) -> Event | None:
        model = self.session.get(EventModel, event_id)
        return self._to_entity(model) if model else None

    def list_since(self, since: datetime, *, limit: int | None = 50) -> Sequence[Event]:
        """Return events created at or after ``since``, oldest first."""

        query = (
            self.session.query(EventModel)
            .filter(EventModel.created_at >= ensure_app_naive_datetime(since))
            .order_by(EventModel.created_at.asc(), EventModel.id.asc())
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def count_since(self, since: datetime) -> int:
        return (
            self.session.query(func.count(EventModel.id))
            .filter(EventModel.created_at >= ensure_app_naive_datetime(since))
            .scalar()
            or 0
        )

    def get_map_by_ids(self, event_ids: Sequence[str]) -> dict[str, Event]:
        ids = {event_id for event_id in event_ids if event_id}
        if not ids:
            return {}
        models = self.session.query(EventModel).filter(EventModel.id.in_(ids)).all()
        return {model.id: self._to_entity(model) for model in models}

    @staticmethod
    def _to_entity(model: EventModel) -> Event:
        return Event(
            id=model.id,
            entity_type=model.entity_type,
            entity_id=model.entity_id,
            event_type=model.event_type,
            actor_type=model.actor_type,
            actor_id=model.actor_id,
            payload=dict(model.payload or {}),
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["EventRepository"]
