"""SQLAlchemy model for the append-only event log."""

from sqlalchemy import Column, DateTime, Index, String

from notification_engine.infrastructure.database import Base
from notification_engine.utils import generate_id, now_in_app_naive_datetime

from .types import json_type


class EventModel(Base):
    """Database representation of a domain event."""

    __tablename__ = "event"
    __table_args__ = (Index("ix_event_created_at", "created_at"),)

    id = Column(String(36), primary_key=True, default=generate_id)
    entity_type = Column(String(50), nullable=False)
    entity_id = Column(String(64), nullable=False)
    event_type = Column(String(64), nullable=False, index=True)
    actor_type = Column(String(16), nullable=False)
    actor_id = Column(String(64), nullable=True)
    payload = Column(json_type, nullable=False, default=dict)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)


__all__ = ["EventModel"]
