"""SQLAlchemy model for persisted in-app notifications."""

from sqlalchemy import Column, DateTime, String, Text

from notification_engine.infrastructure.database import Base
from notification_engine.utils import generate_id, now_in_app_naive_datetime

from .types import json_type


class NotificationModel(Base):
    """Database representation for user notifications."""

    __tablename__ = "notification"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(64), nullable=False, index=True)
    type = Column(String(64), nullable=False)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    payload = Column(json_type, nullable=False, default=dict)
    action_url = Column(String(500), nullable=True)
    dossier_id = Column(String(64), nullable=True, index=True)
    event_id = Column(String(36), nullable=True)
    created_at = Column(
        DateTime(), nullable=False, default=now_in_app_naive_datetime, index=True
    )
    read_at = Column(DateTime(), nullable=True)


__all__ = ["NotificationModel"]
