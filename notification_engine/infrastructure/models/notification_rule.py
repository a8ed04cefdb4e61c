"""SQLAlchemy model for notification rules."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text

from notification_engine.infrastructure.database import Base
from notification_engine.utils import generate_id, now_in_app_naive_datetime

from .types import json_type


class NotificationRuleModel(Base):
    """Database representation of a notification rule."""

    __tablename__ = "notification_rule"

    id = Column(String(36), primary_key=True, default=generate_id)
    event_type = Column(String(64), nullable=False, index=True)
    template_code = Column(String(64), nullable=False)
    channels = Column(json_type, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)
    priority = Column(Integer, nullable=False, default=0)
    conditions = Column(json_type, nullable=True)
    description = Column(Text, nullable=False)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)
    updated_at = Column(DateTime(), nullable=True, onupdate=now_in_app_naive_datetime)


__all__ = ["NotificationRuleModel"]
