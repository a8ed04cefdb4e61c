"""Use case for creating notification rules."""

from typing import Any

from sqlalchemy.orm import Session

from notification_engine.domain.entities import NotificationRule
from notification_engine.infrastructure.repositories import NotificationRuleRepository
from notification_engine.utils import now_in_app_timezone

from .validators import (
    normalize_channels,
    require_text,
    validate_conditions,
    validate_event_type,
    validate_priority,
)


def create_rule(
    session: Session,
    *,
    event_type: str,
    template_code: str,
    channels: list[str],
    description: str,
    is_active: bool = True,
    priority: int = 0,
    conditions: dict[str, Any] | None = None,
) -> NotificationRule:
    """Validate and persist a new notification rule."""

    now = now_in_app_timezone()
    entity = NotificationRule(
        id=None,
        event_type=validate_event_type(event_type),
        template_code=require_text(template_code, "template_code"),
        channels=normalize_channels(channels),
        description=require_text(description, "description"),
        is_active=bool(is_active),
        priority=validate_priority(priority),
        conditions=validate_conditions(conditions),
        created_at=now,
        updated_at=now,
    )
    return NotificationRuleRepository(session).create(entity)
