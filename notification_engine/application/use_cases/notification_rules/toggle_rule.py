"""Use case for activating or deactivating a notification rule."""

from dataclasses import replace

from sqlalchemy.orm import Session

from notification_engine.domain.entities import NotificationRule
from notification_engine.domain.errors import NotFoundError
from notification_engine.infrastructure.repositories import NotificationRuleRepository
from notification_engine.utils import now_in_app_timezone


def toggle_rule(session: Session, rule_id: str) -> NotificationRule:
    """Flip ``is_active``. Inactive rules are ignored by the scheduler."""

    repository = NotificationRuleRepository(session)
    current = repository.get(rule_id)
    if current is None:
        raise NotFoundError("Notification rule not found", rule_id=rule_id)
    return repository.update(
        replace(current, is_active=not current.is_active, updated_at=now_in_app_timezone())
    )
