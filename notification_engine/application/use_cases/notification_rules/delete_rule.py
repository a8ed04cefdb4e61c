"""Use case for deleting notification rules."""

from sqlalchemy.orm import Session

from notification_engine.domain.errors import NotFoundError
from notification_engine.infrastructure.repositories import NotificationRuleRepository


def delete_rule(session: Session, rule_id: str) -> None:
    repository = NotificationRuleRepository(session)
    if repository.get(rule_id) is None:
        raise NotFoundError("Notification rule not found", rule_id=rule_id)
    repository.delete(rule_id)
