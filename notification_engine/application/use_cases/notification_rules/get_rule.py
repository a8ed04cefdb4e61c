"""Use case for retrieving a notification rule."""

from sqlalchemy.orm import Session

from notification_engine.domain.entities import NotificationRule
from notification_engine.domain.errors import NotFoundError
from notification_engine.infrastructure.repositories import NotificationRuleRepository


def get_rule(session: Session, rule_id: str) -> NotificationRule:
    rule = NotificationRuleRepository(session).get(rule_id)
    if rule is None:
        raise NotFoundError("Notification rule not found", rule_id=rule_id)
    return rule
