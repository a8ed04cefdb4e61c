"""Persistence layer for notification rules."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import asc, desc, func, true
from sqlalchemy.orm import Session

from notification_engine.domain.entities import NotificationRule
from notification_engine.infrastructure.models import (
    NotificationRuleModel,
    RuleExecutionModel,
)
from notification_engine.utils import ensure_app_naive_datetime, ensure_app_timezone


class NotificationRuleRepository:
    """Provide CRUD operations for notification rules."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list(
        self,
        *,
        event_type: str | None = None,
        is_active: bool | None = None,
        channel: str | None = None,
    ) -> Sequence[NotificationRule]:
        query = self.session.query(NotificationRuleModel)
        if event_type is not None:
            query = query.filter(NotificationRuleModel.event_type == event_type)
        if is_active is not None:
            query = query.filter(NotificationRuleModel.is_active == is_active)
        query = query.order_by(
            desc(NotificationRuleModel.priority), desc(NotificationRuleModel.created_at)
        )
        rules = [self._to_entity(model) for model in query.all()]
        # Channels are a JSON list; filter in Python to stay dialect independent.
        if channel is not None:
            rules = [rule for rule in rules if rule.targets(channel)]
        return rules

    def list_for_event_type(self, event_type: str) -> Sequence[NotificationRule]:
        """Return every rule bound to ``event_type``, read fresh from the database."""

        query = (
            self.session.query(NotificationRuleModel)
            .filter(NotificationRuleModel.event_type == event_type)
            .order_by(
                desc(NotificationRuleModel.priority),
                asc(NotificationRuleModel.created_at),
                asc(NotificationRuleModel.id),
            )
        )
        return [self._to_entity(model) for model in query.all()]

    def count_active(self) -> int:
        return (
            self.session.query(func.count(NotificationRuleModel.id))
            .filter(NotificationRuleModel.is_active == true())
            .scalar()
            or 0
        )

    def get(self, rule_id: str) -> NotificationRule | None:
        model = self.session.get(NotificationRuleModel, rule_id)
        return self._to_entity(model) if model else None

    def get_map_by_ids(self, rule_ids: Sequence[str]) -> dict[str, NotificationRule]:
        ids = {rule_id for rule_id in rule_ids if rule_id}
        if not ids:
            return {}
        models = (
            self.session.query(NotificationRuleModel)
            .filter(NotificationRuleModel.id.in_(ids))
            .all()
        )
        return {model.id: self._to_entity(model) for model in models}

    def create(self, rule: NotificationRule) -> NotificationRule:
        model = NotificationRuleModel()
        if rule.id is not None:
            model.id = rule.id
        self._apply_entity_to_model(model, rule)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def update(self, rule: NotificationRule) -> NotificationRule:
        model = self.session.get(NotificationRuleModel, rule.id)
        if not model:
            msg = f"Notification rule with id {rule.id} not found"
            raise ValueError(msg)
        self._apply_entity_to_model(model, rule)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def delete(self, rule_id: str) -> None:
        """Delete the rule together with its execution history."""

        model = self.session.get(NotificationRuleModel, rule_id)
        if not model:
            msg = f"Notification rule with id {rule_id} not found"
            raise ValueError(msg)
        executions = (
            self.session.query(RuleExecutionModel)
            .filter(RuleExecutionModel.rule_id == rule_id)
            .all()
        )
        for execution in executions:
            self.session.delete(execution)
        self.session.delete(model)
        self.session.commit()

    @staticmethod
    def _apply_entity_to_model(model: NotificationRuleModel, rule: NotificationRule) -> None:
        model.event_type = rule.event_type
        model.template_code = rule.template_code
        model.channels = list(rule.channels)
        model.is_active = rule.is_active
        model.priority = rule.priority
        model.conditions = rule.conditions
        model.description = rule.description
        if rule.created_at is not None:
            model.created_at = ensure_app_naive_datetime(rule.created_at)
        if rule.updated_at is not None:
            model.updated_at = ensure_app_naive_datetime(rule.updated_at)

    @staticmethod
    def _to_entity(model: NotificationRuleModel) -> NotificationRule:
        return NotificationRule(
            id=model.id,
            event_type=model.event_type,
            template_code=model.template_code,
            channels=list(model.channels or []),
            description=model.description,
            is_active=model.is_active,
            priority=model.priority,
            conditions=model.conditions,
            created_at=ensure_app_timezone(model.created_at),
            updated_at=ensure_app_timezone(model.updated_at),
        )


__all__ = ["NotificationRuleRepository"]
