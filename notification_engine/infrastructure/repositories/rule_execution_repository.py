"""Persistence layer for the execution ledger."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import desc, false, func, or_, true
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from notification_engine.domain.entities import ChannelDelivery, RuleExecution
from notification_engine.infrastructure.models import (
    RuleExecutionChannelModel,
    RuleExecutionModel,
)
from notification_engine.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)

logger = logging.getLogger(__name__)


class RuleExecutionRepository:
    """Idempotency and audit records of every (event, rule) processing attempt."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def claim(self, *, rule_id: str, event_id: str) -> RuleExecution | None:
        """Insert a pending row for ``(event_id, rule_id)`` unless one exists.

        The unique constraint on the pair makes this an atomic insert-if-absent:
        when a concurrent invocation already recorded the pair the insert fails
        and ``None`` is returned.
        """

        model = RuleExecutionModel(
            rule_id=rule_id,
            event_id=event_id,
            success=False,
            retry_count=0,
            executed_at=ensure_app_naive_datetime(now_in_app_timezone()),
        )
        self.session.add(model)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            logger.info(
                "Execution for event %s and rule %s already recorded", event_id, rule_id
            )
            return None
        self.session.refresh(model)
        return self._to_entity(model)

    def complete(
        self,
        execution_id: str,
        *,
        success: bool,
        error_message: str | None,
        deliveries: Sequence[ChannelDelivery] = (),
    ) -> RuleExecution:
        model = self._get_model(execution_id)
        model.success = success
        model.error_message = error_message
        model.completed_at = ensure_app_naive_datetime(now_in_app_timezone())
        for delivery in deliveries:
            model.deliveries.append(self._delivery_to_model(delivery))
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def save_retry(self, execution: RuleExecution) -> RuleExecution:
        """Persist the outcome of a retry: counters, status and delivery rows."""

        model = self._get_model(execution.id)
        model.success = execution.success
        model.error_message = execution.error_message
        model.retry_count = execution.retry_count
        model.completed_at = ensure_app_naive_datetime(
            execution.completed_at or now_in_app_timezone()
        )
        existing = {delivery.id: delivery for delivery in model.deliveries}
        for delivery in execution.deliveries:
            if delivery.id is not None and delivery.id in existing:
                row = existing[delivery.id]
                row.status = delivery.status
                row.error_message = delivery.error_message
                row.provider_message_id = delivery.provider_message_id
                row.attempted_at = ensure_app_naive_datetime(
                    delivery.attempted_at or now_in_app_timezone()
                )
            elif delivery.id is None:
                model.deliveries.append(self._delivery_to_model(delivery))
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def get(self, execution_id: str) -> RuleExecution | None:
        model = self.session.get(RuleExecutionModel, execution_id)
        return self._to_entity(model) if model else None

    def exists_for_event(self, event_id: str) -> bool:
        return (
            self.session.query(RuleExecutionModel.id)
            .filter(RuleExecutionModel.event_id == event_id)
            .first()
            is not None
        )

    def list_recent(self, *, limit: int = 50) -> Sequence[RuleExecution]:
        query = self.session.query(RuleExecutionModel).order_by(
            desc(RuleExecutionModel.executed_at), desc(RuleExecutionModel.id)
        )
        return [self._to_entity(model) for model in query.limit(limit).all()]

    def list_failed(self, *, limit: int = 20) -> Sequence[RuleExecution]:
        query = (
            self.session.query(RuleExecutionModel)
            .filter(RuleExecutionModel.success == false())
            .filter(RuleExecutionModel.completed_at.isnot(None))
            .order_by(desc(RuleExecutionModel.executed_at), desc(RuleExecutionModel.id))
        )
        return [self._to_entity(model) for model in query.limit(limit).all()]

    def list_retryable(
        self,
        *,
        max_retries: int,
        stale_before: datetime,
        limit: int = 10,
    ) -> Sequence[RuleExecution]:
        """Return failed executions still within the retry budget.

        Claims left unfinished since before ``stale_before`` are included: the
        run that took them died before recording an outcome.
        """

        query = (
            self.session.query(RuleExecutionModel)
            .filter(RuleExecutionModel.success == false())
            .filter(
                or_(
                    RuleExecutionModel.completed_at.isnot(None),
                    RuleExecutionModel.executed_at < ensure_app_naive_datetime(stale_before),
                )
            )
            .filter(RuleExecutionModel.retry_count < max_retries)
            .order_by(RuleExecutionModel.executed_at.asc(), RuleExecutionModel.id.asc())
        )
        return [self._to_entity(model) for model in query.limit(limit).all()]

    def count_since(self, since: datetime, *, success: bool | None = None) -> int:
        query = self.session.query(func.count(RuleExecutionModel.id)).filter(
            RuleExecutionModel.executed_at >= ensure_app_naive_datetime(since)
        )
        if success is True:
            query = query.filter(RuleExecutionModel.success == true())
        elif success is False:
            query = query.filter(RuleExecutionModel.success == false())
        return query.scalar() or 0

    def _get_model(self, execution_id: str | None) -> RuleExecutionModel:
        model = (
            self.session.get(RuleExecutionModel, execution_id)
            if execution_id is not None
            else None
        )
        if model is None:
            msg = f"Rule execution with id {execution_id} not found"
            raise ValueError(msg)
        return model

    @staticmethod
    def _delivery_to_model(delivery: ChannelDelivery) -> RuleExecutionChannelModel:
        return RuleExecutionChannelModel(
            channel=delivery.channel,
            recipient_user_id=delivery.recipient_user_id,
            status=delivery.status,
            error_message=delivery.error_message,
            provider_message_id=delivery.provider_message_id,
            attempted_at=ensure_app_naive_datetime(
                delivery.attempted_at or now_in_app_timezone()
            ),
        )

    @staticmethod
    def _delivery_to_entity(model: RuleExecutionChannelModel) -> ChannelDelivery:
        return ChannelDelivery(
            id=model.id,
            execution_id=model.execution_id,
            channel=model.channel,
            status=model.status,
            recipient_user_id=model.recipient_user_id,
            error_message=model.error_message,
            provider_message_id=model.provider_message_id,
            attempted_at=ensure_app_timezone(model.attempted_at),
        )

    @classmethod
    def _to_entity(cls, model: RuleExecutionModel) -> RuleExecution:
        return RuleExecution(
            id=model.id,
            rule_id=model.rule_id,
            event_id=model.event_id,
            success=model.success,
            error_message=model.error_message,
            retry_count=model.retry_count,
            executed_at=ensure_app_timezone(model.executed_at),
            completed_at=ensure_app_timezone(model.completed_at),
            deliveries=[cls._delivery_to_entity(item) for item in model.deliveries],
        )


__all__ = ["RuleExecutionRepository"]
