"""Re-dispatch the failed channels of failed rule executions."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from notification_engine.application.services import ContentRenderer
from notification_engine.config import Settings
from notification_engine.domain.entities import ChannelDelivery, Recipient, RuleExecution
from notification_engine.domain.errors import NotFoundError, RetryNotAllowedError
from notification_engine.infrastructure.channels import ChannelDispatcher, build_dispatchers
from notification_engine.infrastructure.repositories import (
    EventRepository,
    NotificationRuleRepository,
    RuleExecutionRepository,
    UserRepository,
)
from notification_engine.utils import now_in_app_timezone

from .dispatch_rule import dispatch_rule, send_on_channel, summarize_deliveries

logger = logging.getLogger(__name__)


@dataclass
class RetryReport:
    retried: int = 0
    succeeded: int = 0
    failed: int = 0


def retry_execution(
    session: Session,
    settings: Settings,
    execution_id: str,
    *,
    dispatchers: Mapping[str, ChannelDispatcher] | None = None,
) -> RuleExecution:
    """Retry one failed execution.

    Raises :class:`NotFoundError` for an unknown id and
    :class:`RetryNotAllowedError` when the execution succeeded, is still in
    progress or has used its retry budget. A claim older than
    ``pending_claim_timeout_minutes`` is retried as failed before dispatch.
    """

    execution = RuleExecutionRepository(session).get(execution_id)
    if execution is None:
        raise NotFoundError("Rule execution not found", execution_id=execution_id)
    if execution.success:
        raise RetryNotAllowedError(
            "Rule execution already succeeded", execution_id=execution_id
        )
    if execution.is_pending and not execution.is_abandoned(_stale_before(settings)):
        raise RetryNotAllowedError(
            "Rule execution is still in progress", execution_id=execution_id
        )
    if execution.retry_count >= settings.execution_max_retries:
        raise RetryNotAllowedError(
            "Retry budget exhausted",
            execution_id=execution_id,
            retry_count=execution.retry_count,
            max_retries=settings.execution_max_retries,
        )
    if dispatchers is None:
        dispatchers = build_dispatchers(session, settings)
    return _retry(session, settings, execution, dispatchers)


def retry_failed_executions(
    session: Session,
    settings: Settings,
    *,
    max_retries: int | None = None,
    limit: int = 10,
    dispatchers: Mapping[str, ChannelDispatcher] | None = None,
) -> RetryReport:
    """Retry up to ``limit`` failed executions still within the retry budget."""

    budget = settings.execution_max_retries if max_retries is None else max_retries
    candidates = RuleExecutionRepository(session).list_retryable(
        max_retries=budget, stale_before=_stale_before(settings), limit=limit
    )
    if dispatchers is None:
        dispatchers = build_dispatchers(session, settings)

    report = RetryReport()
    for execution in candidates:
        report.retried += 1
        try:
            result = _retry(session, settings, execution, dispatchers)
        except Exception:
            logger.exception("Retry of execution %s failed", execution.id)
            session.rollback()
            report.failed += 1
            continue
        if result.success:
            report.succeeded += 1
        else:
            report.failed += 1

    logger.info(
        "Retried %d execution(s): %d succeeded, %d failed",
        report.retried,
        report.succeeded,
        report.failed,
    )
    return report


def _stale_before(settings: Settings) -> datetime:
    return now_in_app_timezone() - timedelta(minutes=settings.pending_claim_timeout_minutes)


def _retry(
    session: Session,
    settings: Settings,
    execution: RuleExecution,
    dispatchers: Mapping[str, ChannelDispatcher],
) -> RuleExecution:
    event = EventRepository(session).get(execution.event_id)
    if event is None:
        raise NotFoundError("Event not found", event_id=execution.event_id)
    rule = NotificationRuleRepository(session).get(execution.rule_id)
    if rule is None:
        raise NotFoundError("Notification rule not found", rule_id=execution.rule_id)

    if not execution.deliveries:
        # No delivery was recorded the first time: run the whole rule again.
        outcome = dispatch_rule(session, settings, rule, event, dispatchers)
        deliveries = outcome.deliveries
        error_message = outcome.error_message
    else:
        failed = execution.failed_deliveries()
        recipients = UserRepository(session).get_recipient_map(
            delivery.recipient_user_id for delivery in failed
        )
        content = ContentRenderer(settings.app_base_url).render(rule.template_code, event)
        retried: dict[str, ChannelDelivery] = {}
        for delivery in failed:
            user_id = delivery.recipient_user_id or ""
            recipient = recipients.get(user_id) or Recipient(user_id=user_id)
            attempt = send_on_channel(
                dispatchers, delivery.channel, recipient, content, event=event, rule=rule
            )
            retried[delivery.id] = replace(
                delivery,
                status=attempt.status,
                error_message=attempt.error_message,
                provider_message_id=attempt.provider_message_id,
                attempted_at=attempt.attempted_at,
            )
        deliveries = [retried.get(delivery.id, delivery) for delivery in execution.deliveries]
        error_message = summarize_deliveries(deliveries)

    updated = replace(
        execution,
        success=error_message is None,
        error_message=error_message,
        retry_count=execution.retry_count + 1,
        completed_at=now_in_app_timezone(),
        deliveries=deliveries,
    )
    saved = RuleExecutionRepository(session).save_retry(updated)
    logger.info(
        "Execution %s retried (attempt %d): %s",
        saved.id,
        saved.retry_count,
        "succeeded" if saved.success else saved.error_message,
    )
    return saved


__all__ = ["RetryReport", "retry_execution", "retry_failed_executions"]
