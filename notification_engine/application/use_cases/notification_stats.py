"""Use case computing the monitoring statistics of the orchestration engine."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import timedelta

from sqlalchemy.orm import Session

from notification_engine.domain.entities import Event, NotificationRule, RuleExecution
from notification_engine.infrastructure.repositories import (
    EventRepository,
    NotificationRepository,
    NotificationRuleRepository,
    RuleExecutionRepository,
)
from notification_engine.utils import now_in_app_timezone

RECENT_EXECUTIONS_LIMIT = 50
FAILED_EXECUTIONS_LIMIT = 20


@dataclass
class ExecutionSummary:
    """Ledger entry joined with its rule and event for display."""

    execution: RuleExecution
    rule: NotificationRule | None
    event: Event | None


@dataclass
class NotificationStats:
    """Counters over the last 24 hours plus the latest ledger entries."""

    total_active_rules: int
    events_last_24h: int
    rule_executions_last_24h: int
    notifications_created_last_24h: int
    success_rate_last_24h: int
    recent_executions: list[ExecutionSummary] = field(default_factory=list)
    failed_executions: list[ExecutionSummary] = field(default_factory=list)


def _success_rate(successful: int, total: int) -> int:
    if total <= 0:
        return 100
    return int(math.floor(successful * 100 / total + 0.5))


def _summaries(
    executions: Sequence[RuleExecution],
    rules: dict[str, NotificationRule],
    events: dict[str, Event],
) -> list[ExecutionSummary]:
    return [
        ExecutionSummary(
            execution=execution,
            rule=rules.get(execution.rule_id),
            event=events.get(execution.event_id),
        )
        for execution in executions
    ]


def get_notification_stats(session: Session) -> NotificationStats:
    since = now_in_app_timezone() - timedelta(hours=24)
    executions = RuleExecutionRepository(session)

    total = executions.count_since(since)
    successful = executions.count_since(since, success=True)
    recent = executions.list_recent(limit=RECENT_EXECUTIONS_LIMIT)
    failed = executions.list_failed(limit=FAILED_EXECUTIONS_LIMIT)

    listed = [*recent, *failed]
    rules = NotificationRuleRepository(session).get_map_by_ids(
        [execution.rule_id for execution in listed]
    )
    events = EventRepository(session).get_map_by_ids(
        [execution.event_id for execution in listed]
    )

    return NotificationStats(
        total_active_rules=NotificationRuleRepository(session).count_active(),
        events_last_24h=EventRepository(session).count_since(since),
        rule_executions_last_24h=total,
        notifications_created_last_24h=NotificationRepository(session).count_since(since),
        success_rate_last_24h=_success_rate(successful, total),
        recent_executions=_summaries(recent, rules, events),
        failed_executions=_summaries(failed, rules, events),
    )


__all__ = ["ExecutionSummary", "NotificationStats", "get_notification_stats"]
