"""Run every matching rule for a single event."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from sqlalchemy.orm import Session

from notification_engine.application.services import match_rules
from notification_engine.config import Settings
from notification_engine.domain.entities import Event
from notification_engine.infrastructure.channels import ChannelDispatcher, build_dispatchers
from notification_engine.infrastructure.repositories import (
    NotificationRuleRepository,
    RuleExecutionRepository,
)

from .dispatch_rule import RuleOutcome, dispatch_rule

logger = logging.getLogger(__name__)


@dataclass
class EventOutcome:
    """Counters for the rules processed for one event."""

    rules_processed: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0


def process_event(
    session: Session,
    settings: Settings,
    event: Event,
    *,
    dispatchers: Mapping[str, ChannelDispatcher] | None = None,
) -> EventOutcome:
    """Dispatch ``event`` through every active rule whose conditions match.

    Each (event, rule) pair is claimed in the ledger before dispatching; a
    pair already claimed by another run is skipped. Failures of one rule are
    recorded on its ledger entry and never prevent the next rule from running.
    """

    if dispatchers is None:
        dispatchers = build_dispatchers(session, settings)

    rules = NotificationRuleRepository(session).list_for_event_type(event.event_type)
    matched = match_rules(rules, event)
    ledger = RuleExecutionRepository(session)
    outcome = EventOutcome()

    for rule in matched:
        execution = ledger.claim(rule_id=rule.id, event_id=event.id)
        if execution is None:
            outcome.skipped += 1
            continue

        outcome.rules_processed += 1
        try:
            result = dispatch_rule(session, settings, rule, event, dispatchers)
        except Exception as exc:
            logger.exception("Rule %s failed for event %s", rule.id, event.id)
            session.rollback()
            result = RuleOutcome(error_message=str(exc) or type(exc).__name__)

        ledger.complete(
            execution.id,
            success=result.success,
            error_message=result.error_message,
            deliveries=result.deliveries,
        )
        if result.success:
            outcome.succeeded += 1
        else:
            outcome.failed += 1

    logger.info(
        "Event %s (%s): %d rule(s) matched, %d succeeded, %d failed, %d already recorded",
        event.id,
        event.event_type,
        len(matched),
        outcome.succeeded,
        outcome.failed,
        outcome.skipped,
    )
    return outcome


__all__ = ["EventOutcome", "process_event"]
