"""Scheduler entry point: process the events of the trailing window."""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.orm import Session

from notification_engine.config import Settings
from notification_engine.infrastructure.channels import ChannelDispatcher, build_dispatchers
from notification_engine.infrastructure.repositories import (
    EventRepository,
    RuleExecutionRepository,
)
from notification_engine.utils import now_in_app_timezone

from .process_event import process_event

logger = logging.getLogger(__name__)


@dataclass
class ProcessingReport:
    """Summary returned to the cron trigger."""

    events_scanned: int = 0
    events_processed: int = 0
    events_skipped: int = 0
    events_failed: int = 0
    rules_processed: int = 0
    rules_skipped: int = 0
    succeeded: int = 0
    failed: int = 0
    duration_ms: int = 0


def process_recent_events(
    session: Session,
    settings: Settings,
    *,
    dispatchers: Mapping[str, ChannelDispatcher] | None = None,
) -> ProcessingReport:
    """Scan recent events and run their matching rules once.

    With ``idempotency_scope="event"`` an event that already has any ledger
    entry is skipped as a whole. With ``"rule"`` each (event, rule) pair is
    gated on its own, so rules created after an event was processed still
    fire for it. Failures of a single event are logged and counted; only a
    failure to read the event log propagates.
    """

    started = time.perf_counter()
    if dispatchers is None:
        dispatchers = build_dispatchers(session, settings)

    since = now_in_app_timezone() - timedelta(minutes=settings.event_window_minutes)
    events = EventRepository(session).list_since(since, limit=settings.event_batch_size)
    ledger = RuleExecutionRepository(session)
    report = ProcessingReport(events_scanned=len(events))

    for event in events:
        if settings.idempotency_scope == "event" and ledger.exists_for_event(event.id):
            report.events_skipped += 1
            continue
        try:
            outcome = process_event(session, settings, event, dispatchers=dispatchers)
        except Exception:
            logger.exception("Failed to process event %s", event.id)
            session.rollback()
            report.events_failed += 1
            continue
        report.events_processed += 1
        report.rules_processed += outcome.rules_processed
        report.rules_skipped += outcome.skipped
        report.succeeded += outcome.succeeded
        report.failed += outcome.failed

    report.duration_ms = int((time.perf_counter() - started) * 1000)
    logger.info(
        "Processed %d/%d event(s): %d rule(s), %d succeeded, %d failed in %d ms",
        report.events_processed,
        report.events_scanned,
        report.rules_processed,
        report.succeeded,
        report.failed,
        report.duration_ms,
    )
    return report


__all__ = ["ProcessingReport", "process_recent_events"]
