"""End-to-end tests of the scheduler, the execution ledger and retries."""

from __future__ import annotations

import importlib
from datetime import timedelta

import pytest

from notification_engine.application.use_cases.notification_rules import create_rule, toggle_rule
from notification_engine.application.use_cases.orchestration import (
    process_event,
    process_recent_events,
    record_execution,
    retry_execution,
    retry_failed_executions,
)
from notification_engine.domain.entities import DeliveryStatus
from notification_engine.domain.errors import NotFoundError, RetryNotAllowedError
from notification_engine.infrastructure.channels import build_dispatchers
from notification_engine.infrastructure.models import RuleExecutionModel
from notification_engine.infrastructure.repositories import (
    NotificationRepository,
    RuleExecutionRepository,
)
from notification_engine.utils import now_in_app_timezone


def _rule(session, **overrides):
    values = {
        "event_type": "STEP_COMPLETED",
        "template_code": "STEP_COMPLETED",
        "channels": ["IN_APP"],
        "description": "Step completed",
    }
    values.update(overrides)
    return create_rule(session, **values)


def _executions(session):
    return RuleExecutionRepository(session).list_recent(limit=100)


def test_step_completed_creates_in_app_notification_for_dossier_owner(
    session, settings, add_event, add_dossier
) -> None:
    add_dossier("dos-1", owner_id="client-1")
    _rule(session)
    add_event("STEP_COMPLETED", payload={"step_label": "Identification", "dossier_id": "dos-1"})

    report = process_recent_events(
        session, settings, dispatchers=build_dispatchers(session, settings)
    )

    notifications = NotificationRepository(session).list_for_user("client-1")
    assert len(notifications) == 1
    assert notifications[0].title == "Étape terminée"
    assert "Identification" in notifications[0].message
    assert notifications[0].action_url == "https://app.example.com/dashboard/dossiers/dos-1"
    executions = _executions(session)
    assert len(executions) == 1
    assert executions[0].success is True
    assert executions[0].deliveries[0].status == DeliveryStatus.SENT.value
    assert report.events_scanned == 1
    assert report.rules_processed == 1
    assert report.succeeded == 1
    assert report.failed == 0


def test_unmet_conditions_produce_nothing(
    session, settings, add_event, recording_dispatchers
) -> None:
    _rule(session, conditions={"field": "payload.step_label", "op": "eq", "value": "Payment"})
    add_event("STEP_COMPLETED", payload={"step_label": "Identification", "user_id": "u-1"})

    report = process_recent_events(session, settings, dispatchers=recording_dispatchers)

    assert _executions(session) == []
    assert recording_dispatchers["IN_APP"].sent == []
    assert report.rules_processed == 0


def test_unresolvable_recipient_is_recorded_without_dispatch(
    session, settings, add_event, recording_dispatchers
) -> None:
    _rule(
        session,
        event_type="PAYMENT_FAILED",
        template_code="PAYMENT_FAILED",
        channels=["EMAIL", "IN_APP"],
    )
    add_event("PAYMENT_FAILED", payload={"order_id": "ord-1"}, entity_type="order", entity_id="ord-1")

    report = process_recent_events(session, settings, dispatchers=recording_dispatchers)

    executions = _executions(session)
    assert len(executions) == 1
    assert executions[0].success is False
    assert "No recipient could be resolved" in executions[0].error_message
    assert executions[0].deliveries == []
    assert recording_dispatchers["EMAIL"].sent == []
    assert recording_dispatchers["IN_APP"].sent == []
    assert report.failed == 1


def test_email_failure_does_not_block_in_app(
    session, settings, add_event, add_user
) -> None:
    add_user("u-1", email="client@example.com")
    _rule(session, channels=["EMAIL", "IN_APP"])
    add_event("STEP_COMPLETED", payload={"user_id": "u-1", "step_label": "Statuts"})

    process_recent_events(session, settings, dispatchers=build_dispatchers(session, settings))

    assert len(NotificationRepository(session).list_for_user("u-1")) == 1
    execution = _executions(session)[0]
    statuses = {delivery.channel: delivery.status for delivery in execution.deliveries}
    assert statuses == {"EMAIL": "FAILED", "IN_APP": "SENT"}
    assert execution.success is False
    assert execution.error_message.startswith("EMAIL: SendGrid configuration incomplete")


def test_inactive_rules_never_fire(session, settings, add_event, recording_dispatchers) -> None:
    rule = _rule(session)
    toggle_rule(session, rule.id)
    add_event("STEP_COMPLETED", payload={"user_id": "u-1"})

    process_recent_events(session, settings, dispatchers=recording_dispatchers)

    assert _executions(session) == []
    assert recording_dispatchers["IN_APP"].sent == []


def test_every_matching_rule_fires_in_priority_order(
    session, settings, add_event, recording_dispatchers
) -> None:
    low = _rule(session, priority=1, template_code="LOW")
    high = _rule(session, priority=9, template_code="HIGH")
    _rule(session, event_type="WELCOME", template_code="WELCOME")
    event = add_event("STEP_COMPLETED", payload={"user_id": "u-1"})

    outcome = process_event(session, settings, event, dispatchers=recording_dispatchers)

    fired = [rule.template_code for _, _, _, rule in recording_dispatchers["IN_APP"].sent]
    assert fired == [high.template_code, low.template_code]
    assert outcome.rules_processed == 2
    assert outcome.succeeded == 2


def test_processing_twice_dispatches_once(session, settings, add_event, recording_dispatchers) -> None:
    _rule(session)
    add_event("STEP_COMPLETED", payload={"user_id": "u-1"})

    first = process_recent_events(session, settings, dispatchers=recording_dispatchers)
    second = process_recent_events(session, settings, dispatchers=recording_dispatchers)

    assert len(recording_dispatchers["IN_APP"].sent) == 1
    assert len(_executions(session)) == 1
    assert first.rules_processed == 1
    assert second.rules_processed == 0
    assert second.rules_skipped == 1


def test_claim_is_insert_if_absent(session, add_event) -> None:
    rule = _rule(session)
    event = add_event("STEP_COMPLETED")
    ledger = RuleExecutionRepository(session)

    first = ledger.claim(rule_id=rule.id, event_id=event.id)
    second = ledger.claim(rule_id=rule.id, event_id=event.id)

    assert first is not None and first.is_pending
    assert second is None


def test_rule_scope_lets_new_rules_fire_for_processed_events(
    session, settings, add_event, recording_dispatchers
) -> None:
    _rule(session)
    add_event("STEP_COMPLETED", payload={"user_id": "u-1"})
    process_recent_events(session, settings, dispatchers=recording_dispatchers)

    _rule(session, template_code="SECOND")
    process_recent_events(session, settings, dispatchers=recording_dispatchers)

    assert len(recording_dispatchers["IN_APP"].sent) == 2
    assert len(_executions(session)) == 2


def test_event_scope_skips_events_with_any_execution(
    session, settings, add_event, recording_dispatchers
) -> None:
    event_scoped = settings.model_copy(update={"idempotency_scope": "event"})
    _rule(session)
    add_event("STEP_COMPLETED", payload={"user_id": "u-1"})
    process_recent_events(session, event_scoped, dispatchers=recording_dispatchers)

    _rule(session, template_code="SECOND")
    report = process_recent_events(session, event_scoped, dispatchers=recording_dispatchers)

    assert report.events_skipped == 1
    assert len(recording_dispatchers["IN_APP"].sent) == 1


def test_events_outside_the_window_are_ignored(
    session, settings, add_event, recording_dispatchers
) -> None:
    _rule(session)
    add_event(
        "STEP_COMPLETED",
        payload={"user_id": "u-1"},
        created_at=now_in_app_timezone() - timedelta(minutes=settings.event_window_minutes + 5),
    )

    report = process_recent_events(session, settings, dispatchers=recording_dispatchers)

    assert report.events_scanned == 0
    assert recording_dispatchers["IN_APP"].sent == []


def test_batch_size_limits_the_scan(session, settings, add_event, recording_dispatchers) -> None:
    _rule(session)
    for index in range(3):
        add_event("STEP_COMPLETED", payload={"user_id": f"u-{index}"})

    report = process_recent_events(
        session,
        settings.model_copy(update={"event_batch_size": 2}),
        dispatchers=recording_dispatchers,
    )

    assert report.events_scanned == 2


def test_a_failing_event_does_not_abort_the_batch(
    session, settings, add_event, recording_dispatchers, monkeypatch
) -> None:
    module = importlib.import_module(
        "notification_engine.application.use_cases.orchestration.process_recent_events"
    )

    _rule(session)
    broken = add_event("STEP_COMPLETED", payload={"user_id": "u-1"})
    add_event("STEP_COMPLETED", payload={"user_id": "u-2"})
    original = module.process_event

    def flaky(db, cfg, event, *, dispatchers=None):
        if event.id == broken.id:
            raise RuntimeError("boom")
        return original(db, cfg, event, dispatchers=dispatchers)

    monkeypatch.setattr(module, "process_event", flaky)

    report = process_recent_events(session, settings, dispatchers=recording_dispatchers)

    assert report.events_failed == 1
    assert report.events_processed == 1
    assert len(recording_dispatchers["IN_APP"].sent) == 1


def test_unknown_channels_fail_the_rule(session, settings, add_event, recording_dispatchers) -> None:
    _rule(session, channels=["IN_APP", "SMS"])
    event = add_event("STEP_COMPLETED", payload={"user_id": "u-1"})
    del recording_dispatchers["SMS"]

    process_event(session, settings, event, dispatchers=recording_dispatchers)

    execution = _executions(session)[0]
    assert execution.success is False
    assert execution.error_message == "SMS: Unknown channel: SMS"


def test_sms_only_rules_succeed_as_not_supported(
    session, settings, add_event
) -> None:
    _rule(session, channels=["SMS"])
    add_event("STEP_COMPLETED", payload={"user_id": "u-1"})

    process_recent_events(session, settings, dispatchers=build_dispatchers(session, settings))

    execution = _executions(session)[0]
    assert execution.success is True
    assert execution.deliveries[0].status == DeliveryStatus.NOT_SUPPORTED.value


def test_record_execution_is_one_shot(session, add_event) -> None:
    rule = _rule(session)
    event = add_event("STEP_COMPLETED")

    recorded = record_execution(
        session, rule_id=rule.id, event_id=event.id, success=False, error_message="boom"
    )
    duplicate = record_execution(session, rule_id=rule.id, event_id=event.id, success=True)

    assert recorded.success is False
    assert recorded.error_message == "boom"
    assert recorded.completed_at is not None
    assert duplicate is None


def test_retry_redispatches_only_failed_channels(
    session, settings, add_event, recording_dispatchers
) -> None:
    _rule(session, channels=["EMAIL", "IN_APP"])
    add_event("STEP_COMPLETED", payload={"user_id": "u-1"})
    recording_dispatchers["EMAIL"].error = "provider down"
    process_recent_events(session, settings, dispatchers=recording_dispatchers)
    failed = _executions(session)[0]
    assert failed.success is False

    recording_dispatchers["EMAIL"].error = None
    retried = retry_execution(session, settings, failed.id, dispatchers=recording_dispatchers)

    assert retried.success is True
    assert retried.error_message is None
    assert retried.retry_count == 1
    assert len(retried.deliveries) == 2
    assert {delivery.status for delivery in retried.deliveries} == {"SENT"}
    assert len(recording_dispatchers["IN_APP"].sent) == 1
    assert len(recording_dispatchers["EMAIL"].sent) == 1


def test_retry_reruns_rules_that_failed_before_dispatch(
    session, settings, add_event, add_dossier, recording_dispatchers
) -> None:
    _rule(session)
    add_event("STEP_COMPLETED", payload={"dossier_id": "dos-late"})
    process_recent_events(session, settings, dispatchers=recording_dispatchers)
    failed = _executions(session)[0]
    assert failed.deliveries == []

    add_dossier("dos-late", owner_id="client-9")
    retried = retry_execution(session, settings, failed.id, dispatchers=recording_dispatchers)

    assert retried.success is True
    assert [delivery.recipient_user_id for delivery in retried.deliveries] == ["client-9"]


def test_retry_guards(session, settings, add_event, recording_dispatchers) -> None:
    rule = _rule(session)
    event = add_event("STEP_COMPLETED", payload={"user_id": "u-1"})
    succeeded = record_execution(session, rule_id=rule.id, event_id=event.id, success=True)

    with pytest.raises(NotFoundError):
        retry_execution(session, settings, "missing")
    with pytest.raises(RetryNotAllowedError):
        retry_execution(session, settings, succeeded.id)

    other = add_event("STEP_COMPLETED", payload={"user_id": "u-1"})
    pending = RuleExecutionRepository(session).claim(rule_id=rule.id, event_id=other.id)
    with pytest.raises(RetryNotAllowedError):
        retry_execution(session, settings, pending.id)


def test_retry_budget_is_respected(session, settings, add_event, recording_dispatchers) -> None:
    _rule(session)
    add_event("STEP_COMPLETED", payload={"user_id": "u-1"})
    recording_dispatchers["IN_APP"].error = "still down"
    process_recent_events(session, settings, dispatchers=recording_dispatchers)
    budget = settings.model_copy(update={"execution_max_retries": 2})

    first = retry_failed_executions(session, budget, dispatchers=recording_dispatchers)
    second = retry_failed_executions(session, budget, dispatchers=recording_dispatchers)
    third = retry_failed_executions(session, budget, dispatchers=recording_dispatchers)

    assert (first.retried, first.failed) == (1, 1)
    assert (second.retried, second.failed) == (1, 1)
    assert third.retried == 0
    execution = _executions(session)[0]
    assert execution.retry_count == 2
    assert len(execution.deliveries) == 1
    with pytest.raises(RetryNotAllowedError):
        retry_execution(session, budget, execution.id, dispatchers=recording_dispatchers)


def _age_claim(session, execution_id: str, minutes: int) -> None:
    model = session.get(RuleExecutionModel, execution_id)
    model.executed_at = model.executed_at - timedelta(minutes=minutes)
    session.commit()


def test_abandoned_claims_are_retried(session, settings, add_event, recording_dispatchers) -> None:
    rule = _rule(session)
    event = add_event("STEP_COMPLETED", payload={"user_id": "u-1"})
    claimed = RuleExecutionRepository(session).claim(rule_id=rule.id, event_id=event.id)
    _age_claim(session, claimed.id, settings.pending_claim_timeout_minutes + 1)

    skipped = process_recent_events(session, settings, dispatchers=recording_dispatchers)
    report = retry_failed_executions(session, settings, dispatchers=recording_dispatchers)

    assert skipped.rules_skipped == 1
    assert (report.retried, report.succeeded) == (1, 1)
    assert len(recording_dispatchers["IN_APP"].sent) == 1
    execution = _executions(session)[0]
    assert execution.success is True
    assert execution.retry_count == 1
    assert execution.completed_at is not None


def test_fresh_claims_are_left_to_their_run(
    session, settings, add_event, recording_dispatchers
) -> None:
    rule = _rule(session)
    event = add_event("STEP_COMPLETED", payload={"user_id": "u-1"})
    claimed = RuleExecutionRepository(session).claim(rule_id=rule.id, event_id=event.id)

    report = retry_failed_executions(session, settings, dispatchers=recording_dispatchers)

    assert report.retried == 0
    with pytest.raises(RetryNotAllowedError, match="still in progress"):
        retry_execution(session, settings, claimed.id, dispatchers=recording_dispatchers)
    assert recording_dispatchers["IN_APP"].sent == []


def test_an_abandoned_claim_can_be_retried_by_id(
    session, settings, add_event, recording_dispatchers
) -> None:
    rule = _rule(session)
    event = add_event("STEP_COMPLETED", payload={"user_id": "u-1"})
    claimed = RuleExecutionRepository(session).claim(rule_id=rule.id, event_id=event.id)
    _age_claim(session, claimed.id, settings.pending_claim_timeout_minutes + 1)

    retried = retry_execution(session, settings, claimed.id, dispatchers=recording_dispatchers)

    assert retried.success is True
    assert [delivery.status for delivery in retried.deliveries] == ["SENT"]
