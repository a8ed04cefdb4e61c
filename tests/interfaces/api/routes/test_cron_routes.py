"""Tests for the scheduler trigger endpoints."""

import pytest

from notification_engine.config import Settings
from notification_engine.interfaces.api.dependencies import get_app_settings

PROCESS_URL = "/cron/process-event-notifications"
RETRY_URL = "/cron/retry-failed-executions"
AUTHORIZATION = "Bearer test-cron-secret"


def _seed_step_completed(client) -> None:
    response = client.post(
        "/notification-rules/",
        json={
            "event_type": "STEP_COMPLETED",
            "template_code": "STEP_COMPLETED",
            "channels": ["IN_APP"],
            "description": "Notify the client when a step is completed",
        },
    )
    assert response.status_code == 201
    response = client.post(
        "/events/",
        json={
            "entity_type": "dossier",
            "entity_id": "dos-1",
            "event_type": "STEP_COMPLETED",
            "actor_type": "SYSTEM",
            "payload": {"user_id": "u-1", "step_label": "Identification"},
        },
    )
    assert response.status_code == 201


@pytest.mark.parametrize("url", [PROCESS_URL, RETRY_URL])
def test_cron_endpoints_reject_missing_or_wrong_secret(client, url) -> None:
    missing = client.post(url)
    wrong = client.post(url, headers={"Authorization": "Bearer nope"})

    assert missing.status_code == 401
    assert missing.json() == {"detail": {"error": "Unauthorized"}}
    assert wrong.status_code == 401


def test_cron_secret_is_accepted_in_the_body(client) -> None:
    response = client.post(PROCESS_URL, json={"Authorization": AUTHORIZATION})

    assert response.status_code == 200
    assert response.json()["events_scanned"] == 0


def test_unconfigured_secret_rejects_every_call(client) -> None:
    client.app.dependency_overrides[get_app_settings] = lambda: Settings(
        database_url="sqlite://", cron_secret=None
    )

    response = client.post(PROCESS_URL, headers={"Authorization": "Bearer "})

    assert response.status_code == 401


def test_process_event_notifications_runs_matching_rules_once(client) -> None:
    _seed_step_completed(client)

    first = client.post(PROCESS_URL, headers={"Authorization": AUTHORIZATION})
    second = client.post(PROCESS_URL, headers={"Authorization": AUTHORIZATION})

    assert first.status_code == 200
    report = first.json()
    assert report["events_scanned"] == 1
    assert report["rules_processed"] == 1
    assert report["succeeded"] == 1
    assert report["failed"] == 0
    assert second.json()["rules_processed"] == 0
    assert second.json()["rules_skipped"] == 1

    stats = client.get("/notification-rules/stats").json()
    assert stats["rule_executions_last_24h"] == 1
    assert stats["notifications_created_last_24h"] == 1
    assert stats["success_rate_last_24h"] == 100


def test_health_check_needs_no_secret(client) -> None:
    response = client.get(PROCESS_URL)

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["endpoint"] == PROCESS_URL


def test_retry_failed_executions_reports_counts(client) -> None:
    response = client.post(RETRY_URL, headers={"Authorization": AUTHORIZATION})

    assert response.status_code == 200
    assert response.json() == {"retried": 0, "succeeded": 0, "failed": 0}
