"""Tests for manual retries of rule executions."""


def _run_rule_without_recipient(client) -> None:
    client.post(
        "/notification-rules/",
        json={
            "event_type": "PAYMENT_FAILED",
            "template_code": "PAYMENT_FAILED",
            "channels": ["IN_APP"],
            "description": "Payment failed",
        },
    )
    client.post(
        "/events/",
        json={
            "entity_type": "order",
            "entity_id": "ord-1",
            "event_type": "PAYMENT_FAILED",
            "actor_type": "SYSTEM",
            "payload": {"order_id": "ord-1"},
        },
    )
    client.post(
        "/cron/process-event-notifications",
        headers={"Authorization": "Bearer test-cron-secret"},
    )


def test_retry_a_failed_execution(client) -> None:
    _run_rule_without_recipient(client)
    failed = client.get("/notification-rules/stats").json()["failed_executions"]
    assert len(failed) == 1
    execution_id = failed[0]["execution"]["id"]

    response = client.post(f"/rule-executions/{execution_id}/retry")

    assert response.status_code == 200
    body = response.json()
    assert body["retry_count"] == 1
    assert body["success"] is False
    assert "No recipient could be resolved" in body["error_message"]


def test_retry_unknown_execution(client) -> None:
    response = client.post("/rule-executions/missing/retry")

    assert response.status_code == 404


def test_retry_rejects_succeeded_executions(client) -> None:
    client.post(
        "/notification-rules/",
        json={
            "event_type": "WELCOME",
            "template_code": "WELCOME",
            "channels": ["IN_APP"],
            "description": "Welcome",
        },
    )
    client.post(
        "/events/",
        json={
            "entity_type": "user",
            "entity_id": "u-1",
            "event_type": "WELCOME",
            "actor_type": "SYSTEM",
            "payload": {"user_id": "u-1"},
        },
    )
    client.post(
        "/cron/process-event-notifications",
        headers={"Authorization": "Bearer test-cron-secret"},
    )
    recent = client.get("/notification-rules/stats").json()["recent_executions"]
    execution_id = recent[0]["execution"]["id"]

    response = client.post(f"/rule-executions/{execution_id}/retry")

    assert response.status_code == 409
    assert response.json()["detail"]["error"] == "Rule execution already succeeded"
