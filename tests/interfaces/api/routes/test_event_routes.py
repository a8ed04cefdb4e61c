"""Tests for event ingestion and lookup."""


def test_create_and_read_event(client) -> None:
    created = client.post(
        "/events/",
        json={
            "entity_type": "dossier",
            "entity_id": "dos-1",
            "event_type": "DOCUMENT_APPROVED",
            "actor_type": "ADMIN",
            "actor_id": "admin-1",
            "payload": {"document_name": "Statuts"},
        },
    )

    assert created.status_code == 201
    body = created.json()
    assert body["id"]
    assert body["payload"] == {"document_name": "Statuts"}

    fetched = client.get(f"/events/{body['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["event_type"] == "DOCUMENT_APPROVED"


def test_create_event_rejects_unknown_types(client) -> None:
    response = client.post(
        "/events/",
        json={
            "entity_type": "dossier",
            "entity_id": "dos-1",
            "event_type": "SOMETHING_ELSE",
            "actor_type": "SYSTEM",
        },
    )

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert "SOMETHING_ELSE" in detail["error"]
    assert "STEP_COMPLETED" in detail["valid_event_types"]


def test_read_unknown_event(client) -> None:
    response = client.get("/events/missing")

    assert response.status_code == 404
    assert response.json()["detail"]["error"] == "Event not found"
