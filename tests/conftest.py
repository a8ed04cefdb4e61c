"""Shared fixtures for the notification engine test-suite."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from datetime import datetime
from typing import Any

import pytest

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CRON_SECRET"] = "test-cron-secret"
os.environ["APP_TIMEZONE"] = "Europe/Paris"
for _name in ("SENDGRID_API_KEY", "SENDGRID_SENDER", "WHATSAPP_API_TOKEN", "IDEMPOTENCY_SCOPE"):
    os.environ.pop(_name, None)

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402

from notification_engine.config import Settings  # noqa: E402
from notification_engine.domain.entities import (  # noqa: E402
    Event,
    NotificationChannel,
    NotificationRule,
    Recipient,
    RenderedContent,
)
from notification_engine.domain.errors import DispatchError  # noqa: E402
from notification_engine.infrastructure.channels import ChannelDispatcher  # noqa: E402
from notification_engine.infrastructure import database  # noqa: E402
from notification_engine.infrastructure.database import (  # noqa: E402
    Base,
    build_engine,
    initialize_database,
)
from notification_engine.infrastructure.models import (  # noqa: E402
    AgentModel,
    DocumentModel,
    DossierModel,
    StepInstanceModel,
    UserModel,
)
from notification_engine.infrastructure.repositories import EventRepository  # noqa: E402


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        database_url="sqlite://",
        cron_secret="test-cron-secret",
        app_base_url="https://app.example.com",
        whatsapp_api_url="https://whatsapp.example.com",
        whatsapp_api_token="wa-token",
        whatsapp_max_retries=2,
        whatsapp_retry_backoff_seconds=0,
    )


@pytest.fixture()
def session() -> Iterator[Session]:
    """Session bound to a private in-memory database."""

    engine = build_engine("sqlite://")
    initialize_database(engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = factory()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def add_user(session: Session) -> Callable[..., str]:
    def _add_user(
        user_id: str,
        *,
        email: str | None = None,
        phone: str | None = None,
        full_name: str | None = None,
    ) -> str:
        session.add(UserModel(id=user_id, email=email, phone=phone, full_name=full_name))
        session.commit()
        return user_id

    return _add_user


@pytest.fixture()
def add_dossier(session: Session) -> Callable[..., str]:
    def _add_dossier(
        dossier_id: str,
        *,
        owner_id: str | None = None,
        documents: tuple[str, ...] = (),
        steps: tuple[str, ...] = (),
    ) -> str:
        session.add(DossierModel(id=dossier_id, user_id=owner_id))
        session.flush()
        for document_id in documents:
            session.add(DocumentModel(id=document_id, dossier_id=dossier_id))
        for step_id in steps:
            session.add(StepInstanceModel(id=step_id, dossier_id=dossier_id))
        session.commit()
        return dossier_id

    return _add_dossier


@pytest.fixture()
def add_agent(session: Session) -> Callable[..., str]:
    def _add_agent(agent_id: str, *, user_id: str | None = None) -> str:
        session.add(AgentModel(id=agent_id, user_id=user_id, name=f"Agent {agent_id}"))
        session.commit()
        return agent_id

    return _add_agent


@pytest.fixture()
def add_event(session: Session) -> Callable[..., Event]:
    def _add_event(
        event_type: str,
        *,
        payload: dict[str, Any] | None = None,
        entity_type: str = "dossier",
        entity_id: str = "unknown-dossier",
        actor_type: str = "SYSTEM",
        actor_id: str | None = None,
        created_at: datetime | None = None,
    ) -> Event:
        return EventRepository(session).append(
            Event(
                id=None,
                entity_type=entity_type,
                entity_id=entity_id,
                event_type=event_type,
                actor_type=actor_type,
                actor_id=actor_id,
                payload=payload or {},
                created_at=created_at,
            )
        )

    return _add_event


class RecordingDispatcher(ChannelDispatcher):
    """Dispatcher double that records calls and can be told to fail."""

    def __init__(self, channel: str, *, error: str | None = None) -> None:
        self.channel = channel
        self.error = error
        self.sent: list[tuple[Recipient, RenderedContent, Event, NotificationRule]] = []

    def deliver(self, recipient, content, *, event, rule) -> str | None:
        if self.error is not None:
            raise DispatchError(self.error)
        self.sent.append((recipient, content, event, rule))
        return f"{self.channel.lower()}-{len(self.sent)}"

    def preview(self, content: RenderedContent) -> dict[str, Any]:
        return {"title": content.title}


@pytest.fixture()
def recording_dispatchers() -> dict[str, RecordingDispatcher]:
    return {channel.value: RecordingDispatcher(channel.value) for channel in NotificationChannel}


@pytest.fixture()
def client() -> Iterator[TestClient]:
    """API client backed by the application's own in-memory database."""

    from main import create_app

    Base.metadata.drop_all(bind=database.engine)
    app = create_app()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    Base.metadata.drop_all(bind=database.engine)

