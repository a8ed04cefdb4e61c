"""Determine which users a matched rule should notify."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from notification_engine.domain.entities import ActorType, Event, Recipient, payload_text
from notification_engine.domain.errors import ResolutionError
from notification_engine.infrastructure.repositories import (
    AgentRepository,
    DossierRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)

_STAFF_ACTORS = frozenset({ActorType.ADMIN.value, ActorType.AGENT.value})
_DOCUMENT_ENTITIES = frozenset({"document", "document_version"})


class RecipientResolver:
    """Resolve the recipient of an event from its payload and entity.

    Sources are tried in order and the first one that yields a user wins:

    1. ``payload.user_id``;
    2. the owner of the dossier named by ``payload.dossier_id`` or, failing
       that, the dossier derived from the event entity;
    3. for events raised by an admin or an agent, the user of the agent named
       by ``payload.agent_id``.
    """

    def __init__(self, session: Session) -> None:
        self.users = UserRepository(session)
        self.dossiers = DossierRepository(session)
        self.agents = AgentRepository(session)

    def resolve(self, event: Event) -> list[Recipient]:
        user_id = (
            payload_text(event.payload, "user_id")
            or self._dossier_owner(event)
            or self._staff_agent(event)
        )
        if not user_id:
            raise ResolutionError(
                f"No recipient could be resolved for event {event.id}",
                event_id=event.id,
                event_type=event.event_type,
            )

        contacts = self.users.get_recipient_map([user_id])
        logger.debug("Resolved recipient %s for event %s", user_id, event.id)
        return [contacts.get(user_id) or Recipient(user_id=user_id)]

    def _dossier_owner(self, event: Event) -> str | None:
        dossier_id = self._dossier_id(event)
        return self.dossiers.get_owner_id(dossier_id) if dossier_id else None

    def _staff_agent(self, event: Event) -> str | None:
        if event.actor_type not in _STAFF_ACTORS:
            return None
        agent_id = payload_text(event.payload, "agent_id")
        return self.agents.get_user_id(agent_id) if agent_id else None

    def _dossier_id(self, event: Event) -> str | None:
        dossier_id = payload_text(event.payload, "dossier_id")
        if dossier_id:
            return dossier_id
        if event.entity_type == "dossier":
            return event.entity_id or None
        if event.entity_type in _DOCUMENT_ENTITIES:
            return self.dossiers.get_dossier_id_for_document(event.entity_id)
        if event.entity_type == "step_instance":
            return self.dossiers.get_dossier_id_for_step_instance(event.entity_id)
        return None


__all__ = ["RecipientResolver"]
