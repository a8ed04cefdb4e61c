"""Read access to agents."""

from __future__ import annotations

from sqlalchemy.orm import Session

from notification_engine.infrastructure.models import AgentModel


class AgentRepository:
    """Map agents to the user accounts that should receive their notifications."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_user_id(self, agent_id: str) -> str | None:
        model = self.session.get(AgentModel, agent_id)
        return model.user_id if model else None


__all__ = ["AgentRepository"]
