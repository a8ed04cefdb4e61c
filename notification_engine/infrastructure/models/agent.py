"""SQLAlchemy model for agents."""

from sqlalchemy import Column, String

from notification_engine.infrastructure.database import Base
from notification_engine.utils import generate_id


class AgentModel(Base):
    """Advisor working on dossiers, linked to the user account they log in with."""

    __tablename__ = "agent"

    id = Column(String(64), primary_key=True, default=generate_id)
    user_id = Column(String(64), nullable=True, index=True)
    name = Column(String(120), nullable=True)


__all__ = ["AgentModel"]
