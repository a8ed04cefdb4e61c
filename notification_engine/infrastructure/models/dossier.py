"""SQLAlchemy models for dossiers and the records attached to them."""

from sqlalchemy import Column, ForeignKey, String

from notification_engine.infrastructure.database import Base
from notification_engine.utils import generate_id


class DossierModel(Base):
    """Business-formation case owned by a client user."""

    __tablename__ = "dossier"

    id = Column(String(64), primary_key=True, default=generate_id)
    user_id = Column(String(64), nullable=True, index=True)


class DocumentModel(Base):
    __tablename__ = "document"

    id = Column(String(64), primary_key=True, default=generate_id)
    dossier_id = Column(String(64), ForeignKey("dossier.id"), nullable=True, index=True)


class StepInstanceModel(Base):
    __tablename__ = "step_instance"

    id = Column(String(64), primary_key=True, default=generate_id)
    dossier_id = Column(String(64), ForeignKey("dossier.id"), nullable=True, index=True)


__all__ = ["DocumentModel", "DossierModel", "StepInstanceModel"]
