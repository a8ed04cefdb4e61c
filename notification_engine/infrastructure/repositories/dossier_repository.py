"""Read access to dossiers and the records attached to them."""

from __future__ import annotations

from sqlalchemy.orm import Session

from notification_engine.infrastructure.models import (
    DocumentModel,
    DossierModel,
    StepInstanceModel,
)


class DossierRepository:
    """Resolve dossier ownership for recipient resolution."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_owner_id(self, dossier_id: str) -> str | None:
        model = self.session.get(DossierModel, dossier_id)
        return model.user_id if model else None

    def get_dossier_id_for_document(self, document_id: str) -> str | None:
        model = self.session.get(DocumentModel, document_id)
        return model.dossier_id if model else None

    def get_dossier_id_for_step_instance(self, step_instance_id: str) -> str | None:
        model = self.session.get(StepInstanceModel, step_instance_id)
        return model.dossier_id if model else None


__all__ = ["DossierRepository"]
