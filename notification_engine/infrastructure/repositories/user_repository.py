"""Read access to the contact details of application users."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy.orm import Session

from notification_engine.domain.entities import Recipient
from notification_engine.infrastructure.models import UserModel


class UserRepository:
    """Look up users the engine may notify."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_recipient_map(self, user_ids: Iterable[str]) -> dict[str, Recipient]:
        ids = {user_id for user_id in user_ids if user_id}
        if not ids:
            return {}
        models = self.session.query(UserModel).filter(UserModel.id.in_(ids)).all()
        return {model.id: self._to_recipient(model) for model in models}

    @staticmethod
    def _to_recipient(model: UserModel) -> Recipient:
        return Recipient(
            user_id=model.id,
            email=(model.email or "").strip() or None,
            phone=(model.phone or "").strip() or None,
            full_name=(model.full_name or "").strip() or None,
        )


__all__ = ["UserRepository"]
