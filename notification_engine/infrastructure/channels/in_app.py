"""In-app channel: persist a notification row shown in the user's inbox."""

from __future__ import annotations

from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from notification_engine.domain.entities import (
    Event,
    Notification,
    NotificationChannel,
    NotificationRule,
    Recipient,
    RenderedContent,
)
from notification_engine.domain.errors import DispatchError
from notification_engine.infrastructure.repositories import NotificationRepository

from .base import ChannelDispatcher


class InAppDispatcher(ChannelDispatcher):
    """Create one :class:`Notification` per recipient."""

    channel = NotificationChannel.IN_APP.value

    def __init__(self, session: Session) -> None:
        self.session = session
        self.notifications = NotificationRepository(session)

    def deliver(
        self,
        recipient: Recipient,
        content: RenderedContent,
        *,
        event: Event,
        rule: NotificationRule,
    ) -> str | None:
        entity = Notification(
            id=None,
            user_id=recipient.user_id,
            type=rule.template_code,
            title=content.title,
            message=content.message,
            payload=dict(event.payload or {}),
            action_url=content.action_url,
            dossier_id=event.dossier_id,
            event_id=event.id,
        )
        try:
            notification = self.notifications.create(entity)
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise DispatchError(f"Could not store in-app notification: {exc}") from exc
        return notification.id

    def preview(self, content: RenderedContent) -> dict[str, Any]:
        return {
            "title": content.title,
            "message": content.message,
            "action_url": content.action_url,
        }


__all__ = ["InAppDispatcher"]
