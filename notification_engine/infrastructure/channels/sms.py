"""Placeholder for the SMS channel, which has no provider yet."""

from __future__ import annotations

from typing import Any

from notification_engine.domain.entities import (
    Event,
    NotificationChannel,
    NotificationRule,
    Recipient,
    RenderedContent,
)
from notification_engine.domain.errors import ChannelNotSupported

from .base import ChannelDispatcher

NOT_SUPPORTED_MESSAGE = "SMS channel is not supported yet"


class SmsDispatcher(ChannelDispatcher):
    """Report every SMS delivery as ``NOT_SUPPORTED`` without failing the rule."""

    channel = NotificationChannel.SMS.value

    def deliver(
        self,
        recipient: Recipient,
        content: RenderedContent,
        *,
        event: Event,
        rule: NotificationRule,
    ) -> str | None:
        raise ChannelNotSupported(NOT_SUPPORTED_MESSAGE, rule_id=rule.id)

    def preview(self, content: RenderedContent) -> dict[str, Any]:
        return {"message": f"{content.title}: {content.message}", "note": NOT_SUPPORTED_MESSAGE}


__all__ = ["NOT_SUPPORTED_MESSAGE", "SmsDispatcher"]
