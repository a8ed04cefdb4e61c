"""Common behaviour of every notification channel."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar

from notification_engine.domain.entities import (
    ChannelDelivery,
    DeliveryStatus,
    Event,
    NotificationRule,
    Recipient,
    RenderedContent,
)
from notification_engine.domain.errors import (
    ChannelNotSupported,
    DispatchError,
    RecipientUnreachable,
)
from notification_engine.utils import now_in_app_timezone

logger = logging.getLogger(__name__)


class ChannelDispatcher(ABC):
    """Deliver rendered content on one channel.

    :meth:`send` never raises: provider and configuration failures become a
    ``FAILED`` delivery and a recipient without an address for the channel
    becomes ``SKIPPED``. A channel without a provider raises
    :class:`ChannelNotSupported` and becomes ``NOT_SUPPORTED``. Subclasses
    implement :meth:`deliver`, which returns the provider message identifier.
    """

    channel: ClassVar[str]

    def send(
        self,
        recipient: Recipient,
        content: RenderedContent,
        *,
        event: Event,
        rule: NotificationRule,
    ) -> ChannelDelivery:
        try:
            provider_message_id = self.deliver(recipient, content, event=event, rule=rule)
        except RecipientUnreachable as exc:
            logger.info(
                "Skipping %s delivery to user %s: %s", self.channel, recipient.user_id, exc.message
            )
            return self._delivery(recipient, DeliveryStatus.SKIPPED, error_message=exc.message)
        except ChannelNotSupported as exc:
            logger.info(
                "%s delivery to user %s not sent: %s", self.channel, recipient.user_id, exc.message
            )
            return self._delivery(
                recipient, DeliveryStatus.NOT_SUPPORTED, error_message=exc.message
            )
        except DispatchError as exc:
            logger.error(
                "%s delivery to user %s failed: %s", self.channel, recipient.user_id, exc.message
            )
            return self._delivery(recipient, DeliveryStatus.FAILED, error_message=exc.message)
        except Exception as exc:
            logger.exception(
                "Unexpected error delivering %s notification to user %s",
                self.channel,
                recipient.user_id,
            )
            return self._delivery(
                recipient, DeliveryStatus.FAILED, error_message=str(exc) or type(exc).__name__
            )
        return self._delivery(
            recipient, DeliveryStatus.SENT, provider_message_id=provider_message_id
        )

    @abstractmethod
    def deliver(
        self,
        recipient: Recipient,
        content: RenderedContent,
        *,
        event: Event,
        rule: NotificationRule,
    ) -> str | None:
        """Hand the content to the provider and return its message id."""

    @abstractmethod
    def preview(self, content: RenderedContent) -> dict[str, Any]:
        """Describe what :meth:`send` would deliver, without side effects."""

    def _delivery(
        self,
        recipient: Recipient,
        status: DeliveryStatus,
        *,
        error_message: str | None = None,
        provider_message_id: str | None = None,
    ) -> ChannelDelivery:
        return ChannelDelivery(
            channel=self.channel,
            status=status.value,
            recipient_user_id=recipient.user_id,
            error_message=error_message,
            provider_message_id=provider_message_id,
            attempted_at=now_in_app_timezone(),
        )


__all__ = ["ChannelDispatcher"]
