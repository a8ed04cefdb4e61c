"""Run one matched rule for one event: resolve, render and dispatch."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from notification_engine.application.services import ContentRenderer, RecipientResolver
from notification_engine.config import Settings
from notification_engine.domain.entities import (
    ChannelDelivery,
    DeliveryStatus,
    Event,
    NotificationRule,
    Recipient,
    RenderedContent,
)
from notification_engine.domain.errors import ResolutionError
from notification_engine.infrastructure.channels import ChannelDispatcher
from notification_engine.utils import now_in_app_timezone

logger = logging.getLogger(__name__)


@dataclass
class RuleOutcome:
    """Result of running a rule, ready to be written to the ledger."""

    deliveries: list[ChannelDelivery] = field(default_factory=list)
    error_message: str | None = None

    @property
    def success(self) -> bool:
        return self.error_message is None


def summarize_deliveries(deliveries: Iterable[ChannelDelivery]) -> str | None:
    """Return ``"CHANNEL: message"`` entries for every failed delivery, or ``None``."""

    failures = [
        f"{delivery.channel}: {delivery.error_message or 'unknown error'}"
        for delivery in deliveries
        if delivery.failed
    ]
    return "; ".join(failures) if failures else None


def send_on_channel(
    dispatchers: Mapping[str, ChannelDispatcher],
    channel: str,
    recipient: Recipient,
    content: RenderedContent,
    *,
    event: Event,
    rule: NotificationRule,
) -> ChannelDelivery:
    dispatcher = dispatchers.get(channel)
    if dispatcher is None:
        logger.warning("Rule %s targets unknown channel %s", rule.id, channel)
        return ChannelDelivery(
            channel=channel,
            status=DeliveryStatus.FAILED.value,
            recipient_user_id=recipient.user_id,
            error_message=f"Unknown channel: {channel}",
            attempted_at=now_in_app_timezone(),
        )
    return dispatcher.send(recipient, content, event=event, rule=rule)


def dispatch_rule(
    session: Session,
    settings: Settings,
    rule: NotificationRule,
    event: Event,
    dispatchers: Mapping[str, ChannelDispatcher],
) -> RuleOutcome:
    """Deliver ``rule`` for ``event`` on every channel to every recipient.

    A resolution failure stops the rule before any dispatch.
    """

    try:
        recipients = RecipientResolver(session).resolve(event)
    except ResolutionError as exc:
        logger.warning("Rule %s for event %s: %s", rule.id, event.id, exc.message)
        return RuleOutcome(error_message=exc.message)

    content = ContentRenderer(settings.app_base_url).render(rule.template_code, event)
    deliveries = [
        send_on_channel(dispatchers, channel, recipient, content, event=event, rule=rule)
        for recipient in recipients
        for channel in rule.channels
    ]
    return RuleOutcome(deliveries=deliveries, error_message=summarize_deliveries(deliveries))


__all__ = ["RuleOutcome", "dispatch_rule", "send_on_channel", "summarize_deliveries"]
