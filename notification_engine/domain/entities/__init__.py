"""Domain entities exposed by the application."""

from .enums import (
    ACTOR_TYPES,
    CHANNELS,
    EVENT_TYPES,
    ActorType,
    DeliveryStatus,
    EventType,
    NotificationChannel,
    TemplateCode,
)
from .event import Event, payload_text
from .notification import Notification
from .notification_rule import NotificationRule
from .recipient import Recipient, RenderedContent
from .rule_execution import ChannelDelivery, RuleExecution

__all__ = [
    "ACTOR_TYPES",
    "CHANNELS",
    "EVENT_TYPES",
    "ActorType",
    "ChannelDelivery",
    "DeliveryStatus",
    "Event",
    "EventType",
    "Notification",
    "NotificationChannel",
    "NotificationRule",
    "Recipient",
    "RenderedContent",
    "RuleExecution",
    "TemplateCode",
    "payload_text",
]
