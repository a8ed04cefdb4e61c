"""Delivery channels and the registry used by the orchestrator."""

from __future__ import annotations

from sqlalchemy.orm import Session

from notification_engine.config import Settings
from notification_engine.domain.entities import NotificationChannel

from .base import ChannelDispatcher
from .email import EmailDispatcher
from .in_app import InAppDispatcher
from .sms import SmsDispatcher
from .whatsapp import WhatsAppDispatcher, format_to_e164


def build_dispatchers(session: Session, settings: Settings) -> dict[str, ChannelDispatcher]:
    """Return one dispatcher per supported channel."""

    return {
        NotificationChannel.EMAIL.value: EmailDispatcher(settings),
        NotificationChannel.WHATSAPP.value: WhatsAppDispatcher(settings),
        NotificationChannel.IN_APP.value: InAppDispatcher(session),
        NotificationChannel.SMS.value: SmsDispatcher(),
    }


__all__ = [
    "ChannelDispatcher",
    "EmailDispatcher",
    "InAppDispatcher",
    "SmsDispatcher",
    "WhatsAppDispatcher",
    "build_dispatchers",
    "format_to_e164",
]
