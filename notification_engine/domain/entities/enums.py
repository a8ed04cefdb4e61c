"""Enumerations shared by the orchestration entities."""

from enum import Enum


class EventType(str, Enum):
    """Domain facts emitted by the surrounding application."""

    DOSSIER_CREATED = "DOSSIER_CREATED"
    DOSSIER_STATUS_CHANGED = "DOSSIER_STATUS_CHANGED"
    DOSSIER_RESET = "DOSSIER_RESET"
    DOSSIER_AGENT_ASSIGNED = "DOSSIER_AGENT_ASSIGNED"
    DOSSIER_AGENT_REASSIGNED = "DOSSIER_AGENT_REASSIGNED"
    DOSSIER_AGENT_UNASSIGNED = "DOSSIER_AGENT_UNASSIGNED"
    STEP_STARTED = "STEP_STARTED"
    STEP_COMPLETED = "STEP_COMPLETED"
    DOCUMENT_UPLOADED = "DOCUMENT_UPLOADED"
    DOCUMENT_REVIEWED = "DOCUMENT_REVIEWED"
    DOCUMENT_APPROVED = "DOCUMENT_APPROVED"
    DOCUMENT_REJECTED = "DOCUMENT_REJECTED"
    DOCUMENT_DELIVERED = "DOCUMENT_DELIVERED"
    DOCUMENT_VERSION_CLEARED = "DOCUMENT_VERSION_CLEARED"
    PAYMENT_RECEIVED = "PAYMENT_RECEIVED"
    PAYMENT_CONFIRMATION = "PAYMENT_CONFIRMATION"
    PAYMENT_FAILED = "PAYMENT_FAILED"
    PAYMENT_REMINDER = "PAYMENT_REMINDER"
    ADMIN_DOCUMENT_DELIVERED = "ADMIN_DOCUMENT_DELIVERED"
    ADMIN_STEP_COMPLETED = "ADMIN_STEP_COMPLETED"
    MESSAGE_SENT = "MESSAGE_SENT"
    MANUAL_CLIENT_CREATED = "MANUAL_CLIENT_CREATED"
    CLIENT_STATUS_CHANGED = "CLIENT_STATUS_CHANGED"
    WELCOME = "WELCOME"


class ActorType(str, Enum):
    SYSTEM = "SYSTEM"
    ADMIN = "ADMIN"
    AGENT = "AGENT"
    CLIENT = "CLIENT"


class NotificationChannel(str, Enum):
    """Delivery mechanisms a rule can target."""

    EMAIL = "EMAIL"
    WHATSAPP = "WHATSAPP"
    IN_APP = "IN_APP"
    SMS = "SMS"


class TemplateCode(str, Enum):
    """Template codes with a dedicated rendering branch."""

    STEP_COMPLETED = "STEP_COMPLETED"
    DOCUMENT_APPROVED = "DOCUMENT_APPROVED"
    DOCUMENT_REJECTED = "DOCUMENT_REJECTED"
    DOCUMENT_UPLOADED = "DOCUMENT_UPLOADED"
    ADMIN_DOCUMENT_DELIVERED = "ADMIN_DOCUMENT_DELIVERED"
    ADMIN_STEP_COMPLETED = "ADMIN_STEP_COMPLETED"
    PAYMENT_CONFIRMATION = "PAYMENT_CONFIRMATION"
    PAYMENT_FAILED = "PAYMENT_FAILED"
    PAYMENT_REMINDER = "PAYMENT_REMINDER"
    SET_PASSWORD = "SET_PASSWORD"
    WELCOME = "WELCOME"


class DeliveryStatus(str, Enum):
    """Outcome of one channel delivery attempt."""

    SENT = "SENT"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"
    NOT_SUPPORTED = "NOT_SUPPORTED"


EVENT_TYPES: frozenset[str] = frozenset(item.value for item in EventType)
ACTOR_TYPES: frozenset[str] = frozenset(item.value for item in ActorType)
CHANNELS: tuple[str, ...] = tuple(item.value for item in NotificationChannel)


__all__ = [
    "ACTOR_TYPES",
    "CHANNELS",
    "EVENT_TYPES",
    "ActorType",
    "DeliveryStatus",
    "EventType",
    "NotificationChannel",
    "TemplateCode",
]
