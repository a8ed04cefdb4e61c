"""Validation helpers shared by the notification rule use cases."""

from collections.abc import Sequence
from typing import Any

from notification_engine.domain.conditions import parse_conditions
from notification_engine.domain.entities import CHANNELS, EVENT_TYPES
from notification_engine.domain.errors import ValidationError


def normalize_channels(channels: Any) -> list[str]:
    """Return ``channels`` without duplicates, rejecting empty or unknown values."""

    if isinstance(channels, (str, bytes)) or not isinstance(channels, Sequence):
        raise ValidationError("channels must be a list", valid_channels=list(CHANNELS))
    normalized: list[str] = []
    for channel in channels:
        value = str(channel).strip().upper()
        if value not in normalized:
            normalized.append(value)
    if not normalized:
        raise ValidationError(
            "At least one channel is required", valid_channels=list(CHANNELS)
        )
    invalid = [channel for channel in normalized if channel not in CHANNELS]
    if invalid:
        raise ValidationError(
            f"Invalid channels: {', '.join(invalid)}", valid_channels=list(CHANNELS)
        )
    return normalized


def validate_priority(priority: Any) -> int:
    if isinstance(priority, bool) or not isinstance(priority, int):
        raise ValidationError("priority must be an integer")
    if priority < 0:
        raise ValidationError("priority must be greater than or equal to 0")
    return priority


def validate_event_type(event_type: Any) -> str:
    value = str(event_type or "").strip()
    if not value:
        raise ValidationError("event_type is required")
    if value not in EVENT_TYPES:
        raise ValidationError(
            f"Invalid event_type: {value}", valid_event_types=sorted(EVENT_TYPES)
        )
    return value


def require_text(value: Any, field_name: str) -> str:
    text = str(value).strip() if value is not None else ""
    if not text:
        raise ValidationError(f"{field_name} is required")
    return text


def validate_conditions(conditions: Any) -> dict[str, Any] | None:
    """Reject malformed condition expressions. Empty expressions are stored as ``None``."""

    if conditions is None:
        return None
    if not isinstance(conditions, dict):
        raise ValidationError("conditions must be an object")
    if parse_conditions(conditions) is None:
        return None
    return conditions


__all__ = [
    "normalize_channels",
    "require_text",
    "validate_conditions",
    "validate_event_type",
    "validate_priority",
]
