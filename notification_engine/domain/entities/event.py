"""Domain entity representing an immutable domain event."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class Event:
    """Fact recorded by a producer at the moment it happened."""

    id: str | None
    entity_type: str
    entity_id: str
    event_type: str
    actor_type: str
    actor_id: str | None = None
    payload: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None

    @property
    def dossier_id(self) -> str | None:
        """Return the dossier the event refers to, when it is known."""

        dossier_id = payload_text(self.payload, "dossier_id")
        if dossier_id:
            return dossier_id
        if self.entity_type == "dossier" and self.entity_id:
            return str(self.entity_id)
        return None


def payload_text(payload: dict[str, Any] | None, key: str) -> str | None:
    """Return ``payload[key]`` as a stripped string, or ``None`` when blank."""

    if not isinstance(payload, dict):
        return None
    value = payload.get(key)
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


__all__ = ["Event", "payload_text"]
