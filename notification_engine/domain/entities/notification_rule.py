"""Domain entity representing a notification rule."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class NotificationRule:
    """Bind an event type and optional conditions to a template and channels."""

    id: str | None
    event_type: str
    template_code: str
    channels: list[str]
    description: str
    is_active: bool = True
    priority: int = 0
    conditions: dict[str, Any] | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def targets(self, channel: str) -> bool:
        return channel in self.channels


__all__ = ["NotificationRule"]
