"""Domain entity representing an in-app notification."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class Notification:
    """Information message shown to a specific user inside the application."""

    id: str | None
    user_id: str
    type: str
    title: str
    message: str
    payload: dict[str, Any] = field(default_factory=dict)
    action_url: str | None = None
    dossier_id: str | None = None
    event_id: str | None = None
    created_at: datetime | None = None
    read_at: datetime | None = None


__all__ = ["Notification"]
