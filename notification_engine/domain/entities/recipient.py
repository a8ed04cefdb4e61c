"""Value objects flowing through the dispatch pipeline."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Recipient:
    """User targeted by a notification along with their contact details."""

    user_id: str
    email: str | None = None
    phone: str | None = None
    full_name: str | None = None

    @property
    def display_name(self) -> str:
        if self.full_name:
            return self.full_name
        if self.email:
            return self.email.split("@")[0]
        return "Client"


@dataclass(frozen=True)
class RenderedContent:
    """Channel-agnostic content produced by the renderer."""

    title: str
    message: str
    action_url: str


__all__ = ["Recipient", "RenderedContent"]
