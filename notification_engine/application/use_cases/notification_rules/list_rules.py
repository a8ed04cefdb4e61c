"""Use case for listing notification rules."""

from collections.abc import Sequence

from sqlalchemy.orm import Session

from notification_engine.domain.entities import NotificationRule
from notification_engine.infrastructure.repositories import NotificationRuleRepository


def list_rules(
    session: Session,
    *,
    event_type: str | None = None,
    is_active: bool | None = None,
    channel: str | None = None,
) -> Sequence[NotificationRule]:
    """Return rules matching the filters, highest priority first."""

    return NotificationRuleRepository(session).list(
        event_type=event_type,
        is_active=is_active,
        channel=channel.strip().upper() if channel else None,
    )
