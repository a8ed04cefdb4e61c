"""Select the notification rules an event should trigger."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone

from notification_engine.domain.conditions import matches_conditions
from notification_engine.domain.entities import Event, NotificationRule

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def match_rules(rules: Iterable[NotificationRule], event: Event) -> list[NotificationRule]:
    """Return the active rules bound to ``event`` whose conditions hold.

    Every matching rule fires. The result is ordered by priority (highest
    first) and, for equal priorities, by creation date (oldest first).
    """

    matched = [
        rule
        for rule in rules
        if rule.event_type == event.event_type
        and rule.is_active
        and matches_conditions(rule.conditions, event, rule_id=rule.id)
    ]
    matched.sort(key=lambda rule: (-rule.priority, rule.created_at or _EPOCH, rule.id or ""))
    return matched


__all__ = ["match_rules"]
