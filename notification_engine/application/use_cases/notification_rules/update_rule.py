"""Use case for partially updating notification rules."""

from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from sqlalchemy.orm import Session

from notification_engine.domain.entities import NotificationRule
from notification_engine.domain.errors import NotFoundError, ValidationError
from notification_engine.infrastructure.repositories import NotificationRuleRepository
from notification_engine.utils import now_in_app_timezone

from .validators import (
    normalize_channels,
    require_text,
    validate_conditions,
    validate_event_type,
    validate_priority,
)

_UPDATABLE_FIELDS = frozenset(
    {"event_type", "template_code", "channels", "description", "is_active", "priority", "conditions"}
)


def update_rule(
    session: Session,
    *,
    rule_id: str,
    changes: Mapping[str, Any],
) -> NotificationRule:
    """Apply ``changes`` to a rule. Only the provided fields are modified."""

    repository = NotificationRuleRepository(session)
    current = repository.get(rule_id)
    if current is None:
        raise NotFoundError("Notification rule not found", rule_id=rule_id)

    unknown = set(changes) - _UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")

    values: dict[str, Any] = {}
    if "event_type" in changes:
        values["event_type"] = validate_event_type(changes["event_type"])
    if "template_code" in changes:
        values["template_code"] = require_text(changes["template_code"], "template_code")
    if "channels" in changes:
        values["channels"] = normalize_channels(changes["channels"])
    if "description" in changes:
        values["description"] = require_text(changes["description"], "description")
    if "is_active" in changes:
        if changes["is_active"] is None:
            raise ValidationError("is_active cannot be null")
        values["is_active"] = bool(changes["is_active"])
    if "priority" in changes:
        values["priority"] = validate_priority(changes["priority"])
    if "conditions" in changes:
        values["conditions"] = validate_conditions(changes["conditions"])

    updated = replace(current, **values, updated_at=now_in_app_timezone())
    return repository.update(updated)
