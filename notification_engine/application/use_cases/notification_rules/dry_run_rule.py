"""Dry run of a notification rule against a sample event."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.orm import Session

from notification_engine.application.services import ContentRenderer
from notification_engine.config import Settings
from notification_engine.domain.conditions import matches_conditions
from notification_engine.domain.entities import Event, NotificationRule
from notification_engine.infrastructure.channels import build_dispatchers

from .get_rule import get_rule


@dataclass
class RuleDryRunResult:
    matched: bool
    reason: str | None
    rule: NotificationRule
    event: Event
    preview: dict[str, Any] | None = None
    conditions: dict[str, Any] | None = field(default=None)


def dry_run_rule(
    session: Session,
    settings: Settings,
    *,
    rule_id: str,
    event: Event,
) -> RuleDryRunResult:
    """Report whether ``rule_id`` would fire for ``event`` and preview its content.

    Nothing is persisted and no provider is called.
    """

    rule = get_rule(session, rule_id)

    if rule.event_type != event.event_type:
        return RuleDryRunResult(
            matched=False,
            reason=(
                f"Event type mismatch: rule expects {rule.event_type}, got {event.event_type}"
            ),
            rule=rule,
            event=event,
        )
    if not rule.is_active:
        return RuleDryRunResult(matched=False, reason="Rule is not active", rule=rule, event=event)
    if not matches_conditions(rule.conditions, event, rule_id=rule.id):
        return RuleDryRunResult(
            matched=False,
            reason="Rule conditions not met",
            rule=rule,
            event=event,
            conditions=rule.conditions,
        )

    content = ContentRenderer(settings.app_base_url).render(rule.template_code, event)
    dispatchers = build_dispatchers(session, settings)
    channel_previews = {
        channel.lower(): dispatchers[channel].preview(content)
        for channel in rule.channels
        if channel in dispatchers
    }
    return RuleDryRunResult(
        matched=True,
        reason=None,
        rule=rule,
        event=event,
        preview={
            "template_code": rule.template_code,
            "title": content.title,
            "message": content.message,
            "action_url": content.action_url,
            "channels": list(rule.channels),
            "channel_previews": channel_previews,
        },
    )
