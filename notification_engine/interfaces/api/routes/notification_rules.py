"""Routes to administer notification rules."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from notification_engine.application.use_cases.events import get_event
from notification_engine.application.use_cases.notification_rules import (
    create_rule as create_rule_uc,
    delete_rule as delete_rule_uc,
    dry_run_rule as dry_run_rule_uc,
    get_rule as get_rule_uc,
    list_rules as list_rules_uc,
    toggle_rule as toggle_rule_uc,
    update_rule as update_rule_uc,
)
from notification_engine.application.use_cases.notification_stats import (
    get_notification_stats,
)
from notification_engine.config import Settings
from notification_engine.domain.entities import Event, NotificationRule
from notification_engine.domain.errors import NotFoundError, ValidationError
from notification_engine.infrastructure.database import get_db
from notification_engine.interfaces.api.dependencies import get_app_settings, http_error
from notification_engine.interfaces.api.schemas import (
    NotificationRuleCreate,
    NotificationRuleDryRunRequest,
    NotificationRuleDryRunResponse,
    NotificationRuleList,
    NotificationRuleRead,
    NotificationRuleUpdate,
    NotificationStatsRead,
)

router = APIRouter(prefix="/notification-rules", tags=["notification-rules"])


def _to_read_model(rule: NotificationRule) -> NotificationRuleRead:
    return NotificationRuleRead.model_validate(rule)


@router.get("/", response_model=NotificationRuleList)
def list_notification_rules(
    event_type: str | None = Query(default=None),
    is_active: bool | None = Query(default=None),
    channel: str | None = Query(default=None),
    db: Session = Depends(get_db),
) -> NotificationRuleList:
    """Return the rules matching the filters, highest priority first."""

    rules = list_rules_uc(db, event_type=event_type, is_active=is_active, channel=channel)
    return NotificationRuleList(rules=[_to_read_model(rule) for rule in rules], total=len(rules))


@router.post("/", response_model=NotificationRuleRead, status_code=status.HTTP_201_CREATED)
def create_notification_rule(
    rule_in: NotificationRuleCreate,
    db: Session = Depends(get_db),
) -> NotificationRuleRead:
    try:
        rule = create_rule_uc(db, **rule_in.model_dump())
    except ValidationError as exc:
        raise http_error(exc, status.HTTP_400_BAD_REQUEST) from exc
    return _to_read_model(rule)


@router.get("/stats", response_model=NotificationStatsRead)
def read_notification_stats(db: Session = Depends(get_db)) -> NotificationStatsRead:
    """Monitoring counters for the last 24 hours and the latest executions."""

    return NotificationStatsRead.model_validate(get_notification_stats(db))


@router.get("/{rule_id}", response_model=NotificationRuleRead)
def read_notification_rule(rule_id: str, db: Session = Depends(get_db)) -> NotificationRuleRead:
    try:
        rule = get_rule_uc(db, rule_id)
    except NotFoundError as exc:
        raise http_error(exc, status.HTTP_404_NOT_FOUND) from exc
    return _to_read_model(rule)


@router.patch("/{rule_id}", response_model=NotificationRuleRead)
def update_notification_rule(
    rule_id: str,
    rule_in: NotificationRuleUpdate,
    db: Session = Depends(get_db),
) -> NotificationRuleRead:
    """Update the provided fields of a rule."""

    try:
        rule = update_rule_uc(db, rule_id=rule_id, changes=rule_in.model_dump(exclude_unset=True))
    except NotFoundError as exc:
        raise http_error(exc, status.HTTP_404_NOT_FOUND) from exc
    except ValidationError as exc:
        raise http_error(exc, status.HTTP_400_BAD_REQUEST) from exc
    return _to_read_model(rule)


@router.delete("/{rule_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification_rule(rule_id: str, db: Session = Depends(get_db)) -> Response:
    """Delete a rule together with its execution history."""

    try:
        delete_rule_uc(db, rule_id)
    except NotFoundError as exc:
        raise http_error(exc, status.HTTP_404_NOT_FOUND) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{rule_id}/toggle", response_model=NotificationRuleRead)
def toggle_notification_rule(rule_id: str, db: Session = Depends(get_db)) -> NotificationRuleRead:
    try:
        rule = toggle_rule_uc(db, rule_id)
    except NotFoundError as exc:
        raise http_error(exc, status.HTTP_404_NOT_FOUND) from exc
    return _to_read_model(rule)


@router.post("/{rule_id}/test", response_model=NotificationRuleDryRunResponse)
def dry_run_notification_rule(
    rule_id: str,
    request_in: NotificationRuleDryRunRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> NotificationRuleDryRunResponse:
    """Evaluate a rule against a sample event without storing or sending anything."""

    try:
        if request_in.event is not None:
            event = Event(id=None, **request_in.event.model_dump())
        elif request_in.event_id:
            event = get_event(db, request_in.event_id)
        else:
            raise ValidationError("Missing event in request body")
        result = dry_run_rule_uc(db, settings, rule_id=rule_id, event=event)
    except NotFoundError as exc:
        raise http_error(exc, status.HTTP_404_NOT_FOUND) from exc
    except ValidationError as exc:
        raise http_error(exc, status.HTTP_400_BAD_REQUEST) from exc

    return NotificationRuleDryRunResponse(
        matched=result.matched,
        reason=result.reason,
        conditions=result.conditions,
        notification_preview=result.preview,
        rule=_to_read_model(result.rule),
        event=asdict(result.event),
    )
