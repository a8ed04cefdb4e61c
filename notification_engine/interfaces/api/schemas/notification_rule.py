"""Schemas for notification rule endpoints."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class NotificationRuleCreate(BaseModel):
    """Payload required to create a rule."""

    event_type: str = Field(..., description="Event type the rule reacts to")
    template_code: str = Field(..., description="Template used to render the content")
    channels: list[str] = Field(..., description="Delivery channels (EMAIL, WHATSAPP, IN_APP, SMS)")
    description: str = Field(..., description="Human readable description of the rule")
    is_active: bool = True
    priority: int = Field(default=0, description="Higher priorities are reported first")
    conditions: dict[str, Any] | None = Field(
        default=None, description="Optional condition expression evaluated on the event"
    )


class NotificationRuleUpdate(BaseModel):
    event_type: str | None = None
    template_code: str | None = None
    channels: list[str] | None = None
    description: str | None = None
    is_active: bool | None = None
    priority: int | None = None
    conditions: dict[str, Any] | None = None

    model_config = ConfigDict(extra="forbid")


class NotificationRuleRead(BaseModel):
    id: str
    event_type: str
    template_code: str
    channels: list[str]
    description: str
    is_active: bool
    priority: int
    conditions: dict[str, Any] | None
    created_at: datetime | None
    updated_at: datetime | None

    model_config = ConfigDict(from_attributes=True)


class NotificationRuleList(BaseModel):
    rules: list[NotificationRuleRead]
    total: int


class SampleEvent(BaseModel):
    """Event used to dry-run a rule. Nothing is stored."""

    entity_type: str = "dossier"
    entity_id: str = "sample"
    event_type: str
    actor_type: str = "SYSTEM"
    actor_id: str | None = None
    payload: dict[str, Any] = Field(default_factory=dict)


class NotificationRuleDryRunRequest(BaseModel):
    event: SampleEvent | None = Field(default=None, description="Sample event to evaluate")
    event_id: str | None = Field(
        default=None, description="Identifier of a recorded event to evaluate instead"
    )


class NotificationRuleDryRunResponse(BaseModel):
    matched: bool
    reason: str | None = None
    conditions: dict[str, Any] | None = None
    notification_preview: dict[str, Any] | None = None
    rule: NotificationRuleRead
    event: dict[str, Any]
