"""Schemas for the monitoring statistics endpoint."""

from pydantic import BaseModel, ConfigDict, Field

from .rule_execution import RuleExecutionRead


class ExecutionRuleRead(BaseModel):
    id: str
    event_type: str
    template_code: str
    description: str

    model_config = ConfigDict(from_attributes=True)


class ExecutionEventRead(BaseModel):
    id: str
    event_type: str
    entity_type: str
    entity_id: str

    model_config = ConfigDict(from_attributes=True)


class ExecutionSummaryRead(BaseModel):
    execution: RuleExecutionRead
    rule: ExecutionRuleRead | None
    event: ExecutionEventRead | None

    model_config = ConfigDict(from_attributes=True)


class NotificationStatsRead(BaseModel):
    total_active_rules: int = Field(..., description="Active rules")
    events_last_24h: int = Field(..., description="Events recorded in the last 24 hours")
    rule_executions_last_24h: int = Field(
        ..., description="Rule executions started in the last 24 hours"
    )
    notifications_created_last_24h: int = Field(
        ..., description="In-app notifications created in the last 24 hours"
    )
    success_rate_last_24h: int = Field(
        ..., description="Rounded percentage of successful executions, 100 when there are none"
    )
    recent_executions: list[ExecutionSummaryRead]
    failed_executions: list[ExecutionSummaryRead]

    model_config = ConfigDict(from_attributes=True)
