"""Schemas describing ledger entries."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class ChannelDeliveryRead(BaseModel):
    id: str | None
    channel: str
    status: str
    recipient_user_id: str | None
    error_message: str | None
    provider_message_id: str | None
    attempted_at: datetime | None

    model_config = ConfigDict(from_attributes=True)


class RuleExecutionRead(BaseModel):
    id: str
    rule_id: str
    event_id: str
    success: bool
    error_message: str | None
    retry_count: int
    executed_at: datetime | None
    completed_at: datetime | None
    deliveries: list[ChannelDeliveryRead]

    model_config = ConfigDict(from_attributes=True)
