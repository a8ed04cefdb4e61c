"""Domain entities for the execution ledger."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .enums import DeliveryStatus


@dataclass
class ChannelDelivery:
    """Outcome of delivering one rendered notification on one channel."""

    channel: str
    status: str
    recipient_user_id: str | None = None
    error_message: str | None = None
    provider_message_id: str | None = None
    attempted_at: datetime | None = None
    id: str | None = None
    execution_id: str | None = None

    @property
    def failed(self) -> bool:
        return self.status == DeliveryStatus.FAILED.value


@dataclass
class RuleExecution:
    """Processing attempt of a single (event, rule) pair."""

    id: str | None
    rule_id: str
    event_id: str
    success: bool
    error_message: str | None = None
    retry_count: int = 0
    executed_at: datetime | None = None
    completed_at: datetime | None = None
    deliveries: list[ChannelDelivery] = field(default_factory=list)

    @property
    def is_pending(self) -> bool:
        """Return ``True`` while the slot is claimed but dispatch is unfinished."""

        return self.completed_at is None

    def is_abandoned(self, stale_before: datetime) -> bool:
        """Return ``True`` for a claim whose run never recorded an outcome."""

        return (
            self.is_pending
            and self.executed_at is not None
            and self.executed_at < stale_before
        )

    def failed_deliveries(self) -> list[ChannelDelivery]:
        return [delivery for delivery in self.deliveries if delivery.failed]


__all__ = ["ChannelDelivery", "RuleExecution"]
