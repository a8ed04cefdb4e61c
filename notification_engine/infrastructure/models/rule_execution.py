"""SQLAlchemy models for the execution ledger."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from notification_engine.infrastructure.database import Base
from notification_engine.utils import generate_id, now_in_app_naive_datetime


class RuleExecutionModel(Base):
    """One processing attempt of an (event, rule) pair."""

    __tablename__ = "rule_execution"
    __table_args__ = (
        UniqueConstraint("event_id", "rule_id", name="uq_rule_execution_event_rule"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    rule_id = Column(
        String(36),
        ForeignKey("notification_rule.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    event_id = Column(
        String(36), ForeignKey("event.id"), nullable=False, index=True
    )
    success = Column(Boolean, nullable=False, default=False)
    error_message = Column(Text, nullable=True)
    retry_count = Column(Integer, nullable=False, default=0)
    executed_at = Column(
        DateTime(), nullable=False, default=now_in_app_naive_datetime, index=True
    )
    completed_at = Column(DateTime(), nullable=True)

    deliveries = relationship(
        "RuleExecutionChannelModel",
        back_populates="execution",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="RuleExecutionChannelModel.attempted_at",
    )


class RuleExecutionChannelModel(Base):
    """Per-channel, per-recipient outcome of a rule execution."""

    __tablename__ = "rule_execution_channel"

    id = Column(String(36), primary_key=True, default=generate_id)
    execution_id = Column(
        String(36),
        ForeignKey("rule_execution.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    channel = Column(String(16), nullable=False)
    recipient_user_id = Column(String(64), nullable=True)
    status = Column(String(16), nullable=False)
    error_message = Column(Text, nullable=True)
    provider_message_id = Column(String(128), nullable=True)
    attempted_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)

    execution = relationship("RuleExecutionModel", back_populates="deliveries")


__all__ = ["RuleExecutionChannelModel", "RuleExecutionModel"]
