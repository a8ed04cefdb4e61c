from .cron import CronHealthRead, ProcessingReportRead, RetryReportRead
from .event import EventCreate, EventRead
from .notification_rule import (
    NotificationRuleCreate,
    NotificationRuleDryRunRequest,
    NotificationRuleDryRunResponse,
    NotificationRuleList,
    NotificationRuleRead,
    NotificationRuleUpdate,
    SampleEvent,
)
from .rule_execution import ChannelDeliveryRead, RuleExecutionRead
from .stats import (
    ExecutionEventRead,
    ExecutionRuleRead,
    ExecutionSummaryRead,
    NotificationStatsRead,
)

__all__ = [
    "ChannelDeliveryRead",
    "CronHealthRead",
    "EventCreate",
    "EventRead",
    "ExecutionEventRead",
    "ExecutionRuleRead",
    "ExecutionSummaryRead",
    "NotificationRuleCreate",
    "NotificationRuleDryRunRequest",
    "NotificationRuleDryRunResponse",
    "NotificationRuleList",
    "NotificationRuleRead",
    "NotificationRuleUpdate",
    "NotificationStatsRead",
    "ProcessingReportRead",
    "RetryReportRead",
    "RuleExecutionRead",
    "SampleEvent",
]
