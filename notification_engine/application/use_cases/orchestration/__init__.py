"""Use cases driving events through rules, channels and the execution ledger."""

from .dispatch_rule import RuleOutcome, dispatch_rule, summarize_deliveries
from .process_event import EventOutcome, process_event
from .process_recent_events import ProcessingReport, process_recent_events
from .record_execution import record_execution
from .retry_executions import RetryReport, retry_execution, retry_failed_executions

__all__ = [
    "EventOutcome",
    "ProcessingReport",
    "RetryReport",
    "RuleOutcome",
    "dispatch_rule",
    "process_event",
    "process_recent_events",
    "record_execution",
    "retry_execution",
    "retry_failed_executions",
    "summarize_deliveries",
]
