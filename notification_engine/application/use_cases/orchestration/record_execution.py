"""Use case for writing a complete ledger entry in one step."""

from sqlalchemy.orm import Session

from notification_engine.domain.entities import RuleExecution
from notification_engine.infrastructure.repositories import RuleExecutionRepository


def record_execution(
    session: Session,
    *,
    rule_id: str,
    event_id: str,
    success: bool,
    error_message: str | None = None,
) -> RuleExecution | None:
    """Record the outcome of ``(event_id, rule_id)`` unless it is already recorded.

    Returns ``None`` when the pair already has a ledger entry.
    """

    repository = RuleExecutionRepository(session)
    execution = repository.claim(rule_id=rule_id, event_id=event_id)
    if execution is None:
        return None
    return repository.complete(
        execution.id,
        success=success,
        error_message=None if success else error_message,
    )
