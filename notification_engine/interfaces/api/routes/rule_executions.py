"""Routes operating on individual ledger entries."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from notification_engine.application.use_cases.orchestration import retry_execution
from notification_engine.config import Settings
from notification_engine.domain.errors import NotFoundError, RetryNotAllowedError
from notification_engine.infrastructure.database import get_db
from notification_engine.interfaces.api.dependencies import get_app_settings, http_error
from notification_engine.interfaces.api.schemas import RuleExecutionRead

router = APIRouter(prefix="/rule-executions", tags=["rule-executions"])


@router.post("/{execution_id}/retry", response_model=RuleExecutionRead)
def retry_rule_execution(
    execution_id: str,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> RuleExecutionRead:
    """Re-dispatch the failed channels of one execution."""

    try:
        execution = retry_execution(db, settings, execution_id)
    except NotFoundError as exc:
        raise http_error(exc, status.HTTP_404_NOT_FOUND) from exc
    except RetryNotAllowedError as exc:
        raise http_error(exc, status.HTTP_409_CONFLICT) from exc
    return RuleExecutionRead.model_validate(execution)
