"""Routes invoked by the external scheduler."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from notification_engine.application.use_cases.orchestration import (
    process_recent_events,
    retry_failed_executions,
)
from notification_engine.config import Settings
from notification_engine.infrastructure.database import get_db
from notification_engine.interfaces.api.dependencies import (
    get_app_settings,
    require_cron_secret,
)
from notification_engine.interfaces.api.schemas import (
    CronHealthRead,
    ProcessingReportRead,
    RetryReportRead,
)

router = APIRouter(prefix="/cron", tags=["cron"])


@router.post(
    "/process-event-notifications",
    response_model=ProcessingReportRead,
    dependencies=[Depends(require_cron_secret)],
)
def process_event_notifications(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> ProcessingReportRead:
    """Process the events of the trailing window through the notification rules."""

    report = process_recent_events(db, settings)
    return ProcessingReportRead.model_validate(report)


@router.get("/process-event-notifications", response_model=CronHealthRead)
def process_event_notifications_health() -> CronHealthRead:
    return CronHealthRead(
        status="ok",
        endpoint="/cron/process-event-notifications",
        description="Processes recent events and dispatches matching notification rules",
    )


@router.post(
    "/retry-failed-executions",
    response_model=RetryReportRead,
    dependencies=[Depends(require_cron_secret)],
)
def retry_failed_executions_endpoint(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> RetryReportRead:
    """Retry failed rule executions that have not exhausted their retry budget."""

    report = retry_failed_executions(db, settings)
    return RetryReportRead.model_validate(report)
