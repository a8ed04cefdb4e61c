"""Schemas for the cron trigger endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class ProcessingReportRead(BaseModel):
    events_scanned: int = Field(..., description="Events read from the trailing window")
    events_processed: int
    events_skipped: int = Field(..., description="Events skipped by the event-level gate")
    events_failed: int
    rules_processed: int
    rules_skipped: int = Field(..., description="Rules already recorded for the event")
    succeeded: int
    failed: int
    duration_ms: int

    model_config = ConfigDict(from_attributes=True)


class RetryReportRead(BaseModel):
    retried: int
    succeeded: int
    failed: int

    model_config = ConfigDict(from_attributes=True)


class CronHealthRead(BaseModel):
    status: str
    endpoint: str
    description: str
