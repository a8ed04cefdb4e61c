from fastapi import FastAPI

from .cron import router as cron_router
from .events import router as events_router
from .notification_rules import router as notification_rules_router
from .rule_executions import router as rule_executions_router


def register_routes(app: FastAPI) -> None:
    """Register every API router on the FastAPI application."""

    app.include_router(events_router)
    app.include_router(cron_router)
    app.include_router(notification_rules_router)
    app.include_router(rule_executions_router)
