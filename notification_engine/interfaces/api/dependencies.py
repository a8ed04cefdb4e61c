"""FastAPI dependency utilities."""

import hmac
import logging

from fastapi import Depends, HTTPException, Request, status

from notification_engine.config import Settings, get_settings
from notification_engine.domain.errors import NotificationEngineError

logger = logging.getLogger(__name__)

_BODY_AUTHORIZATION_KEYS = ("Authorization", "authorization")


def get_app_settings() -> Settings:
    """Return the application settings; overridable in tests."""

    return get_settings()


def http_error(exc: NotificationEngineError, status_code: int) -> HTTPException:
    """Translate a domain error into an ``HTTPException`` with a structured detail."""

    return HTTPException(status_code=status_code, detail=exc.to_payload())


async def _body_authorization(request: Request) -> list[str]:
    try:
        body = await request.json()
    except ValueError:
        return []
    if not isinstance(body, dict):
        return []
    return [str(body[key]) for key in _BODY_AUTHORIZATION_KEYS if body.get(key)]


async def require_cron_secret(
    request: Request,
    settings: Settings = Depends(get_app_settings),
) -> None:
    """Accept ``Bearer <CRON_SECRET>`` from the header or from the JSON body."""

    if not settings.cron_secret:
        logger.error("CRON_SECRET is not configured; rejecting cron trigger")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "Unauthorized"},
        )

    expected = f"Bearer {settings.cron_secret}"
    candidates = [request.headers.get("authorization") or ""]
    candidates.extend(await _body_authorization(request))
    if not any(hmac.compare_digest(candidate, expected) for candidate in candidates):
        logger.warning("Rejected cron trigger with invalid credentials")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "Unauthorized"},
            headers={"WWW-Authenticate": "Bearer"},
        )


__all__ = ["get_app_settings", "http_error", "require_cron_secret"]
