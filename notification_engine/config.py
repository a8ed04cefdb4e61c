"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    app_timezone: str = Field(
        default="Europe/Paris",
        description="IANA timezone (or UTC+HH:MM offset) used to localize stored datetimes",
    )
    app_base_url: str = Field(
        default="http://localhost:3000",
        description="Public URL of the web application, used to build deep links",
    )
    log_level: str = Field(default="INFO", description="Root logging level")
    cron_secret: str | None = Field(
        default=None,
        description="Shared secret expected from the cron trigger as a Bearer token",
    )
    sendgrid_api_key: str | None = Field(
        default=None,
        description="SendGrid API key used for sending transactional emails via the REST API",
    )
    sendgrid_sender: str | None = Field(
        default=None,
        description="Email address that will appear as the sender of transactional messages",
        min_length=3,
    )
    whatsapp_api_url: str = Field(
        default="https://graph.facebook.com",
        description="Base URL of the WhatsApp Business messaging API",
    )
    whatsapp_api_token: str | None = Field(
        default=None, description="Bearer token for the WhatsApp Business API"
    )
    whatsapp_max_retries: int = Field(
        default=3, ge=0, description="Retries for 5xx or transport errors on WhatsApp sends"
    )
    whatsapp_retry_backoff_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Base delay of the exponential backoff between WhatsApp retries",
    )
    whatsapp_send_deadline_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Total time one WhatsApp delivery may spend across its attempts",
    )
    dispatch_timeout_seconds: float = Field(
        default=10.0, gt=0, description="Timeout applied to every outbound provider call"
    )
    event_window_minutes: int = Field(
        default=5, gt=0, description="Trailing window scanned by each scheduler run"
    )
    event_batch_size: int = Field(
        default=50, gt=0, description="Maximum number of events scanned per scheduler run"
    )
    execution_max_retries: int = Field(
        default=3, ge=0, description="Retry budget for failed rule executions"
    )
    pending_claim_timeout_minutes: int = Field(
        default=15,
        gt=0,
        description="Age after which an unfinished claim is treated as failed before dispatch",
    )
    idempotency_scope: Literal["event", "rule"] = Field(
        default="rule",
        description=(
            "'event' skips an event once any execution exists for it, "
            "'rule' gates each (event, rule) pair independently"
        ),
    )

    @model_validator(mode="after")
    def _validate_sendgrid_pair(self) -> "Settings":
        if bool(self.sendgrid_api_key) ^ bool(self.sendgrid_sender):
            raise ValueError(
                "SENDGRID_API_KEY and SENDGRID_SENDER must both be provided to enable email"
            )
        if self.sendgrid_sender and "@" not in self.sendgrid_sender:
            raise ValueError("SENDGRID_SENDER must be a valid email address")
        return self

    @property
    def email_configured(self) -> bool:
        return bool(self.sendgrid_api_key and self.sendgrid_sender)


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
