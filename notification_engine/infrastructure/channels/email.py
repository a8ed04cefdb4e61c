"""Email channel backed by the SendGrid REST API."""

from __future__ import annotations

import json
import logging
from html import escape
from typing import Any

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from notification_engine.config import Settings
from notification_engine.domain.entities import (
    Event,
    NotificationChannel,
    NotificationRule,
    Recipient,
    RenderedContent,
)
from notification_engine.domain.errors import ConfigError, DispatchError, RecipientUnreachable

from .base import ChannelDispatcher

logger = logging.getLogger(__name__)

CALL_TO_ACTION_LABEL = "Voir mon espace"


def _extract_sendgrid_error_details(body: Any) -> str | None:
    """Return a human readable description for a SendGrid error payload."""

    if body in (None, ""):
        return None

    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None

    if isinstance(body, str):
        body = body.strip()
        if not body:
            return None
        try:
            parsed = json.loads(body)
        except json.JSONDecodeError:
            return body
    else:
        parsed = body

    if isinstance(parsed, dict):
        errors = parsed.get("errors")
        if isinstance(errors, list):
            messages: list[str] = []
            for item in errors:
                if not isinstance(item, dict):
                    continue
                message = item.get("message")
                help_link = item.get("help")
                if message and help_link:
                    messages.append(f"{message} (help: {help_link})")
                elif message:
                    messages.append(str(message))
            if messages:
                return "; ".join(messages)
        try:
            return json.dumps(parsed)
        except (TypeError, ValueError):
            return None

    if isinstance(parsed, list):
        return "; ".join(str(item) for item in parsed)

    return None


def _describe_sendgrid_failure(status_code: Any, body: Any) -> str:
    details = _extract_sendgrid_error_details(body)
    if status_code and details:
        return f"SendGrid API request failed with status {status_code}: {details}"
    if status_code:
        return f"SendGrid API request failed with status {status_code}"
    if details:
        return f"SendGrid API request failed: {details}"
    return "SendGrid API request failed"


def render_email_html(recipient: Recipient, content: RenderedContent) -> str:
    return (
        f"<p>Bonjour {escape(recipient.display_name)},</p>"
        f"<h2>{escape(content.title)}</h2>"
        f"<p>{escape(content.message)}</p>"
        f'<p><a href="{escape(content.action_url, quote=True)}">{CALL_TO_ACTION_LABEL}</a></p>'
    )


def render_email_text(recipient: Recipient, content: RenderedContent) -> str:
    return (
        f"Bonjour {recipient.display_name},\n\n"
        f"{content.title}\n\n"
        f"{content.message}\n\n"
        f"{CALL_TO_ACTION_LABEL} : {content.action_url}\n"
    )


class EmailDispatcher(ChannelDispatcher):
    """Send transactional emails with the configured SendGrid credentials."""

    channel = NotificationChannel.EMAIL.value

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def deliver(
        self,
        recipient: Recipient,
        content: RenderedContent,
        *,
        event: Event,
        rule: NotificationRule,
    ) -> str | None:
        if not self.settings.email_configured:
            raise ConfigError(
                "SendGrid configuration incomplete: SENDGRID_API_KEY and SENDGRID_SENDER are required"
            )
        if not recipient.email:
            raise RecipientUnreachable(f"User {recipient.user_id} has no email address")

        message = Mail(
            from_email=self.settings.sendgrid_sender,
            to_emails=recipient.email,
            subject=content.title,
            html_content=render_email_html(recipient, content),
            plain_text_content=render_email_text(recipient, content),
        )

        try:
            client = SendGridAPIClient(self.settings.sendgrid_api_key)
            # Propagated to the per-endpoint clients built for each request.
            client.client.timeout = self.settings.dispatch_timeout_seconds
            response = client.send(message)
        except Exception as exc:
            status_code = getattr(exc, "status_code", None)
            body = getattr(exc, "body", None)
            if status_code or body:
                raise DispatchError(
                    _describe_sendgrid_failure(status_code, body), status_code=status_code
                ) from exc
            raise DispatchError(f"Error sending email via SendGrid: {exc}") from exc

        status_code = getattr(response, "status_code", None)
        if not isinstance(status_code, int) or not 200 <= status_code < 300:
            raise DispatchError(
                _describe_sendgrid_failure(status_code, getattr(response, "body", None))
            )

        headers = getattr(response, "headers", None) or {}
        message_id = headers.get("X-Message-Id") if hasattr(headers, "get") else None
        logger.info("Email '%s' sent to user %s", content.title, recipient.user_id)
        return message_id

    def preview(self, content: RenderedContent) -> dict[str, Any]:
        sample = Recipient(user_id="preview")
        return {
            "subject": content.title,
            "preview": content.message,
            "html": render_email_html(sample, content),
        }


__all__ = ["EmailDispatcher", "render_email_html", "render_email_text"]
