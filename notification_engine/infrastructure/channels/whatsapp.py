"""WhatsApp channel backed by the WhatsApp Business messaging API."""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable
from typing import Any, Final

import httpx

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

_E164_PATTERN: Final[re.Pattern[str]] = re.compile(r"^\+[1-9]\d{6,14}$")
_NON_DIGITS: Final[re.Pattern[str]] = re.compile(r"[^\d+]")


def format_to_e164(phone: str | None) -> str | None:
    """Normalize ``phone`` to E.164 (``+`` and 7 to 15 digits) or return ``None``.

    A leading ``00`` international prefix is rewritten to ``+`` and numbers
    without a prefix are assumed to already carry their country code.
    """

    if not phone:
        return None
    cleaned = _NON_DIGITS.sub("", phone)
    if not cleaned.startswith("+"):
        cleaned = "+" + (cleaned[2:] if cleaned.startswith("00") else cleaned)
    return cleaned if _E164_PATTERN.match(cleaned) else None


def format_whatsapp_message(content: RenderedContent) -> str:
    return f"*{content.title}*\n\n{content.message}\n\n{content.action_url}"


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if data.get("message"):
            return str(data["message"])
    return f"HTTP {response.status_code}"


class WhatsAppDispatcher(ChannelDispatcher):
    """Send text messages, retrying server errors with exponential backoff.

    Retries stop early once the next backoff would cross the per-delivery
    deadline (`whatsapp_send_deadline_seconds`).
    """

    channel = NotificationChannel.WHATSAPP.value

    def __init__(
        self,
        settings: Settings,
        *,
        http_client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings
        self._http = http_client
        self._sleep = sleep
        self._clock = clock

    def deliver(
        self,
        recipient: Recipient,
        content: RenderedContent,
        *,
        event: Event,
        rule: NotificationRule,
    ) -> str | None:
        if not recipient.phone:
            raise RecipientUnreachable(f"User {recipient.user_id} has no phone number")
        phone = format_to_e164(recipient.phone)
        if phone is None:
            raise RecipientUnreachable(f"Invalid phone number format: {recipient.phone}")
        if not self.settings.whatsapp_api_token:
            raise ConfigError("WhatsApp API token not configured")

        body = {
            "messaging_product": "whatsapp",
            "recipient_type": "individual",
            "to": phone,
            "type": "text",
            "text": {"preview_url": True, "body": format_whatsapp_message(content)},
        }
        if self._http is not None:
            response = self._post_with_retries(self._http, body)
        else:
            with httpx.Client(timeout=self.settings.dispatch_timeout_seconds) as client:
                response = self._post_with_retries(client, body)

        try:
            data = response.json()
        except ValueError:
            data = {}
        messages = data.get("messages") if isinstance(data, dict) else None
        if isinstance(messages, list) and messages and isinstance(messages[0], dict):
            return messages[0].get("id") or None
        return data.get("id") if isinstance(data, dict) else None

    def _post_with_retries(self, client: httpx.Client, body: dict[str, Any]) -> httpx.Response:
        url = f"{self.settings.whatsapp_api_url.rstrip('/')}/v1/messages"
        headers = {"Authorization": f"Bearer {self.settings.whatsapp_api_token}"}
        max_retries = self.settings.whatsapp_max_retries
        budget = self.settings.whatsapp_send_deadline_seconds
        deadline = self._clock() + budget
        attempt = 0
        while True:
            timeout = min(self.settings.dispatch_timeout_seconds, deadline - self._clock())
            try:
                response = client.post(url, json=body, headers=headers, timeout=timeout)
            except httpx.TransportError as exc:
                if attempt >= max_retries:
                    raise DispatchError(f"WhatsApp API unreachable: {exc}") from exc
                reason = str(exc) or type(exc).__name__
            else:
                if response.is_success:
                    return response
                if response.status_code < 500 or attempt >= max_retries:
                    raise DispatchError(
                        _error_message(response), status_code=response.status_code
                    )
                reason = _error_message(response)

            delay = self.settings.whatsapp_retry_backoff_seconds * (2**attempt)
            if self._clock() + delay >= deadline:
                raise DispatchError(
                    f"WhatsApp send gave up after {attempt + 1} attempt(s) "
                    f"within {budget:g}s: {reason}"
                )
            logger.warning(
                "WhatsApp send failed (attempt %d/%d), retrying in %.1fs: %s",
                attempt + 1,
                max_retries + 1,
                delay,
                reason,
            )
            self._sleep(delay)
            attempt += 1

    def preview(self, content: RenderedContent) -> dict[str, Any]:
        return {"message": format_whatsapp_message(content)}


__all__ = ["WhatsAppDispatcher", "format_to_e164", "format_whatsapp_message"]
