"""Error taxonomy raised by the orchestration engine."""

from __future__ import annotations

from typing import Any


class NotificationEngineError(Exception):
    """Base class for every error raised by the engine."""

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        """Return a JSON-serializable description of the error."""

        return {"error": self.message, **self.details}


class ValidationError(NotificationEngineError, ValueError):
    """A rule definition or an ingested event is malformed."""


class ConditionError(ValidationError):
    """A condition expression cannot be parsed."""


class NotFoundError(NotificationEngineError, LookupError):
    """A targeted rule, event or execution does not exist."""


class ResolutionError(NotificationEngineError):
    """No recipient could be derived for a matched rule."""


class DispatchError(NotificationEngineError):
    """A channel provider rejected the message or could not be reached."""


class ConfigError(DispatchError):
    """Provider credentials required by a channel are missing."""


class RecipientUnreachable(NotificationEngineError):
    """The recipient has no address for a channel; delivery is skipped."""


class ChannelNotSupported(NotificationEngineError):
    """The channel has no provider; delivery is reported as not supported."""


class RetryNotAllowedError(NotificationEngineError):
    """The execution succeeded, is still running or exhausted its retry budget."""


__all__ = [
    "ChannelNotSupported",
    "ConditionError",
    "ConfigError",
    "DispatchError",
    "NotFoundError",
    "NotificationEngineError",
    "RecipientUnreachable",
    "ResolutionError",
    "RetryNotAllowedError",
    "ValidationError",
]
