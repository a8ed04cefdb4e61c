"""Use cases for the event log."""

from .get_event import get_event
from .record_event import record_event

__all__ = ["get_event", "record_event"]
