"""Services composing the notification pipeline."""

from .content_renderer import ContentRenderer
from .recipient_resolver import RecipientResolver
from .rule_evaluator import match_rules

__all__ = ["ContentRenderer", "RecipientResolver", "match_rules"]
