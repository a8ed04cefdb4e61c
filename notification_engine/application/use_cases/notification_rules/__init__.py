"""Use cases for managing notification rules."""

from .create_rule import create_rule
from .delete_rule import delete_rule
from .dry_run_rule import RuleDryRunResult, dry_run_rule
from .get_rule import get_rule
from .list_rules import list_rules
from .toggle_rule import toggle_rule
from .update_rule import update_rule

__all__ = [
    "RuleDryRunResult",
    "create_rule",
    "delete_rule",
    "dry_run_rule",
    "get_rule",
    "list_rules",
    "toggle_rule",
    "update_rule",
]
