"""Repository implementations for infrastructure layer."""

from .agent_repository import AgentRepository
from .dossier_repository import DossierRepository
from .event_repository import EventRepository
from .notification_repository import NotificationRepository
from .notification_rule_repository import NotificationRuleRepository
from .rule_execution_repository import RuleExecutionRepository
from .user_repository import UserRepository

__all__ = [
    "AgentRepository",
    "DossierRepository",
    "EventRepository",
    "NotificationRepository",
    "NotificationRuleRepository",
    "RuleExecutionRepository",
    "UserRepository",
]
