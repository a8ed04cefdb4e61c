"""ORM models used by the application infrastructure."""

from .agent import AgentModel
from .dossier import DocumentModel, DossierModel, StepInstanceModel
from .event import EventModel
from .notification import NotificationModel
from .notification_rule import NotificationRuleModel
from .rule_execution import RuleExecutionChannelModel, RuleExecutionModel
from .user import UserModel

__all__ = [
    "AgentModel",
    "DocumentModel",
    "DossierModel",
    "EventModel",
    "NotificationModel",
    "NotificationRuleModel",
    "RuleExecutionChannelModel",
    "RuleExecutionModel",
    "StepInstanceModel",
    "UserModel",
]
