"""
Alert Engine Data Models
========================

Rules, alerts and the process-wide alert configuration.

Rule condition types and operators are kept as plain strings on
RuleCondition so that a rule loaded from an external store with an unknown
type still reaches the evaluator, which rejects that single rule instead of
failing the whole load.
"""

import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from ..reviews.review_models import ReviewCategory


class AlertType(str, Enum):
    """Alert severity class produced by a rule's create_alert action."""
    CRITICAL = "critical"
    URGENT = "urgent"
    NEGATIVE = "negative"
    WARNING = "warning"


class AlertPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# Alert categories are the complaint categories of the review primitives.
AlertCategory = ReviewCategory


class ConditionType(str, Enum):
    RATING = "rating"
    KEYWORD = "keyword"
    SENTIMENT = "sentiment"
    FREQUENCY = "frequency"


class ConditionOperator(str, Enum):
    EQUALS = "equals"
    LESS_THAN = "less_than"
    GREATER_THAN = "greater_than"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"


class ActionType(str, Enum):
    """Only CREATE_ALERT is executed; the rest are delivery concerns."""
    CREATE_ALERT = "create_alert"
    SEND_EMAIL = "send_email"
    SEND_WHATSAPP = "send_whatsapp"
    WEBHOOK = "webhook"


class NotificationFrequency(str, Enum):
    IMMEDIATE = "immediate"
    HOURLY = "hourly"
    DAILY = "daily"


class AlertStatusFilter(str, Enum):
    ALL = "all"
    UNREAD = "unread"
    RESOLVED = "resolved"
    PENDING = "pending"


@dataclass(frozen=True)
class RuleCondition:
    """A single rule condition. Rules AND all of their conditions."""
    type: str
    operator: str
    value: Union[str, int, float]


@dataclass(frozen=True)
class RuleAction:
    type: str
    config: Dict[str, Any] = field(default_factory=dict)

    @property
    def alert_type(self) -> Optional[str]:
        return self.config.get("alert_type", self.config.get("alertType"))


@dataclass
class AlertRule:
    """A named, enableable set of AND-combined conditions plus actions."""
    id: str
    name: str
    conditions: List[RuleCondition]
    actions: List[RuleAction]
    priority: AlertPriority = AlertPriority.MEDIUM
    enabled: bool = True

    def create_alert_action(self) -> Optional[RuleAction]:
        """The first create_alert action, if the rule has one."""
        for action in self.actions:
            if action.type == ActionType.CREATE_ALERT.value:
                return action
        return None


@dataclass
class Alert:
    """An alert raised by a firing rule against one review."""
    id: str
    type: AlertType
    title: str
    description: str
    product_id: str
    product_name: str
    review_id: str
    author: str
    rating: Any
    comment: str
    date: datetime              # creation time, not review time
    priority: AlertPriority
    category: AlertCategory
    rule_id: Optional[str] = None
    is_read: bool = False
    is_resolved: bool = False

    @property
    def is_pending(self) -> bool:
        return not self.is_resolved

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "title": self.title,
            "description": self.description,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "review_id": self.review_id,
            "author": self.author,
            "rating": self.rating,
            "comment": self.comment,
            "date": self.date.isoformat(),
            "priority": self.priority.value,
            "category": self.category.value,
            "rule_id": self.rule_id,
            "is_read": self.is_read,
            "is_resolved": self.is_resolved,
        }


@dataclass(frozen=True)
class AlertStats:
    """Derived alert counts. resolved is always total - pending."""
    total: int
    unread: int
    critical: int
    pending: int

    @property
    def resolved(self) -> int:
        return self.total - self.pending

    def to_dict(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "unread": self.unread,
            "critical": self.critical,
            "pending": self.pending,
            "resolved": self.resolved,
        }


@dataclass
class AlertConfig:
    """
    Process-wide alert settings.

    Channel flags and addresses only drive the notification decision;
    delivery happens outside the engine.
    """
    email_enabled: bool = True
    whatsapp_enabled: bool = True
    push_enabled: bool = False
    critical_enabled: bool = True
    urgent_enabled: bool = True
    negative_enabled: bool = True
    warning_enabled: bool = True
    email_address: str = ""
    whatsapp_number: str = ""
    min_rating: int = 3
    keywords: List[str] = field(default_factory=lambda: [
        "defeito", "problema", "ruim", "péssimo", "quebrado", "danificado",
    ])
    sound_enabled: bool = True
    auto_resolve: bool = True
    auto_resolve_hours: int = 24
    retention_days: int = 30
    notification_frequency: NotificationFrequency = NotificationFrequency.IMMEDIATE

    def is_type_enabled(self, alert_type: AlertType) -> bool:
        return {
            AlertType.CRITICAL: self.critical_enabled,
            AlertType.URGENT: self.urgent_enabled,
            AlertType.NEGATIVE: self.negative_enabled,
            AlertType.WARNING: self.warning_enabled,
        }[alert_type]

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["notification_frequency"] = self.notification_frequency.value
        return data


# =============================================================================
# ALERT TEMPLATES
# =============================================================================

ALERT_TITLES = {
    AlertType.CRITICAL: "Avaliação Crítica - {product}",
    AlertType.URGENT: "Alerta Urgente - {product}",
    AlertType.NEGATIVE: "Feedback Negativo - {product}",
    AlertType.WARNING: "Aviso - {product}",
}

ALERT_DESCRIPTIONS = {
    AlertType.CRITICAL: "Cliente deu {rating} estrelas e relatou problema grave",
    AlertType.URGENT: "Requer atenção imediata - {rating} estrelas",
    AlertType.NEGATIVE: "Avaliação negativa detectada - {rating} estrelas",
    AlertType.WARNING: "Tendência negativa observada",
}


def alert_title(alert_type: AlertType, product_name: str) -> str:
    return ALERT_TITLES[alert_type].format(product=product_name)


def alert_description(alert_type: AlertType, rating: Any) -> str:
    return ALERT_DESCRIPTIONS[alert_type].format(rating=rating)


def new_alert_id() -> str:
    return uuid.uuid4().hex


# =============================================================================
# DEFAULT RULES
# =============================================================================

def default_rules(config: Optional[AlertConfig] = None) -> List[AlertRule]:
    """
    The stock rule set, parameterized by the alert config:

    - critical-rating: rating below config.min_rating -> critical, high
    - negative-keywords: comment mentions a config keyword -> urgent, medium
    - multiple-complaints: more than 5 critical/urgent alerts for the
      product in 24h -> warning, medium
    """
    config = config or AlertConfig()
    return [
        AlertRule(
            id="critical-rating",
            name="Avaliações Críticas (1-2 estrelas)",
            conditions=[RuleCondition("rating", "less_than", config.min_rating)],
            actions=[RuleAction("create_alert", {"alert_type": "critical"})],
            priority=AlertPriority.HIGH,
        ),
        AlertRule(
            id="negative-keywords",
            name="Palavras-chave Negativas",
            conditions=[RuleCondition("keyword", "contains", ",".join(config.keywords))],
            actions=[RuleAction("create_alert", {"alert_type": "urgent"})],
            priority=AlertPriority.MEDIUM,
        ),
        AlertRule(
            id="multiple-complaints",
            name="Múltiplas Reclamações",
            conditions=[RuleCondition("frequency", "greater_than", 5)],
            actions=[RuleAction("create_alert", {"alert_type": "warning"})],
            priority=AlertPriority.MEDIUM,
        ),
    ]
