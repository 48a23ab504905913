"""
ReviewWatch Alert Engine
========================

Rule-triggered alerts for incoming reviews.

Modules:
    alert_models    - Alert, AlertRule, AlertConfig, default rules
    rule_evaluator  - Pure AND-combined condition evaluation
    alert_store     - Alert collection seam (in-memory default)
    alert_manager   - Rule pass, lifecycle, stats, subscriptions
    rule_schemas    - Pydantic validation for externally stored rules/config
"""

from .alert_models import (
    Alert,
    AlertCategory,
    AlertConfig,
    AlertPriority,
    AlertRule,
    AlertStats,
    AlertType,
    NotificationFrequency,
    RuleAction,
    RuleCondition,
    default_rules,
)
from .rule_evaluator import RuleEvaluator
from .alert_store import AlertStore, InMemoryAlertStore
from .alert_manager import AlertManager, Subscription
from .rule_schemas import load_rules, load_rules_file, load_alert_config

__all__ = [
    "Alert",
    "AlertCategory",
    "AlertConfig",
    "AlertPriority",
    "AlertRule",
    "AlertStats",
    "AlertType",
    "NotificationFrequency",
    "RuleAction",
    "RuleCondition",
    "default_rules",
    "RuleEvaluator",
    "AlertStore",
    "InMemoryAlertStore",
    "AlertManager",
    "Subscription",
    "load_rules",
    "load_rules_file",
    "load_alert_config",
]
