"""
Rule & Config Schemas
=====================

Pydantic models validating alert rules and alert config loaded from an
external config store (JSON files, a settings table, an admin UI payload).
Field names are accepted in snake_case or in the camelCase used by the
front end.

A rule that fails validation is logged and skipped; the other rules of
the same document still load.

Usage:
    rules = load_rules_file("rules.json")
    config = load_alert_config({"minRating": 2, "autoResolveHours": 12})
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from .alert_models import (
    AlertConfig,
    AlertPriority,
    AlertRule,
    NotificationFrequency,
    RuleAction,
    RuleCondition,
)

logger = logging.getLogger(__name__)


class ConditionSchema(BaseModel):
    """One rule condition."""
    type: Literal["rating", "keyword", "sentiment", "frequency"]
    operator: Literal["equals", "less_than", "greater_than", "contains", "not_contains"]
    value: Union[int, float, str]


class ActionSchema(BaseModel):
    """One rule action. Only create_alert is executed by the engine."""
    type: Literal["create_alert", "send_email", "send_whatsapp", "webhook"]
    config: Dict[str, Any] = Field(default_factory=dict)


class RuleSchema(BaseModel):
    """Full alert rule definition."""
    id: str
    name: str
    enabled: bool = True
    conditions: List[ConditionSchema] = Field(min_length=1)
    actions: List[ActionSchema] = Field(min_length=1)
    priority: Literal["high", "medium", "low"] = "medium"

    def to_rule(self) -> AlertRule:
        return AlertRule(
            id=self.id,
            name=self.name,
            enabled=self.enabled,
            conditions=[RuleCondition(c.type, c.operator, c.value) for c in self.conditions],
            actions=[RuleAction(a.type, dict(a.config)) for a in self.actions],
            priority=AlertPriority(self.priority),
        )


class AlertConfigSchema(BaseModel):
    """Partial alert config; unset fields keep the current value."""
    emailEnabled: Optional[bool] = Field(None, alias="email_enabled")
    whatsappEnabled: Optional[bool] = Field(None, alias="whatsapp_enabled")
    pushEnabled: Optional[bool] = Field(None, alias="push_enabled")
    criticalEnabled: Optional[bool] = Field(None, alias="critical_enabled")
    urgentEnabled: Optional[bool] = Field(None, alias="urgent_enabled")
    negativeEnabled: Optional[bool] = Field(None, alias="negative_enabled")
    warningEnabled: Optional[bool] = Field(None, alias="warning_enabled")
    emailAddress: Optional[str] = Field(None, alias="email_address")
    whatsappNumber: Optional[str] = Field(None, alias="whatsapp_number")
    minRating: Optional[int] = Field(None, alias="min_rating", ge=1, le=5)
    keywords: Optional[List[str]] = None
    soundEnabled: Optional[bool] = Field(None, alias="sound_enabled")
    autoResolve: Optional[bool] = Field(None, alias="auto_resolve")
    autoResolveHours: Optional[int] = Field(None, alias="auto_resolve_hours", gt=0)
    retentionDays: Optional[int] = Field(None, alias="retention_days", gt=0)
    notificationFrequency: Optional[Literal["immediate", "hourly", "daily"]] = Field(
        None, alias="notification_frequency"
    )

    class Config:
        populate_by_name = True

    def to_partial(self) -> Dict[str, Any]:
        """Snake_case dict of the fields that were set, for AlertManager.set_config."""
        data = self.model_dump(by_alias=True, exclude_none=True)
        if "keywords" in data:
            data["keywords"] = [k.strip().lower() for k in data["keywords"] if k.strip()]
        return data


def load_rules(documents: List[Dict[str, Any]]) -> List[AlertRule]:
    """
    Validate rule documents, skipping (and logging) the invalid ones.

    Returns:
        Valid rules, in document order
    """
    rules = []
    for index, document in enumerate(documents):
        try:
            rules.append(RuleSchema.model_validate(document).to_rule())
        except ValidationError as e:
            rule_id = document.get("id", f"#{index}") if isinstance(document, dict) else f"#{index}"
            logger.warning(
                f"Skipping invalid rule {rule_id}: {e.error_count()} validation errors",
                extra={"rule_id": rule_id},
            )
    logger.info(f"Loaded {len(rules)}/{len(documents)} alert rules")
    return rules


def load_rules_file(path: Union[str, Path]) -> List[AlertRule]:
    """Load rules from a JSON file holding a list or {"rules": [...]}."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("rules", [])
    return load_rules(data)


def load_alert_config(data: Dict[str, Any], base: Optional[AlertConfig] = None) -> AlertConfig:
    """
    Build an AlertConfig by overlaying a validated partial document on base.

    Raises:
        pydantic.ValidationError: if the document is invalid
    """
    partial = AlertConfigSchema.model_validate(data).to_partial()
    if "notification_frequency" in partial:
        partial["notification_frequency"] = NotificationFrequency(partial["notification_frequency"])
    current = (base or AlertConfig()).to_dict()
    current.update(partial)
    current["notification_frequency"] = NotificationFrequency(current["notification_frequency"])
    return AlertConfig(**current)
