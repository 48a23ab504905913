"""
ReviewWatch Alert Manager
=========================

Owns the rule set and the alert collection. Each incoming review is run
through every enabled rule; each firing rule yields exactly one Alert,
which is stored and then pushed to subscribers.

Features:
    - Rule / config management (shallow merge on set_config)
    - Misconfigured rules skipped and logged, never aborting the review
    - Read / resolve lifecycle, TTL auto-resolve, retention pruning
    - Subscriptions with unsubscribe handles; listener errors isolated

Thread safety:
    One re-entrant lock guards rules, config and the alert collection. The
    frequency condition reads alerts appended earlier in the same
    process_review call, so the whole rule pass runs under the lock.
    Listeners run after the pass, outside the lock, in creation order.

Usage:
    manager = AlertManager()
    subscription = manager.subscribe(lambda alert: queue.put(alert))
    alerts = manager.process_review(review, product)
    subscription.unsubscribe()
"""

import logging
import threading
from dataclasses import fields, replace
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Union

from ..data.data_models import Product, Review, missing_product, utc_now
from ..exceptions import RuleConfigurationError
from ..reviews.review_signals import categorize_comment
from .alert_models import (
    Alert,
    AlertCategory,
    AlertConfig,
    AlertPriority,
    AlertRule,
    AlertStats,
    AlertStatusFilter,
    AlertType,
    NotificationFrequency,
    alert_description,
    alert_title,
    default_rules,
    new_alert_id,
)
from .alert_store import AlertStore, InMemoryAlertStore
from .rule_evaluator import RuleEvaluator

logger = logging.getLogger(__name__)

AlertListener = Callable[[Alert], None]


class Subscription:
    """Handle returned by AlertManager.subscribe()."""

    def __init__(self, manager: "AlertManager", listener: AlertListener):
        self._manager = manager
        self.listener = listener
        self.active = True

    def unsubscribe(self) -> None:
        """Stop receiving alerts. Safe to call more than once."""
        if self.active:
            self._manager._drop_subscription(self)
            self.active = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.unsubscribe()
        return False


class AlertManager:
    """
    Real-time alert engine.

    Dependencies are injected so that independent managers (e.g. one per
    test) never share state.
    """

    def __init__(
        self,
        config: Optional[AlertConfig] = None,
        rules: Optional[List[AlertRule]] = None,
        store: Optional[AlertStore] = None,
        clock: Callable[[], datetime] = utc_now,
        evaluator: Optional[RuleEvaluator] = None,
    ):
        """
        Initialize the alert manager.

        Args:
            config: Alert configuration (default: AlertConfig())
            rules: Rule set (default: default_rules(config))
            store: Alert collection (default: in-memory)
            clock: Returns the current aware datetime
            evaluator: Rule evaluator (default: RuleEvaluator(clock))
        """
        self._lock = threading.RLock()
        self._config = config or AlertConfig()
        self._rules: List[AlertRule] = list(rules) if rules is not None else default_rules(self._config)
        self.store = store or InMemoryAlertStore()
        self.clock = clock
        self.evaluator = evaluator or RuleEvaluator(clock=clock)
        self._subscriptions: List[Subscription] = []

        logger.info(f"AlertManager initialized: {len(self._rules)} rules")

    # =========================================================================
    # Configuration & rules
    # =========================================================================

    def set_config(self, partial: Optional[Dict[str, Any]] = None, **changes) -> None:
        """
        Shallow-merge settings into the current config.

        Raises:
            ValueError: on unknown setting names or invalid frequency
        """
        updates = dict(partial or {})
        updates.update(changes)

        known = {f.name for f in fields(AlertConfig)}
        unknown = set(updates) - known
        if unknown:
            raise ValueError(f"Unknown alert config keys: {sorted(unknown)}")

        if "notification_frequency" in updates:
            updates["notification_frequency"] = NotificationFrequency(updates["notification_frequency"])
        if "keywords" in updates:
            updates["keywords"] = list(updates["keywords"])

        with self._lock:
            self._config = replace(self._config, **updates)
        logger.info(f"Alert config updated: {sorted(updates)}")

    def get_config(self) -> AlertConfig:
        """A copy of the current config; mutating it has no effect."""
        with self._lock:
            return replace(self._config, keywords=list(self._config.keywords))

    def add_rule(self, rule: AlertRule) -> None:
        with self._lock:
            self._rules.append(rule)
        logger.info(f"Rule added: {rule.id}", extra={"rule_id": rule.id})

    def remove_rule(self, rule_id: str) -> None:
        with self._lock:
            self._rules = [r for r in self._rules if r.id != rule_id]

    def get_rules(self) -> List[AlertRule]:
        with self._lock:
            return list(self._rules)

    # =========================================================================
    # Review processing
    # =========================================================================

    def process_review(self, review: Review, product: Optional[Product] = None) -> List[Alert]:
        """
        Run every enabled rule against the review.

        Returns:
            The alerts created for this review, one per firing rule.
        """
        product = product or missing_product(review.product_id)
        new_alerts: List[Alert] = []

        with self._lock:
            for rule in self._rules:
                if not rule.enabled:
                    continue
                try:
                    fired = self.evaluator.evaluate(
                        rule, review, product, self.store.all(), now=self.clock()
                    )
                    alert = self._create_alert(rule, review, product) if fired else None
                except RuleConfigurationError as e:
                    logger.error(
                        f"Skipping misconfigured rule: {e}",
                        extra={"rule_id": rule.id, "review_id": review.id},
                    )
                    continue

                if alert is None:
                    continue
                self.store.add(alert)
                new_alerts.append(alert)
                logger.info(
                    f"Alert {alert.type.value} raised by rule '{rule.id}' "
                    f"for review {review.id} (product {product.id})",
                    extra={
                        "alert_id": alert.id,
                        "rule_id": rule.id,
                        "review_id": review.id,
                        "product_id": product.id,
                    },
                )

        for alert in new_alerts:
            self._notify_listeners(alert)

        return new_alerts

    def _create_alert(self, rule: AlertRule, review: Review, product: Product) -> Optional[Alert]:
        action = rule.create_alert_action()
        if action is None:
            logger.debug(f"Rule '{rule.id}' fired but has no create_alert action")
            return None

        try:
            alert_type = AlertType(action.alert_type)
            priority = AlertPriority(rule.priority)
        except ValueError:
            raise RuleConfigurationError(
                rule.id, f"invalid alert type {action.alert_type!r} or priority {rule.priority!r}"
            )

        if not self._config.is_type_enabled(alert_type):
            logger.info(f"Alert type '{alert_type.value}' disabled; rule '{rule.id}' ignored")
            return None

        return Alert(
            id=new_alert_id(),
            type=alert_type,
            title=alert_title(alert_type, product.name),
            description=alert_description(alert_type, review.rating),
            product_id=product.id,
            product_name=product.name,
            review_id=review.id,
            author=review.author,
            rating=review.rating,
            comment=review.comment,
            date=self.clock(),
            priority=priority,
            category=categorize_comment(review.comment),
            rule_id=rule.id,
        )

    # =========================================================================
    # Queries
    # =========================================================================

    def get_alerts(self) -> List[Alert]:
        with self._lock:
            return self.store.all()

    def get_alert(self, alert_id: str) -> Optional[Alert]:
        with self._lock:
            return self.store.get(alert_id)

    def get_filtered_alerts(
        self,
        type: Optional[Union[AlertType, str]] = None,
        status: Optional[Union[AlertStatusFilter, str]] = None,
        category: Optional[Union[AlertCategory, str]] = None,
        priority: Optional[Union[AlertPriority, str]] = None,
    ) -> List[Alert]:
        """
        Filter alerts. Omitted filters match everything.

        status: unread (not read), resolved, pending (not resolved,
        regardless of read state) or all.
        """
        alert_type = AlertType(type) if type else None
        status = AlertStatusFilter(status) if status else AlertStatusFilter.ALL
        category = AlertCategory(category) if category else None
        priority = AlertPriority(priority) if priority else None

        def matches(alert: Alert) -> bool:
            if alert_type and alert.type != alert_type:
                return False
            if status == AlertStatusFilter.UNREAD and alert.is_read:
                return False
            if status == AlertStatusFilter.RESOLVED and not alert.is_resolved:
                return False
            if status == AlertStatusFilter.PENDING and alert.is_resolved:
                return False
            if category and alert.category != category:
                return False
            if priority and alert.priority != priority:
                return False
            return True

        with self._lock:
            return [a for a in self.store.all() if matches(a)]

    def get_alert_stats(self) -> AlertStats:
        with self._lock:
            alerts = self.store.all()
        return AlertStats(
            total=len(alerts),
            unread=sum(1 for a in alerts if not a.is_read),
            critical=sum(1 for a in alerts if a.type == AlertType.CRITICAL),
            pending=sum(1 for a in alerts if not a.is_resolved),
        )

    # =========================================================================
    # Lifecycle (all idempotent, unknown ids are ignored)
    # =========================================================================

    def mark_as_read(self, alert_id: str) -> None:
        with self._lock:
            alert = self.store.get(alert_id)
            if alert is not None:
                alert.is_read = True
                self.store.update(alert)

    def mark_as_resolved(self, alert_id: str) -> None:
        with self._lock:
            alert = self.store.get(alert_id)
            if alert is not None:
                alert.is_resolved = True
                self.store.update(alert)

    def mark_all_as_read(self) -> None:
        with self._lock:
            for alert in self.store.all():
                if not alert.is_read:
                    alert.is_read = True
                    self.store.update(alert)

    def delete_alert(self, alert_id: str) -> None:
        with self._lock:
            self.store.remove_where(lambda a: a.id == alert_id)

    def auto_resolve_old_alerts(self) -> int:
        """
        Resolve unread, unresolved alerts older than auto_resolve_hours.

        Does nothing unless config.auto_resolve is set. Alerts are kept.

        Returns:
            Number of alerts resolved
        """
        with self._lock:
            if not self._config.auto_resolve:
                return 0
            cutoff = self.clock() - timedelta(hours=self._config.auto_resolve_hours)
            resolved = 0
            for alert in self.store.all():
                if not alert.is_read and not alert.is_resolved and alert.date < cutoff:
                    alert.is_resolved = True
                    self.store.update(alert)
                    resolved += 1

        if resolved:
            logger.info(f"Auto-resolved {resolved} alerts older than {cutoff.isoformat()}")
        return resolved

    def clear_old_alerts(self, days_old: Optional[int] = None) -> int:
        """
        Permanently delete alerts older than days_old (default: retention_days),
        whatever their state.

        Returns:
            Number of alerts removed
        """
        with self._lock:
            days = days_old if days_old is not None else self._config.retention_days
            cutoff = self.clock() - timedelta(days=days)
            removed = self.store.remove_where(lambda a: a.date < cutoff)

        if removed:
            logger.info(f"Cleared {removed} alerts older than {days} days")
        return removed

    # =========================================================================
    # Listeners
    # =========================================================================

    def subscribe(self, listener: AlertListener) -> Subscription:
        """Register a listener called synchronously with every new alert."""
        subscription = Subscription(self, listener)
        with self._lock:
            self._subscriptions.append(subscription)
        return subscription

    def add_listener(self, listener: AlertListener) -> Subscription:
        return self.subscribe(listener)

    def remove_listener(self, listener: AlertListener) -> None:
        """Remove every subscription registered with this listener."""
        with self._lock:
            removed = [s for s in self._subscriptions if s.listener == listener]
            self._subscriptions = [s for s in self._subscriptions if s.listener != listener]
        for subscription in removed:
            subscription.active = False

    def _drop_subscription(self, subscription: Subscription) -> None:
        with self._lock:
            self._subscriptions = [s for s in self._subscriptions if s is not subscription]

    def _notify_listeners(self, alert: Alert) -> None:
        with self._lock:
            subscriptions = list(self._subscriptions)

        for subscription in subscriptions:
            try:
                subscription.listener(alert)
            except Exception as e:
                logger.error(
                    f"Alert listener {subscription.listener!r} failed: {e}",
                    exc_info=True,
                    extra={"alert_id": alert.id},
                )
