"""
Rule Evaluator
==============

Decides whether an AlertRule fires for a review. Pure: the only state it
reads is the alert history passed in by the caller (used by the frequency
condition).

Condition semantics:
    rating     equals | less_than | greater_than  numeric compare on review.rating
    keyword    contains | not_contains            comma list, case-insensitive substring
    sentiment  equals                             rating-based sentiment label
    frequency  greater_than                       critical/urgent alerts for the
                                                  product in the trailing 24h

Usage:
    evaluator = RuleEvaluator()
    fired = evaluator.evaluate(rule, review, product, alert_history)
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Iterable, List, Optional, Sequence

from ..data.data_models import Product, Review, utc_now
from ..exceptions import RuleConfigurationError
from ..reviews.review_models import Sentiment
from ..reviews.review_signals import classify_sentiment
from .alert_models import (
    Alert,
    AlertRule,
    AlertType,
    ConditionOperator,
    ConditionType,
    RuleCondition,
)

logger = logging.getLogger(__name__)


FREQUENCY_WINDOW = timedelta(hours=24)
FREQUENCY_ALERT_TYPES = frozenset({AlertType.CRITICAL, AlertType.URGENT})

SUPPORTED_OPERATORS = {
    ConditionType.RATING: frozenset({
        ConditionOperator.EQUALS, ConditionOperator.LESS_THAN, ConditionOperator.GREATER_THAN,
    }),
    ConditionType.KEYWORD: frozenset({
        ConditionOperator.CONTAINS, ConditionOperator.NOT_CONTAINS,
    }),
    ConditionType.SENTIMENT: frozenset({ConditionOperator.EQUALS}),
    ConditionType.FREQUENCY: frozenset({ConditionOperator.GREATER_THAN}),
}


def _as_number(value) -> float:
    """Numeric view of a rating / threshold; rejects bools and text."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"not a number: {value!r}")
    return value


def _parse_keywords(value) -> List[str]:
    if isinstance(value, (list, tuple)):
        items = value
    else:
        items = str(value).split(",")
    return [k.strip().lower() for k in items if str(k).strip()]


class RuleEvaluator:
    """
    Evaluates rules with AND semantics.

    Every condition is evaluated even after one fails, so evaluation cost
    and logging do not depend on condition order.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self.clock = clock

    def validate(self, rule: AlertRule) -> None:
        """
        Check the rule's structure.

        Raises:
            RuleConfigurationError: on unknown condition types or operators
        """
        for condition in rule.conditions:
            self._resolve(rule, condition)

    def evaluate(
        self,
        rule: AlertRule,
        review: Review,
        product: Optional[Product],
        alert_history: Sequence[Alert] = (),
        now: Optional[datetime] = None,
    ) -> bool:
        """
        True iff every condition of the rule holds for the review.

        An empty condition list is vacuously true.

        Raises:
            RuleConfigurationError: if the rule is malformed. Bad review data
            never raises; the affected condition is simply false.
        """
        now = now or self.clock()
        product_id = product.id if product is not None else review.product_id

        results = [
            self._evaluate_condition(rule, condition, review, product_id, alert_history, now)
            for condition in rule.conditions
        ]
        return all(results)

    # =========================================================================
    # Conditions
    # =========================================================================

    def _resolve(self, rule: AlertRule, condition: RuleCondition):
        try:
            ctype = ConditionType(condition.type)
        except ValueError:
            raise RuleConfigurationError(rule.id, f"unknown condition type '{condition.type}'")
        try:
            operator = ConditionOperator(condition.operator)
        except ValueError:
            raise RuleConfigurationError(rule.id, f"unknown operator '{condition.operator}'")
        if operator not in SUPPORTED_OPERATORS[ctype]:
            raise RuleConfigurationError(
                rule.id,
                f"operator '{operator.value}' not supported for '{ctype.value}' conditions",
            )
        return ctype, operator

    def _evaluate_condition(
        self,
        rule: AlertRule,
        condition: RuleCondition,
        review: Review,
        product_id: str,
        alert_history: Iterable[Alert],
        now: datetime,
    ) -> bool:
        ctype, operator = self._resolve(rule, condition)

        if ctype == ConditionType.SENTIMENT:
            try:
                expected = Sentiment(str(condition.value).lower())
            except ValueError:
                raise RuleConfigurationError(rule.id, f"unknown sentiment '{condition.value}'")
        if ctype == ConditionType.FREQUENCY:
            try:
                threshold = float(condition.value)
            except (TypeError, ValueError):
                threshold = None
            if threshold is None or not threshold.is_integer():
                raise RuleConfigurationError(
                    rule.id, f"frequency threshold must be an integer, got {condition.value!r}"
                )
            threshold = int(threshold)

        try:
            if ctype == ConditionType.RATING:
                return self._compare_rating(operator, review.rating, condition.value)
            if ctype == ConditionType.KEYWORD:
                return self._match_keywords(operator, review.comment, condition.value)
            if ctype == ConditionType.SENTIMENT:
                return classify_sentiment(review) == expected
            return self.count_recent_alerts(alert_history, product_id, now) > threshold
        except (TypeError, ValueError, AttributeError) as e:
            logger.warning(
                f"Rule '{rule.id}': {ctype.value} condition treated as non-matching "
                f"for review {review.id}: {e}",
                extra={"rule_id": rule.id, "review_id": review.id},
            )
            return False

    @staticmethod
    def _compare_rating(operator: ConditionOperator, rating, value) -> bool:
        rating = _as_number(rating)
        target = float(value)
        if operator == ConditionOperator.EQUALS:
            return rating == target
        if operator == ConditionOperator.LESS_THAN:
            return rating < target
        return rating > target

    @staticmethod
    def _match_keywords(operator: ConditionOperator, comment: str, value) -> bool:
        keywords = _parse_keywords(value)
        text = comment.lower()
        found = any(keyword in text for keyword in keywords)
        if operator == ConditionOperator.CONTAINS:
            return found
        return not found

    @staticmethod
    def count_recent_alerts(
        alert_history: Iterable[Alert],
        product_id: str,
        now: datetime,
        window: timedelta = FREQUENCY_WINDOW,
    ) -> int:
        """Critical/urgent alerts for the product created since now - window."""
        since = now - window
        return sum(
            1 for alert in alert_history
            if alert.product_id == product_id
            and alert.type in FREQUENCY_ALERT_TYPES
            and alert.date >= since
        )
