"""
Tests for the ReviewWatch rule evaluator.

Tests condition semantics in isolation (no AlertManager):
- rating / keyword / sentiment / frequency conditions
- AND combination, empty condition list
- configuration errors vs data errors

Usage:
    pytest tests/test_rule_evaluator.py -v
"""

from datetime import datetime, timedelta, timezone

import pytest

from reviewwatch.alerts.alert_models import (
    Alert,
    AlertCategory,
    AlertPriority,
    AlertRule,
    AlertType,
    RuleAction,
    RuleCondition,
)
from reviewwatch.alerts.rule_evaluator import RuleEvaluator
from reviewwatch.data.data_models import Product, Review
from reviewwatch.exceptions import RuleConfigurationError


NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)
PRODUCT = Product(id="P1", name="Fone Bluetooth")


# ============================================================================
# HELPERS
# ============================================================================

def make_review(rating=5, comment: str = "", product_id: str = "P1", review_id: str = "R1") -> Review:
    return Review(
        id=review_id,
        product_id=product_id,
        rating=rating,
        comment=comment,
        author="Ana",
        date=NOW,
    )


def make_rule(*conditions, rule_id: str = "rule-1") -> AlertRule:
    return AlertRule(
        id=rule_id,
        name="Teste",
        conditions=[RuleCondition(*c) for c in conditions],
        actions=[RuleAction("create_alert", {"alert_type": "critical"})],
    )


def make_alert(alert_type=AlertType.CRITICAL, product_id: str = "P1", age: timedelta = timedelta(0)) -> Alert:
    return Alert(
        id=f"A-{alert_type.value}-{age.total_seconds()}",
        type=alert_type,
        title="t",
        description="d",
        product_id=product_id,
        product_name="x",
        review_id="R0",
        author="a",
        rating=1,
        comment="",
        date=NOW - age,
        priority=AlertPriority.HIGH,
        category=AlertCategory.OTHER,
    )


# ============================================================================
# CONDITIONS
# ============================================================================

class TestRatingCondition:

    def setup_method(self):
        self.evaluator = RuleEvaluator(clock=lambda: NOW)

    @pytest.mark.parametrize("operator,value,rating,expected", [
        ("less_than", 3, 2, True),
        ("less_than", 3, 3, False),
        ("greater_than", 3, 4, True),
        ("greater_than", 3, 3, False),
        ("equals", 5, 5, True),
        ("equals", 5, 4, False),
        ("less_than", "3", 1, True),
    ])
    def test_comparisons(self, operator, value, rating, expected):
        rule = make_rule(("rating", operator, value))
        assert self.evaluator.evaluate(rule, make_review(rating=rating), PRODUCT) is expected

    def test_non_numeric_rating_is_non_matching(self):
        """Bad review data makes the condition false instead of raising."""
        rule = make_rule(("rating", "less_than", 3))
        assert self.evaluator.evaluate(rule, make_review(rating="ruim"), PRODUCT) is False
        assert self.evaluator.evaluate(rule, make_review(rating=None), PRODUCT) is False

    def test_unparseable_value_is_non_matching(self):
        rule = make_rule(("rating", "less_than", "três"))
        assert self.evaluator.evaluate(rule, make_review(rating=1), PRODUCT) is False


class TestKeywordCondition:

    def setup_method(self):
        self.evaluator = RuleEvaluator(clock=lambda: NOW)

    def test_contains_any(self):
        rule = make_rule(("keyword", "contains", "defeito, quebrado"))
        review = make_review(comment="Chegou QUEBRADO")
        assert self.evaluator.evaluate(rule, review, PRODUCT)

    def test_contains_none(self):
        rule = make_rule(("keyword", "contains", "defeito,quebrado"))
        assert not self.evaluator.evaluate(rule, make_review(comment="Tudo ótimo"), PRODUCT)

    def test_not_contains(self):
        rule = make_rule(("keyword", "not_contains", "defeito,quebrado"))
        assert self.evaluator.evaluate(rule, make_review(comment="Tudo ótimo"), PRODUCT)
        assert not self.evaluator.evaluate(rule, make_review(comment="Com defeito"), PRODUCT)


class TestSentimentCondition:

    def setup_method(self):
        self.evaluator = RuleEvaluator(clock=lambda: NOW)

    def test_uses_rating_sentiment(self):
        rule = make_rule(("sentiment", "equals", "negative"))
        assert self.evaluator.evaluate(rule, make_review(rating=1, comment="excelente"), PRODUCT)
        assert not self.evaluator.evaluate(rule, make_review(rating=5, comment="péssimo"), PRODUCT)

    def test_unknown_sentiment_is_configuration_error(self):
        rule = make_rule(("sentiment", "equals", "furious"))
        with pytest.raises(RuleConfigurationError):
            self.evaluator.evaluate(rule, make_review(), PRODUCT)


class TestFrequencyCondition:

    def setup_method(self):
        self.evaluator = RuleEvaluator(clock=lambda: NOW)
        self.rule = make_rule(("frequency", "greater_than", 2))

    def test_counts_recent_critical_and_urgent_for_product(self):
        history = [
            make_alert(AlertType.CRITICAL),
            make_alert(AlertType.URGENT, age=timedelta(hours=1)),
            make_alert(AlertType.CRITICAL, age=timedelta(hours=23)),
        ]
        assert self.evaluator.evaluate(self.rule, make_review(), PRODUCT, history, now=NOW)

    def test_threshold_is_strict(self):
        history = [make_alert(AlertType.CRITICAL), make_alert(AlertType.URGENT, age=timedelta(hours=1))]
        assert not self.evaluator.evaluate(self.rule, make_review(), PRODUCT, history, now=NOW)

    def test_ignores_other_types_products_and_old_alerts(self):
        history = [
            make_alert(AlertType.WARNING),
            make_alert(AlertType.NEGATIVE),
            make_alert(AlertType.CRITICAL, product_id="P2"),
            make_alert(AlertType.CRITICAL, age=timedelta(hours=25)),
            make_alert(AlertType.CRITICAL),
        ]
        assert RuleEvaluator.count_recent_alerts(history, "P1", NOW) == 1
        assert not self.evaluator.evaluate(self.rule, make_review(), PRODUCT, history, now=NOW)

    def test_non_integer_threshold_is_configuration_error(self):
        rule = make_rule(("frequency", "greater_than", "muitos"))
        with pytest.raises(RuleConfigurationError):
            self.evaluator.evaluate(rule, make_review(), PRODUCT)

    def test_fractional_threshold_is_configuration_error(self):
        rule = make_rule(("frequency", "greater_than", 5.5))
        with pytest.raises(RuleConfigurationError):
            self.evaluator.evaluate(rule, make_review(), PRODUCT)

    @pytest.mark.parametrize("value", ["2", 2.0])
    def test_integral_threshold_forms(self, value):
        rule = make_rule(("frequency", "greater_than", value))
        history = [make_alert(AlertType.CRITICAL) for _ in range(3)]
        assert self.evaluator.evaluate(rule, make_review(), PRODUCT, history, now=NOW)


# ============================================================================
# COMBINATION & CONFIGURATION
# ============================================================================

class TestRuleCombination:

    def setup_method(self):
        self.evaluator = RuleEvaluator(clock=lambda: NOW)

    def test_and_semantics(self):
        rule = make_rule(("rating", "less_than", 3), ("keyword", "contains", "entrega"))
        assert self.evaluator.evaluate(rule, make_review(rating=1, comment="entrega atrasada"), PRODUCT)
        assert not self.evaluator.evaluate(rule, make_review(rating=1, comment="produto feio"), PRODUCT)
        assert not self.evaluator.evaluate(rule, make_review(rating=5, comment="entrega ok"), PRODUCT)

    def test_empty_conditions_fire(self):
        rule = make_rule()
        assert self.evaluator.evaluate(rule, make_review(), PRODUCT)

    def test_product_defaults_to_review_product(self):
        rule = make_rule(("frequency", "greater_than", 0))
        history = [make_alert(AlertType.CRITICAL, product_id="P9")]
        assert self.evaluator.evaluate(rule, make_review(product_id="P9"), None, history, now=NOW)


class TestConfigurationErrors:

    def setup_method(self):
        self.evaluator = RuleEvaluator(clock=lambda: NOW)

    def test_unknown_condition_type(self):
        rule = make_rule(("weather", "equals", "rain"))
        with pytest.raises(RuleConfigurationError) as excinfo:
            self.evaluator.evaluate(rule, make_review(), PRODUCT)
        assert excinfo.value.rule_id == "rule-1"

    def test_unknown_operator(self):
        with pytest.raises(RuleConfigurationError):
            self.evaluator.validate(make_rule(("rating", "between", 3)))

    @pytest.mark.parametrize("condition", [
        ("rating", "contains", "3"),
        ("keyword", "equals", "defeito"),
        ("sentiment", "less_than", "negative"),
        ("frequency", "equals", 5),
    ])
    def test_unsupported_operator_for_type(self, condition):
        with pytest.raises(RuleConfigurationError):
            self.evaluator.validate(make_rule(condition))

    def test_configuration_error_raised_even_after_failing_condition(self):
        """No short-circuit: a bad later condition still surfaces."""
        rule = make_rule(("rating", "less_than", 0), ("weather", "equals", "rain"))
        with pytest.raises(RuleConfigurationError):
            self.evaluator.evaluate(rule, make_review(), PRODUCT)
