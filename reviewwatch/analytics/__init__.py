"""
ReviewWatch Analytics
=====================

Distributions, metrics, time-bucketed trends, period comparisons and
rule-based insights over review collections.
"""

from .analytics_engine import AnalyticsEngine, filter_by_period, growth_rate
from .analytics_models import (
    AnalyticsSnapshot,
    ComparisonData,
    Impact,
    Insight,
    InsightType,
    SentimentDistribution,
    SummaryMetrics,
    TrendBucket,
    TrendChange,
    TrendDirection,
)
from .insight_synthesizer import InsightSynthesizer
from .metrics import (
    average_rating,
    rating_distribution,
    response_rate,
    satisfaction_rate,
    sentiment_distribution,
)
from .trend_aggregator import (
    PERIOD_DAYS,
    bucketize,
    compare_metric,
    compute_comparisons,
    compute_trend_changes,
    span_buckets,
)

__all__ = [
    "AnalyticsEngine",
    "AnalyticsSnapshot",
    "ComparisonData",
    "Impact",
    "Insight",
    "InsightSynthesizer",
    "InsightType",
    "PERIOD_DAYS",
    "SentimentDistribution",
    "SummaryMetrics",
    "TrendBucket",
    "TrendChange",
    "TrendDirection",
    "average_rating",
    "bucketize",
    "compare_metric",
    "compute_comparisons",
    "compute_trend_changes",
    "filter_by_period",
    "growth_rate",
    "rating_distribution",
    "response_rate",
    "satisfaction_rate",
    "sentiment_distribution",
    "span_buckets",
]
