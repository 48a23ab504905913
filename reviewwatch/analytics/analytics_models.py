"""
Analytics Data Models
=====================

Aggregates produced fresh on every analytics call. None of them is
persisted or mutated after creation.

Models:
    - SentimentDistribution: positive / neutral / negative counts
    - SummaryMetrics: headline numbers for a review slice
    - TrendBucket: one fixed-width time slice of a trend series
    - TrendChange: bucket-over-bucket deltas
    - ComparisonData: current vs previous 30-day window for one metric
    - Insight: typed, human-readable observation with impact/confidence
    - AnalyticsSnapshot: everything above for one review slice
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Tuple

from ..reviews.review_models import KeywordStat, Sentiment


class InsightType(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    OPPORTUNITY = "opportunity"
    WARNING = "warning"
    TREND = "trend"


class Impact(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class TrendDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


@dataclass(frozen=True)
class SentimentDistribution:
    positive: int = 0
    neutral: int = 0
    negative: int = 0

    @property
    def total(self) -> int:
        return self.positive + self.neutral + self.negative

    def percentage(self, sentiment: Sentiment) -> float:
        """Share of the given sentiment in percent (0.0 when empty)."""
        if self.total == 0:
            return 0.0
        count = {
            Sentiment.POSITIVE: self.positive,
            Sentiment.NEUTRAL: self.neutral,
            Sentiment.NEGATIVE: self.negative,
        }[Sentiment(sentiment)]
        return count / self.total * 100

    def to_dict(self) -> Dict[str, int]:
        return {"positive": self.positive, "neutral": self.neutral, "negative": self.negative}


@dataclass(frozen=True)
class SummaryMetrics:
    """Headline metrics. Percentages are 0-100."""
    total_reviews: int
    average_rating: float
    response_rate: float
    satisfaction_score: float
    total_products: int = 0
    growth_rate: float = 0.0


@dataclass(frozen=True)
class TrendBucket:
    """
    Review counts for one time slice.

    average_rating is 0.0 for an empty bucket.
    """
    period: str
    start: datetime
    end: datetime
    positive: int = 0
    neutral: int = 0
    negative: int = 0
    total: int = 0
    average_rating: float = 0.0

    @property
    def positive_percentage(self) -> float:
        return self.positive / self.total * 100 if self.total else 0.0

    @property
    def negative_percentage(self) -> float:
        return self.negative / self.total * 100 if self.total else 0.0


@dataclass(frozen=True)
class TrendChange:
    """Change of a bucket relative to the bucket before it."""
    period: str
    reviews: int
    rating: float
    sentiment: float    # delta of positive percentage, in points


@dataclass(frozen=True)
class ComparisonData:
    metric: str
    current: float
    previous: float
    change: float
    change_percentage: float
    trend: TrendDirection


@dataclass(frozen=True)
class Insight:
    """A synthesized observation. Immutable once produced."""
    id: str
    type: InsightType
    title: str
    description: str
    impact: Impact
    confidence: float
    recommendations: Tuple[str, ...] = ()
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AnalyticsSnapshot:
    """Analytics for one review slice."""
    metrics: SummaryMetrics
    sentiment_distribution: SentimentDistribution
    rating_distribution: Dict[int, int]
    keywords: List[KeywordStat]
    trends: List[TrendBucket]
    insights: List[Insight]
