"""
Analytics Engine
================

Computes an AnalyticsSnapshot for a slice of reviews: headline metrics,
sentiment and rating distributions, top keywords, trend buckets and
synthesized insights.

The engine is stateless apart from its injected clock and settings; every
call works on the list it is given.

Usage:
    engine = AnalyticsEngine()
    snapshot = engine.snapshot(reviews, products, period="30d")
    for insight in snapshot.insights:
        print(insight.title)
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Sequence

from ..data.config import AnalyticsSettings
from ..data.data_models import utc_now
from ..reviews.review_signals import aggregate_keywords
from .analytics_models import AnalyticsSnapshot, SummaryMetrics, TrendBucket
from .insight_synthesizer import InsightSynthesizer
from .metrics import (
    average_rating,
    percentage,
    rating_distribution,
    response_rate,
    satisfaction_rate,
    sentiment_distribution,
)
from .trend_aggregator import COMPARISON_WINDOW_DAYS, PERIOD_DAYS, bucketize, span_buckets

logger = logging.getLogger(__name__)


CUSTOM_PERIOD = "custom"


def filter_by_period(reviews: Sequence, period: Optional[str], now: datetime) -> List:
    """
    Reviews inside the lookback window of a period keyword.

    None or "custom" keeps every review.
    """
    if period is None or period == CUSTOM_PERIOD:
        return list(reviews)
    if period not in PERIOD_DAYS:
        raise ValueError(f"Unknown period '{period}'")
    since = now - timedelta(days=PERIOD_DAYS[period])
    return [r for r in reviews if since <= r.date <= now]


def growth_rate(reviews: Sequence, now: datetime) -> float:
    """Percent of the slice written in the trailing 30 days."""
    since = now - timedelta(days=COMPARISON_WINDOW_DAYS)
    recent = sum(1 for r in reviews if r.date >= since)
    return percentage(recent, len(reviews))


class AnalyticsEngine:
    """Aggregates review slices into analytics snapshots."""

    def __init__(
        self,
        clock: Callable[[], datetime] = utc_now,
        settings: Optional[AnalyticsSettings] = None,
        synthesizer: Optional[InsightSynthesizer] = None,
    ):
        self.clock = clock
        self.settings = settings or AnalyticsSettings()
        self.synthesizer = synthesizer or InsightSynthesizer()

    def summarize(self, reviews: Sequence, total_products: int = 0,
                  now: Optional[datetime] = None) -> SummaryMetrics:
        now = now or self.clock()
        return SummaryMetrics(
            total_reviews=len(reviews),
            average_rating=average_rating(reviews),
            response_rate=response_rate(reviews),
            satisfaction_score=satisfaction_rate(reviews),
            total_products=total_products,
            growth_rate=growth_rate(reviews, now),
        )

    def trends(self, reviews: Sequence, period: Optional[str],
               now: Optional[datetime] = None) -> List[TrendBucket]:
        """Lookback buckets for a period keyword, span buckets otherwise."""
        if period is None or period == CUSTOM_PERIOD:
            return span_buckets(reviews, self.settings.trend_buckets)
        return bucketize(reviews, period, now=now or self.clock(),
                         bucket_count=self.settings.trend_buckets)

    def snapshot(
        self,
        reviews: Sequence,
        products: Sequence = (),
        period: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AnalyticsSnapshot:
        """
        Compute the full analytics snapshot for a slice of reviews.

        Args:
            reviews: Reviews to aggregate (already filtered by the caller
                when period is None)
            products: Products the slice belongs to, used for counts only
            period: 7d | 30d | 90d | 1y | custom | None
            now: Reference time, defaults to the engine clock

        Returns:
            AnalyticsSnapshot
        """
        now = now or self.clock()
        sliced = filter_by_period(reviews, period, now)

        summary = self.summarize(sliced, total_products=len(products), now=now)
        sentiments = sentiment_distribution(sliced)
        ratings = rating_distribution(sliced)
        keywords = aggregate_keywords(
            sliced,
            min_mentions=self.settings.keyword_min_mentions,
            top_n=self.settings.keyword_top_n,
        )
        trends = self.trends(sliced, period, now=now)
        insights = self.synthesizer.synthesize(
            summary, sentiments, keywords, trends, rating_distribution=ratings
        )

        logger.info(
            f"Analytics snapshot: {summary.total_reviews} reviews, "
            f"{len(keywords)} keywords, {len(insights)} insights (period={period})"
        )

        return AnalyticsSnapshot(
            metrics=summary,
            sentiment_distribution=sentiments,
            rating_distribution=ratings,
            keywords=keywords,
            trends=trends,
            insights=insights,
        )
