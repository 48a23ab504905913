"""
Trend Aggregator
================

Time-bucketed sentiment / rating series and period-over-period comparisons.

Bucketing:
    The lookback window of a period keyword (7d, 30d, 90d, 1y) ending at
    `now` is split into a fixed number of equal-width buckets, oldest
    first. Buckets are half-open [start, end) except the newest, which also
    includes `now`, so every review in the window lands in exactly one
    bucket. Empty buckets are kept: a period always yields the same number
    of buckets.

Usage:
    buckets = bucketize(reviews, "30d", now=now)
    comparisons = compute_comparisons(reviews, now=now)
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence

from ..data.data_models import utc_now
from ..reviews.review_models import Sentiment
from ..reviews.review_signals import classify_sentiment
from .analytics_models import ComparisonData, TrendBucket, TrendChange, TrendDirection
from .metrics import average_rating, satisfaction_rate

logger = logging.getLogger(__name__)


PERIOD_DAYS: Dict[str, int] = {
    "7d": 7,
    "30d": 30,
    "90d": 90,
    "1y": 365,
}

DEFAULT_BUCKET_COUNT = 6

COMPARISON_WINDOW_DAYS = 30


def period_days(period: str) -> int:
    """Lookback length in days for a period keyword."""
    try:
        return PERIOD_DAYS[period]
    except KeyError:
        raise ValueError(f"Unknown period '{period}', expected one of {sorted(PERIOD_DAYS)}")


def bucket_label(start: datetime) -> str:
    return start.strftime("%d/%m")


def _build_bucket(reviews: Sequence, start: datetime, end: datetime) -> TrendBucket:
    counts = {s: 0 for s in Sentiment}
    for review in reviews:
        counts[classify_sentiment(review)] += 1
    return TrendBucket(
        period=bucket_label(start),
        start=start,
        end=end,
        positive=counts[Sentiment.POSITIVE],
        neutral=counts[Sentiment.NEUTRAL],
        negative=counts[Sentiment.NEGATIVE],
        total=len(reviews),
        average_rating=average_rating(reviews),
    )


def bucket_range(
    reviews: Sequence,
    start: datetime,
    end: datetime,
    bucket_count: int = DEFAULT_BUCKET_COUNT,
) -> List[TrendBucket]:
    """Split [start, end] into bucket_count equal buckets, oldest first."""
    if bucket_count <= 0:
        raise ValueError("bucket_count must be positive")

    width = (end - start) / bucket_count
    buckets = []
    for i in range(bucket_count):
        b_start = start + width * i
        is_last = i == bucket_count - 1
        b_end = end if is_last else start + width * (i + 1)
        members = [
            r for r in reviews
            if b_start <= r.date < b_end or (is_last and r.date == b_end)
        ]
        buckets.append(_build_bucket(members, b_start, b_end))
    return buckets


def bucketize(
    reviews: Sequence,
    period: str,
    now: Optional[datetime] = None,
    bucket_count: int = DEFAULT_BUCKET_COUNT,
) -> List[TrendBucket]:
    """
    Trend buckets over the lookback window of a period keyword.

    Returns:
        Exactly bucket_count TrendBucket, chronological
    """
    now = now or utc_now()
    window_start = now - timedelta(days=period_days(period))
    return bucket_range(reviews, window_start, now, bucket_count)


def span_buckets(reviews: Sequence, bucket_count: int = DEFAULT_BUCKET_COUNT) -> List[TrendBucket]:
    """
    Trend buckets spanning the oldest to the newest review.

    Used where no lookback period applies (custom reports, per-product
    trends). Empty input yields no buckets.
    """
    if not reviews:
        return []
    start = min(r.date for r in reviews)
    end = max(r.date for r in reviews)
    return bucket_range(reviews, start, end, bucket_count)


def compute_trend_changes(buckets: Sequence[TrendBucket]) -> List[TrendChange]:
    """Bucket-over-bucket deltas. The first bucket has no predecessor and gets zeros."""
    changes = []
    previous = None
    for bucket in buckets:
        if previous is None:
            changes.append(TrendChange(period=bucket.period, reviews=0, rating=0.0, sentiment=0.0))
        else:
            changes.append(TrendChange(
                period=bucket.period,
                reviews=bucket.total - previous.total,
                rating=bucket.average_rating - previous.average_rating,
                sentiment=bucket.positive_percentage - previous.positive_percentage,
            ))
        previous = bucket
    return changes


def compare_metric(metric: str, current: float, previous: float) -> ComparisonData:
    """
    change = current - previous; change_percentage relative to previous,
    0 when previous is 0.
    """
    change = current - previous
    change_percentage = change / previous * 100 if previous else 0.0
    if change > 0:
        trend = TrendDirection.UP
    elif change < 0:
        trend = TrendDirection.DOWN
    else:
        trend = TrendDirection.STABLE
    return ComparisonData(
        metric=metric,
        current=current,
        previous=previous,
        change=change,
        change_percentage=change_percentage,
        trend=trend,
    )


def compute_comparisons(reviews: Sequence, now: Optional[datetime] = None) -> List[ComparisonData]:
    """
    Compare the trailing 30 days against the 30 days before.

    Metrics: total_reviews, average_rating, satisfaction_rate.
    """
    now = now or utc_now()
    window = timedelta(days=COMPARISON_WINDOW_DAYS)

    current = [r for r in reviews if now - r.date <= window]
    previous = [r for r in reviews if window < now - r.date <= window * 2]

    logger.debug(f"Comparison windows: current={len(current)} previous={len(previous)}")

    return [
        compare_metric("total_reviews", len(current), len(previous)),
        compare_metric("average_rating", average_rating(current), average_rating(previous)),
        compare_metric("satisfaction_rate", satisfaction_rate(current), satisfaction_rate(previous)),
    ]
