"""
Tests for trend bucketing and period comparisons.

Usage:
    pytest tests/test_trend_aggregator.py -v
"""

from datetime import datetime, timedelta, timezone

import pytest

from reviewwatch.analytics.analytics_models import TrendDirection
from reviewwatch.analytics.trend_aggregator import (
    bucketize,
    compare_metric,
    compute_comparisons,
    compute_trend_changes,
    period_days,
    span_buckets,
)
from reviewwatch.data.data_models import Review


NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


def make_review(days_ago: float, rating: int = 5, review_id: str = None) -> Review:
    return Review(
        id=review_id or f"R-{days_ago}-{rating}",
        product_id="P1",
        rating=rating,
        comment="",
        author="Carla",
        date=NOW - timedelta(days=days_ago),
    )


class TestBucketize:

    @pytest.mark.parametrize("period", ["7d", "30d", "90d", "1y"])
    def test_fixed_bucket_count_without_reviews(self, period):
        buckets = bucketize([], period, now=NOW)
        assert len(buckets) == 6
        assert all(b.total == 0 and b.average_rating == 0.0 for b in buckets)

    def test_buckets_cover_window_in_order(self):
        buckets = bucketize([], "30d", now=NOW)
        assert buckets[0].start == NOW - timedelta(days=30)
        assert buckets[-1].end == NOW
        for earlier, later in zip(buckets, buckets[1:]):
            assert earlier.end == later.start

    def test_every_review_in_window_lands_in_one_bucket(self):
        reviews = [make_review(d) for d in (0, 1.5, 2, 3.49, 5, 6.99, 7)]
        reviews.append(make_review(8))  # outside
        buckets = bucketize(reviews, "7d", now=NOW)
        assert sum(b.total for b in buckets) == 7

    def test_boundary_review_goes_to_later_bucket(self):
        """Buckets are [start, end); the boundary belongs to the next bucket."""
        buckets = bucketize([], "7d", now=NOW)
        boundary = buckets[1].start
        review = Review(id="B", product_id="P1", rating=5, comment="", author="x", date=boundary)
        buckets = bucketize([review], "7d", now=NOW)
        assert [b.total for b in buckets] == [0, 1, 0, 0, 0, 0]

    def test_now_belongs_to_last_bucket(self):
        buckets = bucketize([make_review(0)], "7d", now=NOW)
        assert buckets[-1].total == 1

    def test_bucket_contents(self):
        reviews = [make_review(0.1, 5), make_review(0.2, 3), make_review(0.3, 1)]
        last = bucketize(reviews, "7d", now=NOW)[-1]
        assert (last.positive, last.neutral, last.negative) == (1, 1, 1)
        assert last.average_rating == pytest.approx(3.0)
        assert last.positive_percentage == pytest.approx(100 / 3)

    def test_custom_bucket_count(self):
        assert len(bucketize([], "90d", now=NOW, bucket_count=3)) == 3

    def test_unknown_period(self):
        with pytest.raises(ValueError):
            bucketize([], "2w", now=NOW)
        with pytest.raises(ValueError):
            period_days("custom")


class TestSpanBuckets:

    def test_empty(self):
        assert span_buckets([]) == []

    def test_spans_oldest_to_newest(self):
        reviews = [make_review(60), make_review(30), make_review(0)]
        buckets = span_buckets(reviews)
        assert len(buckets) == 6
        assert buckets[0].start == NOW - timedelta(days=60)
        assert buckets[-1].end == NOW
        assert sum(b.total for b in buckets) == 3

    def test_single_review(self):
        buckets = span_buckets([make_review(3)])
        assert sum(b.total for b in buckets) == 1


class TestTrendChanges:

    def test_first_bucket_is_zero(self):
        reviews = [make_review(6.5, 2), make_review(0.5, 4), make_review(0.4, 4)]
        buckets = bucketize(reviews, "7d", now=NOW)
        changes = compute_trend_changes(buckets)

        assert len(changes) == len(buckets)
        assert (changes[0].reviews, changes[0].rating, changes[0].sentiment) == (0, 0.0, 0.0)
        assert changes[-1].reviews == 2
        assert changes[-1].rating == pytest.approx(4.0)
        assert changes[-1].sentiment == pytest.approx(100.0)


class TestComparisons:

    def test_compare_metric(self):
        result = compare_metric("total_reviews", 15, 10)
        assert result.change == 5
        assert result.change_percentage == pytest.approx(50.0)
        assert result.trend == TrendDirection.UP

    def test_zero_previous(self):
        result = compare_metric("total_reviews", 3, 0)
        assert result.change_percentage == 0.0
        assert result.trend == TrendDirection.UP

    def test_stable_and_down(self):
        assert compare_metric("x", 2, 2).trend == TrendDirection.STABLE
        assert compare_metric("x", 1, 2).trend == TrendDirection.DOWN

    def test_windows(self):
        reviews = [
            make_review(1, 5), make_review(10, 4), make_review(29, 2),   # current
            make_review(31, 1), make_review(59, 5),                       # previous
            make_review(61, 1),                                           # neither
        ]
        by_metric = {c.metric: c for c in compute_comparisons(reviews, now=NOW)}

        assert by_metric["total_reviews"].current == 3
        assert by_metric["total_reviews"].previous == 2
        assert by_metric["average_rating"].current == pytest.approx(11 / 3)
        assert by_metric["average_rating"].previous == pytest.approx(3.0)
        assert by_metric["satisfaction_rate"].current == pytest.approx(200 / 3)
        assert by_metric["satisfaction_rate"].previous == pytest.approx(50.0)
