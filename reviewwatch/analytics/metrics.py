"""Review slice metrics. Every ratio is guarded to return 0 on empty input."""

import logging
from typing import Dict, Sequence

from ..reviews.review_models import Sentiment
from ..reviews.review_signals import classify_sentiment
from .analytics_models import SentimentDistribution

logger = logging.getLogger(__name__)

SATISFIED_RATING = 4


def percentage(part: float, total: float) -> float:
    return part / total * 100 if total else 0.0


def average_rating(reviews: Sequence) -> float:
    if not reviews:
        return 0.0
    return sum(r.rating for r in reviews) / len(reviews)


def satisfaction_rate(reviews: Sequence) -> float:
    """Percent of reviews rated 4 stars or more."""
    satisfied = sum(1 for r in reviews if r.rating >= SATISFIED_RATING)
    return percentage(satisfied, len(reviews))


def response_rate(reviews: Sequence) -> float:
    """Percent of reviews the seller has answered."""
    answered = sum(1 for r in reviews if r.has_response)
    return percentage(answered, len(reviews))


def sentiment_distribution(reviews: Sequence) -> SentimentDistribution:
    counts = {s: 0 for s in Sentiment}
    for review in reviews:
        counts[classify_sentiment(review)] += 1
    return SentimentDistribution(
        positive=counts[Sentiment.POSITIVE],
        neutral=counts[Sentiment.NEUTRAL],
        negative=counts[Sentiment.NEGATIVE],
    )


def rating_distribution(reviews: Sequence) -> Dict[int, int]:
    """Counts per star (1-5). Ratings outside 1-5 are not counted."""
    distribution = {star: 0 for star in range(1, 6)}
    for review in reviews:
        if review.rating in distribution:
            distribution[int(review.rating)] += 1
        else:
            logger.debug(f"Rating {review.rating!r} of review {review.id} outside 1-5")
    return distribution
