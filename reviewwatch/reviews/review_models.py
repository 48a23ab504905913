"""
Review Intelligence Data Models
===============================

Structured outputs of the deterministic review primitives shared by the
alert engine and the report engine.
"""

from dataclasses import dataclass
from enum import Enum


class Sentiment(str, Enum):
    """Sentiment label for a review."""
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class ReviewCategory(str, Enum):
    """Topic of a complaint, derived from comment keywords."""
    QUALITY = "quality"
    DELIVERY = "delivery"
    SERVICE = "service"
    PRICE = "price"
    OTHER = "other"


@dataclass(frozen=True)
class KeywordStat:
    """A keyword aggregated across a review collection."""
    keyword: str
    mentions: int
    sentiment: Sentiment

    def to_dict(self) -> dict:
        return {
            "keyword": self.keyword,
            "mentions": self.mentions,
            "sentiment": self.sentiment.value,
        }
