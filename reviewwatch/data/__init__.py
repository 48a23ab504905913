"""
ReviewWatch Data Module
=======================

Input records, repositories and configuration.
"""

from .data_models import Review, Product, utc_now, ensure_utc, parse_datetime
from .repository import ReviewRepository, InMemoryReviewRepository
from .config import Settings, get_settings

__all__ = [
    "Review",
    "Product",
    "utc_now",
    "ensure_utc",
    "parse_datetime",
    "ReviewRepository",
    "InMemoryReviewRepository",
    "Settings",
    "get_settings",
]
