"""
ReviewWatch Review Primitives
=============================

Deterministic sentiment and keyword signals shared by the alert engine
and the analytics / report engine. No ML required.

Modules:
    review_models   - Sentiment, ReviewCategory, KeywordStat
    review_signals  - Classifiers, tokenizer, keyword aggregation, categorizer
"""

from .review_models import Sentiment, ReviewCategory, KeywordStat
from .review_signals import (
    classify_sentiment,
    classify_text_sentiment,
    tokenize,
    extract_keywords,
    aggregate_keywords,
    majority_sentiment,
    categorize_comment,
    contains_urgent_keywords,
    PORTUGUESE_STOPWORDS,
)
