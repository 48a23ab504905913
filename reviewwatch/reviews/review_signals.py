"""
Review Signal Primitives (Deterministic)
========================================

Sentiment classification, keyword extraction and complaint categorization
using rating thresholds and Portuguese keyword lexicons. No ML required:
fast, explainable, reproducible.

Two sentiment classifiers live here and must not be swapped:
    classify_sentiment       rating based, used by alerts and reports
    classify_text_sentiment  word-list based, used for marketplace text

Usage:
    sentiment = classify_sentiment(review)
    tokens = extract_keywords(review.comment)
    keywords = aggregate_keywords(reviews, min_mentions=3)
"""

import re
import logging
from collections import Counter, defaultdict
from typing import Dict, Iterable, List, Optional, Tuple

from .review_models import KeywordStat, ReviewCategory, Sentiment

logger = logging.getLogger(__name__)


# =============================================================================
# SENTIMENT - rating thresholds
# =============================================================================

POSITIVE_RATING_THRESHOLD = 4
NEGATIVE_RATING_THRESHOLD = 2


def classify_sentiment(review) -> Sentiment:
    """
    Map a review to a sentiment from its star rating.

    rating >= 4 is positive, rating <= 2 is negative, anything else neutral.
    The comment text is deliberately ignored.
    """
    rating = review.rating
    if rating >= POSITIVE_RATING_THRESHOLD:
        return Sentiment.POSITIVE
    if rating <= NEGATIVE_RATING_THRESHOLD:
        return Sentiment.NEGATIVE
    return Sentiment.NEUTRAL


# =============================================================================
# SENTIMENT - marketplace text word lists
# =============================================================================

POSITIVE_WORDS = (
    "bom", "ótimo", "excelente", "perfeito", "recomendo", "gostei", "satisfeito",
)

NEGATIVE_WORDS = (
    "ruim", "péssimo", "horrível", "decepcionado", "não recomendo", "problema", "defeito",
)


def classify_text_sentiment(text: str) -> Sentiment:
    """
    Classify free text by counting positive vs negative word-list hits.

    Substring match on the lowercased text. Ties (including no hits at all)
    are neutral.
    """
    lowered = (text or "").lower()
    positive_hits = sum(1 for word in POSITIVE_WORDS if word in lowered)
    negative_hits = sum(1 for word in NEGATIVE_WORDS if word in lowered)

    if positive_hits > negative_hits:
        return Sentiment.POSITIVE
    if negative_hits > positive_hits:
        return Sentiment.NEGATIVE
    return Sentiment.NEUTRAL


# =============================================================================
# KEYWORD EXTRACTION
# =============================================================================

# Portuguese function words plus the generic opinion words that appear in
# almost every review and carry no topic.
PORTUGUESE_STOPWORDS = frozenset({
    "o", "a", "os", "as", "um", "uma", "e", "é", "de", "do", "da", "dos", "das",
    "em", "no", "na", "nos", "nas", "com", "para", "pra", "por", "que", "não",
    "se", "mais", "menos", "muito", "muita", "bem", "mal", "sim", "já", "ainda",
    "sempre", "nunca", "também", "só", "apenas", "pouco", "grande", "pequeno",
    "bom", "ruim", "ótimo", "péssimo", "este", "esta", "isso", "isto", "esse",
    "essa", "mas", "como", "foi", "ser", "tem", "está", "estava", "meu", "minha",
})

DEFAULT_MIN_TOKEN_LENGTH = 4

_PUNCTUATION_RE = re.compile(r"[^\w\s]")


def tokenize(
    text: str,
    min_length: int = DEFAULT_MIN_TOKEN_LENGTH,
    stopwords: frozenset = PORTUGUESE_STOPWORDS,
) -> List[str]:
    """
    Split text into candidate keyword tokens, repeats included.

    1. Lowercase
    2. Strip punctuation (accented letters are word characters and survive)
    3. Split on whitespace
    4. Drop tokens shorter than min_length and stopwords
    """
    cleaned = _PUNCTUATION_RE.sub("", (text or "").lower())
    return [
        word for word in cleaned.split()
        if len(word) >= min_length and word not in stopwords
    ]


def extract_keywords(
    text: str,
    min_length: int = DEFAULT_MIN_TOKEN_LENGTH,
    limit: Optional[int] = None,
) -> List[str]:
    """Ordered set of keywords in text, in first-occurrence order."""
    keywords = list(dict.fromkeys(tokenize(text, min_length=min_length)))
    if limit is not None:
        keywords = keywords[:limit]
    return keywords


def majority_sentiment(labels: Iterable[Sentiment]) -> Sentiment:
    """Most frequent label; any tie for first place resolves to neutral."""
    counts = Counter(labels)
    if not counts:
        return Sentiment.NEUTRAL
    ranked = counts.most_common()
    top_label, top_count = ranked[0]
    if len(ranked) > 1 and ranked[1][1] == top_count:
        return Sentiment.NEUTRAL
    return top_label


def aggregate_keywords(
    reviews: Iterable,
    min_mentions: int = 3,
    top_n: int = 10,
    min_length: int = DEFAULT_MIN_TOKEN_LENGTH,
) -> List[KeywordStat]:
    """
    Count keyword occurrences across reviews and tag each with a sentiment.

    Every occurrence counts, so a word repeated inside one comment counts
    twice. Each occurrence contributes the review's rating sentiment to the
    keyword's majority vote.

    Returns:
        Up to top_n KeywordStat, sorted by mentions descending.
    """
    counts: Dict[str, int] = defaultdict(int)
    votes: Dict[str, List[Sentiment]] = defaultdict(list)

    for review in reviews:
        tokens = tokenize(review.comment, min_length=min_length)
        if not tokens:
            continue
        sentiment = classify_sentiment(review)
        for token in tokens:
            counts[token] += 1
            votes[token].append(sentiment)

    stats = [
        KeywordStat(
            keyword=keyword,
            mentions=count,
            sentiment=majority_sentiment(votes[keyword]),
        )
        for keyword, count in counts.items()
        if count >= min_mentions
    ]

    # sort() is stable: equal counts keep first-appearance order
    stats.sort(key=lambda s: s.mentions, reverse=True)
    return stats[:top_n]


# =============================================================================
# COMPLAINT CATEGORIES
# =============================================================================
# Scanned in order; the first category with a matching keyword wins.

CATEGORY_LEXICON: Tuple[Tuple[ReviewCategory, Tuple[str, ...]], ...] = (
    (ReviewCategory.QUALITY, ("qualidade", "defeito", "quebrado")),
    (ReviewCategory.DELIVERY, ("entrega", "atraso", "frete")),
    (ReviewCategory.SERVICE, ("atendimento", "suporte", "cliente")),
    (ReviewCategory.PRICE, ("preço", "caro", "barato", "valor")),
)

URGENT_WORDS = ("defeito", "quebrado", "danificado", "péssimo", "ruim")


def categorize_comment(text: str) -> ReviewCategory:
    """Derive the complaint category of a comment, defaulting to OTHER."""
    lowered = (text or "").lower()
    for category, keywords in CATEGORY_LEXICON:
        if any(kw in lowered for kw in keywords):
            return category
    return ReviewCategory.OTHER


def contains_urgent_keywords(text: str) -> bool:
    """True if the comment mentions a defect / damage word."""
    lowered = (text or "").lower()
    return any(word in lowered for word in URGENT_WORDS)
