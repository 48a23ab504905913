"""
ReviewWatch Data Models
=======================

Review and product records supplied by the external persistence / sync layer.
Both are read-only inputs to the alert and report engines.

Models:
    - Review: a single customer review (rating + free text)
    - Product: the product a review belongs to
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def utc_now() -> datetime:
    """Current time as an aware UTC datetime (default clock for all services)."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC so they compare with aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_datetime(value: Any) -> datetime:
    """
    Parse a timestamp from an external record.

    Accepts datetime objects, ISO-8601 strings (a trailing "Z" is allowed)
    and POSIX timestamps in seconds.
    """
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return ensure_utc(datetime.fromisoformat(text))
    raise ValueError(f"Unsupported timestamp value: {value!r}")


@dataclass(frozen=True)
class Review:
    """
    A customer review. Immutable once ingested.

    The rating is not range-checked here: rule evaluation treats bad
    ratings as non-matching instead of rejecting the review.
    """
    id: str
    product_id: str
    rating: Any
    comment: str
    author: str
    date: datetime
    has_response: bool = False

    def __post_init__(self):
        if isinstance(self.date, datetime) and self.date.tzinfo is None:
            object.__setattr__(self, "date", ensure_utc(self.date))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Review":
        """Build a Review from a snake_case or camelCase mapping."""
        return cls(
            id=str(data["id"]),
            product_id=str(data.get("product_id", data.get("productId", ""))),
            rating=data.get("rating"),
            comment=data.get("comment") or "",
            author=data.get("author") or "",
            date=parse_datetime(data["date"]),
            has_response=bool(data.get("has_response", data.get("hasResponse", False))),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "rating": self.rating,
            "comment": self.comment,
            "author": self.author,
            "date": self.date.isoformat(),
            "has_response": self.has_response,
        }


@dataclass(frozen=True)
class Product:
    """A product, reduced to what alert display and report labels need."""
    id: str
    name: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Product":
        extra = {k: v for k, v in data.items() if k not in ("id", "name")}
        return cls(id=str(data["id"]), name=str(data.get("name", "")), metadata=extra)


def missing_product(product_id: Optional[str]) -> Product:
    """Placeholder used when a review references an unknown product."""
    return Product(id=product_id or "", name="Produto não encontrado")
