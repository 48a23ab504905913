"""
Review Repository
=================

Read-side interface to the external review/product store. The engines only
read from it; writes belong to the sync layer.

Usage:
    repo = InMemoryReviewRepository.from_json_file("data.json")
    builder = ReportBuilder(repository=repo)
"""

import json
import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from .data_models import Product, Review

logger = logging.getLogger(__name__)


class ReviewRepository(ABC):
    """Abstract read access to reviews and products."""

    @abstractmethod
    def list_reviews(self) -> List[Review]:
        """Return a snapshot list of all reviews."""

    @abstractmethod
    def list_products(self) -> List[Product]:
        """Return a snapshot list of all products."""

    def get_product(self, product_id: str) -> Optional[Product]:
        for product in self.list_products():
            if product.id == product_id:
                return product
        return None


class InMemoryReviewRepository(ReviewRepository):
    """
    Thread-safe in-memory repository.

    list_* always return fresh lists so callers work on a snapshot that
    later writes cannot change.
    """

    def __init__(
        self,
        reviews: Optional[Iterable[Review]] = None,
        products: Optional[Iterable[Product]] = None,
    ):
        self._lock = threading.Lock()
        self._reviews: List[Review] = list(reviews or [])
        self._products: Dict[str, Product] = {p.id: p for p in (products or [])}

    def list_reviews(self) -> List[Review]:
        with self._lock:
            return list(self._reviews)

    def list_products(self) -> List[Product]:
        with self._lock:
            return list(self._products.values())

    def get_product(self, product_id: str) -> Optional[Product]:
        with self._lock:
            return self._products.get(product_id)

    def add_review(self, review: Review) -> None:
        with self._lock:
            self._reviews.append(review)

    def add_product(self, product: Product) -> None:
        with self._lock:
            self._products[product.id] = product

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InMemoryReviewRepository":
        """
        Build a repository from a document of the form
        {"products": [...], "reviews": [...]}.
        """
        products = [Product.from_dict(p) for p in data.get("products", [])]
        reviews = [Review.from_dict(r) for r in data.get("reviews", [])]
        logger.info(f"Loaded {len(reviews)} reviews for {len(products)} products")
        return cls(reviews=reviews, products=products)

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> "InMemoryReviewRepository":
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))
