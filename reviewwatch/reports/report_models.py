"""
Report Data Models
==================

Report artifacts produced by ReportBuilder.

A Report starts in PROCESSING and moves exactly once, to READY or FAILED.
Both are terminal. completed_at is set only on READY.

Models:
    - ReportTemplate / ReportSection / CustomField: what a report contains
    - ProductReport: per-product breakdown
    - IssueStat: complaint counts for low ratings, by category
    - ReviewReport: one row per review
    - TrendRow: trend bucket plus its change vs the previous bucket
    - ReportData: the aggregate payload
    - ReportMetadata: provenance and processing stats
    - Report: the artifact itself
"""

from dataclasses import asdict, dataclass, field, is_dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ..analytics.analytics_models import (
    AnalyticsSnapshot,
    ComparisonData,
    Insight,
    SentimentDistribution,
    SummaryMetrics,
    TrendBucket,
    TrendChange,
)
from ..exceptions import InvalidReportTransition
from ..reviews.review_models import KeywordStat, Sentiment


REPORT_FORMAT_VERSION = "1.0.0"


class ReportStatus(str, Enum):
    PROCESSING = "processing"
    READY = "ready"
    FAILED = "failed"


class ReportType(str, Enum):
    COMPLETE = "complete"
    SENTIMENT = "sentiment"
    TRENDS = "trends"
    KEYWORDS = "keywords"
    COMPETITIVE = "competitive"


class SectionType(str, Enum):
    SUMMARY = "summary"
    CHART = "chart"
    TABLE = "table"
    INSIGHTS = "insights"
    COMPARISON = "comparison"


class FieldType(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    SELECT = "select"
    DATE = "date"
    BOOLEAN = "boolean"


@dataclass(frozen=True)
class ReportSection:
    id: str
    name: str
    type: SectionType
    required: bool = True
    config: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CustomField:
    id: str
    name: str
    type: FieldType
    required: bool = False
    options: Tuple[str, ...] = ()
    default_value: Any = None


@dataclass(frozen=True)
class ReportTemplate:
    id: str
    name: str
    description: str
    type: ReportType
    sections: Tuple[ReportSection, ...]
    default_period: str = "30d"
    custom_fields: Tuple[CustomField, ...] = ()


@dataclass(frozen=True)
class IssueStat:
    """Low-rated reviews (rating <= 2) in one category."""
    type: str
    count: int
    percentage: float


@dataclass(frozen=True)
class ProductReport:
    product_id: str
    product_name: str
    total_reviews: int
    average_rating: float
    rating_distribution: Dict[int, int]
    sentiment_distribution: SentimentDistribution
    keywords: List[KeywordStat]
    trends: List[TrendBucket]
    issues: List[IssueStat]


@dataclass(frozen=True)
class ReviewReport:
    review_id: str
    product_name: str
    author: str
    rating: Any
    comment: str
    date: datetime
    sentiment: Sentiment
    category: str
    keywords: Tuple[str, ...]
    is_urgent: bool


@dataclass(frozen=True)
class TrendRow:
    bucket: TrendBucket
    change: TrendChange


@dataclass
class ReportData:
    analytics: AnalyticsSnapshot
    products: List[ProductReport] = field(default_factory=list)
    reviews: List[ReviewReport] = field(default_factory=list)
    trends: List[TrendRow] = field(default_factory=list)
    comparisons: List[ComparisonData] = field(default_factory=list)

    @property
    def summary(self) -> SummaryMetrics:
        return self.analytics.metrics


@dataclass
class ReportMetadata:
    generated_by: str
    data_source: str
    filters: Dict[str, Any] = field(default_factory=dict)
    processing_time_ms: float = 0.0
    data_points: int = 0
    version: str = REPORT_FORMAT_VERSION


@dataclass
class Report:
    """
    One report generation.

    Mutated only by the builder while PROCESSING; read-only afterwards.
    """
    id: str
    name: str
    type: ReportType
    period: str
    created_at: datetime
    status: ReportStatus = ReportStatus.PROCESSING
    completed_at: Optional[datetime] = None
    data: Optional[ReportData] = None
    insights: List[Insight] = field(default_factory=list)
    metadata: Optional[ReportMetadata] = None
    error: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status != ReportStatus.PROCESSING

    def _check_processing(self, target: ReportStatus) -> None:
        if self.is_terminal:
            raise InvalidReportTransition(
                f"Report {self.id} cannot move from {self.status.value} to {target.value}"
            )

    def mark_ready(self, completed_at: datetime) -> None:
        self._check_processing(ReportStatus.READY)
        self.status = ReportStatus.READY
        self.completed_at = completed_at

    def mark_failed(self, error: str) -> None:
        self._check_processing(ReportStatus.FAILED)
        self.status = ReportStatus.FAILED
        self.error = error

    def to_dict(self) -> Dict[str, Any]:
        return to_jsonable(self)


def to_jsonable(value: Any) -> Any:
    """Convert dataclasses, enums and datetimes into JSON-friendly values."""
    if is_dataclass(value) and not isinstance(value, type):
        value = asdict(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(to_jsonable(k)): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value
