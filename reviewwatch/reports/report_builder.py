"""
Report Builder
==============

Generates Report artifacts from a review repository.

Pipeline (per generate call):
    1. Resolve template (unknown id raises before any report exists)
    2. Register a PROCESSING report
    3. Filter reviews/products by the period window
    4. Analytics snapshot: summary, distributions, keywords, trends, insights
    5. Per-product breakdowns and per-review rows
    6. Trend changes and 30-day comparisons
    7. Metadata, then READY

Any exception in steps 3-7 marks the report FAILED, keeps it in the
collection and re-raises.

Usage:
    builder = ReportBuilder(repository)
    report = builder.generate("complete", "30d")
    print(builder.export_report(report.id, "csv"))
"""

import csv
import io
import json
import logging
import threading
import time
import uuid
from collections import Counter
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from ..analytics.analytics_engine import CUSTOM_PERIOD, AnalyticsEngine, filter_by_period
from ..analytics.metrics import average_rating, percentage, rating_distribution, sentiment_distribution
from ..analytics.trend_aggregator import PERIOD_DAYS, compute_comparisons, compute_trend_changes, span_buckets
from ..data.config import AnalyticsSettings, ReportSettings
from ..data.data_models import Product, Review, missing_product, utc_now
from ..data.repository import ReviewRepository
from ..exceptions import ReportGenerationError, ReportNotFoundError, TemplateNotFoundError
from ..reviews.review_signals import (
    aggregate_keywords,
    categorize_comment,
    classify_sentiment,
    contains_urgent_keywords,
    extract_keywords,
)
from .report_models import (
    IssueStat,
    ProductReport,
    Report,
    ReportData,
    ReportMetadata,
    ReportSection,
    ReportStatus,
    ReportTemplate,
    ReportType,
    ReviewReport,
    SectionType,
    TrendRow,
)

logger = logging.getLogger(__name__)


ISSUE_MAX_RATING = 2

EXPORT_FORMATS = ("csv", "json")

PERIOD_LABELS = {
    "7d": "Últimos 7 dias",
    "30d": "Últimos 30 dias",
    "90d": "Últimos 90 dias",
    "1y": "Último ano",
    CUSTOM_PERIOD: "Período personalizado",
}


def format_period(period: str) -> str:
    return PERIOD_LABELS.get(period, PERIOD_LABELS[CUSTOM_PERIOD])


def default_templates() -> List[ReportTemplate]:
    """Built-in report templates."""
    return [
        ReportTemplate(
            id="complete",
            name="Relatório Completo",
            description="Análise detalhada de todos os aspectos dos produtos e reviews",
            type=ReportType.COMPLETE,
            sections=(
                ReportSection("summary", "Resumo Executivo", SectionType.SUMMARY),
                ReportSection("trends", "Tendências", SectionType.CHART, config={"chart_type": "line"}),
                ReportSection("sentiment", "Análise de Sentimento", SectionType.CHART, config={"chart_type": "pie"}),
                ReportSection("products", "Performance dos Produtos", SectionType.TABLE),
                ReportSection("insights", "Insights e Recomendações", SectionType.INSIGHTS),
            ),
            default_period="30d",
        ),
        ReportTemplate(
            id="sentiment",
            name="Análise de Sentimento",
            description="Foco em sentimentos e emoções dos clientes",
            type=ReportType.SENTIMENT,
            sections=(
                ReportSection("sentiment-summary", "Resumo de Sentimento", SectionType.SUMMARY),
                ReportSection("sentiment-distribution", "Distribuição de Sentimento", SectionType.CHART,
                              config={"chart_type": "pie"}),
                ReportSection("sentiment-trends", "Evolução do Sentimento", SectionType.CHART,
                              config={"chart_type": "line"}),
                ReportSection("keywords", "Palavras-chave", SectionType.TABLE),
                ReportSection("sentiment-insights", "Insights de Sentimento", SectionType.INSIGHTS),
            ),
            default_period="30d",
        ),
        ReportTemplate(
            id="trends",
            name="Análise de Tendências",
            description="Evolução temporal das avaliações e métricas",
            type=ReportType.TRENDS,
            sections=(
                ReportSection("trends-summary", "Resumo de Tendências", SectionType.SUMMARY),
                ReportSection("rating-trends", "Tendência de Avaliações", SectionType.CHART,
                              config={"chart_type": "line"}),
                ReportSection("volume-trends", "Volume de Reviews", SectionType.CHART,
                              config={"chart_type": "bar"}),
                ReportSection("comparison", "Comparação Períodos", SectionType.COMPARISON),
                ReportSection("trends-insights", "Insights de Tendências", SectionType.INSIGHTS),
            ),
            default_period="90d",
        ),
    ]


def identify_issues(reviews: Sequence[Review]) -> List[IssueStat]:
    """Categorize low-rated reviews; percentages are of all reviews given."""
    counts = Counter(
        categorize_comment(r.comment).value
        for r in reviews
        if r.rating <= ISSUE_MAX_RATING
    )
    return [
        IssueStat(type=category, count=count, percentage=percentage(count, len(reviews)))
        for category, count in counts.most_common()
    ]


class ReportBuilder:
    """
    Generates and keeps reports.

    The report collection is guarded by one lock; each generation works on
    its own repository snapshot and its own Report object.
    """

    def __init__(
        self,
        repository: ReviewRepository,
        clock: Callable[[], datetime] = utc_now,
        settings: Optional[ReportSettings] = None,
        analytics_settings: Optional[AnalyticsSettings] = None,
        templates: Optional[Iterable[ReportTemplate]] = None,
        engine: Optional[AnalyticsEngine] = None,
    ):
        self.repository = repository
        self.clock = clock
        self.settings = settings or ReportSettings()
        self.analytics_settings = analytics_settings or AnalyticsSettings()
        self.engine = engine or AnalyticsEngine(clock=clock, settings=self.analytics_settings)

        self._templates: Dict[str, ReportTemplate] = {
            t.id: t for t in (templates if templates is not None else default_templates())
        }
        self._reports: Dict[str, Report] = {}
        self._lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Templates
    # -------------------------------------------------------------------------

    def get_templates(self) -> List[ReportTemplate]:
        return list(self._templates.values())

    def get_template(self, template_id: str) -> Optional[ReportTemplate]:
        return self._templates.get(template_id)

    # -------------------------------------------------------------------------
    # Generation
    # -------------------------------------------------------------------------

    def generate(
        self,
        template_id: str,
        period: Optional[str] = None,
        custom_fields: Optional[Dict[str, Any]] = None,
    ) -> Report:
        """
        Generate a report from a template.

        Args:
            template_id: complete | sentiment | trends (or a registered id)
            period: 7d | 30d | 90d | 1y | custom, defaults to the template's
            custom_fields: Values for the template's custom fields

        Returns:
            The READY report

        Raises:
            TemplateNotFoundError: Unknown template (no report is created)
            ValueError: Unknown period (no report is created)
            Exception: Whatever failed during processing; the report is kept as FAILED
        """
        template = self.get_template(template_id)
        if template is None:
            raise TemplateNotFoundError(f"Template '{template_id}' not found")

        period = period or template.default_period
        if period != CUSTOM_PERIOD and period not in PERIOD_DAYS:
            raise ValueError(f"Unknown period '{period}'")

        report = Report(
            id=uuid.uuid4().hex,
            name=f"{template.name} - {format_period(period)}",
            type=template.type,
            period=period,
            created_at=self.clock(),
        )
        with self._lock:
            self._reports[report.id] = report

        logger.info(f"Generating report {report.id} ({template.id}, {period})",
                    extra={"report_id": report.id})

        try:
            self._process(report, template, custom_fields or {})
        except Exception as e:
            report.mark_failed(str(e))
            logger.error(f"Report {report.id} failed: {e}", extra={"report_id": report.id})
            raise

        report.mark_ready(self.clock())
        logger.info(
            f"Report {report.id} ready in {report.metadata.processing_time_ms:.1f}ms",
            extra={"report_id": report.id, "duration": report.metadata.processing_time_ms},
        )
        return report

    def _process(self, report: Report, template: ReportTemplate, custom_fields: Dict[str, Any]) -> None:
        started = time.perf_counter()

        missing = [f.id for f in template.custom_fields if f.required and f.id not in custom_fields]
        if missing:
            raise ReportGenerationError(f"Missing required custom fields: {', '.join(missing)}")

        now = self.clock()
        all_reviews = self.repository.list_reviews()
        products_by_id = {p.id: p for p in self.repository.list_products()}

        reviews = filter_by_period(all_reviews, report.period, now)
        product_ids = {r.product_id for r in reviews}
        products = [p for pid, p in products_by_id.items() if pid in product_ids]

        snapshot = self.engine.snapshot(reviews, products, period=report.period, now=now)
        changes = compute_trend_changes(snapshot.trends)

        report.data = ReportData(
            analytics=snapshot,
            products=[self._product_report(p, reviews) for p in products],
            reviews=[self._review_report(r, products_by_id) for r in reviews],
            trends=[TrendRow(bucket=b, change=c) for b, c in zip(snapshot.trends, changes)],
            comparisons=compute_comparisons(all_reviews, now=now),
        )
        report.insights = list(snapshot.insights)
        report.metadata = ReportMetadata(
            generated_by=self.settings.generated_by,
            data_source=self.settings.data_source,
            filters={"period": report.period, "template": template.id, **custom_fields},
            processing_time_ms=(time.perf_counter() - started) * 1000,
            data_points=len(reviews),
        )

    def _product_report(self, product: Product, reviews: Sequence[Review]) -> ProductReport:
        own = [r for r in reviews if r.product_id == product.id]
        return ProductReport(
            product_id=product.id,
            product_name=product.name,
            total_reviews=len(own),
            average_rating=average_rating(own),
            rating_distribution=rating_distribution(own),
            sentiment_distribution=sentiment_distribution(own),
            keywords=aggregate_keywords(
                own,
                min_mentions=self.analytics_settings.product_keyword_min_mentions,
                top_n=self.analytics_settings.keyword_top_n,
            ),
            trends=span_buckets(own, self.analytics_settings.trend_buckets),
            issues=identify_issues(own),
        )

    @staticmethod
    def _review_report(review: Review, products_by_id: Dict[str, Product]) -> ReviewReport:
        product = products_by_id.get(review.product_id) or missing_product(review.product_id)
        return ReviewReport(
            review_id=review.id,
            product_name=product.name,
            author=review.author,
            rating=review.rating,
            comment=review.comment,
            date=review.date,
            sentiment=classify_sentiment(review),
            category=categorize_comment(review.comment).value,
            keywords=tuple(extract_keywords(review.comment)),
            is_urgent=review.rating <= ISSUE_MAX_RATING or contains_urgent_keywords(review.comment),
        )

    # -------------------------------------------------------------------------
    # Collection
    # -------------------------------------------------------------------------

    def get_reports(self) -> List[Report]:
        with self._lock:
            return list(self._reports.values())

    def get_report(self, report_id: str) -> Optional[Report]:
        with self._lock:
            return self._reports.get(report_id)

    def delete_report(self, report_id: str) -> None:
        with self._lock:
            self._reports.pop(report_id, None)

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    def export_report(self, report_id: str, fmt: str) -> str:
        """
        Serialize a READY report as csv or json text.

        Raises:
            ReportNotFoundError: Unknown report id
            ValueError: Report not READY, or unsupported format
        """
        report = self.get_report(report_id)
        if report is None:
            raise ReportNotFoundError(f"Report '{report_id}' not found")
        if report.status != ReportStatus.READY:
            raise ValueError(f"Report {report_id} is {report.status.value}, only ready reports can be exported")
        if fmt not in EXPORT_FORMATS:
            raise ValueError(f"Unsupported export format '{fmt}', expected one of {EXPORT_FORMATS}")

        if fmt == "json":
            return json.dumps(report.to_dict(), ensure_ascii=False, indent=2)
        return self._to_csv(report)

    @staticmethod
    def _to_csv(report: Report) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer)
        summary = report.data.summary

        writer.writerow(["report", report.name])
        writer.writerow(["generated_at", report.completed_at.isoformat()])
        writer.writerow([])

        writer.writerow(["metric", "value"])
        writer.writerow(["total_products", summary.total_products])
        writer.writerow(["total_reviews", summary.total_reviews])
        writer.writerow(["average_rating", f"{summary.average_rating:.2f}"])
        writer.writerow(["response_rate", f"{summary.response_rate:.1f}"])
        writer.writerow(["satisfaction_score", f"{summary.satisfaction_score:.1f}"])
        writer.writerow([])

        writer.writerow(["product_id", "product_name", "total_reviews", "average_rating"])
        for product in report.data.products:
            writer.writerow([
                product.product_id,
                product.product_name,
                product.total_reviews,
                f"{product.average_rating:.2f}",
            ])
        writer.writerow([])

        writer.writerow([
            "review_id", "product_name", "author", "rating", "date",
            "sentiment", "category", "is_urgent", "comment",
        ])
        for row in report.data.reviews:
            writer.writerow([
                row.review_id,
                row.product_name,
                row.author,
                row.rating,
                row.date.isoformat(),
                row.sentiment.value,
                row.category,
                row.is_urgent,
                row.comment,
            ])

        return buffer.getvalue()