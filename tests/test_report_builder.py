"""
Tests for ReportBuilder.

Covers:
- Template lookup and report naming
- Status machine (processing -> ready | failed), completed_at
- Report contents: summary, products, reviews, trends, comparisons
- Failure retention and re-raise
- CSV / JSON export

Usage:
    pytest tests/test_report_builder.py -v
"""

import csv
import io
import json
from datetime import datetime, timedelta, timezone

import pytest

from reviewwatch.data.data_models import Product, Review
from reviewwatch.data.repository import InMemoryReviewRepository, ReviewRepository
from reviewwatch.exceptions import (
    InvalidReportTransition,
    ReportGenerationError,
    ReportNotFoundError,
    TemplateNotFoundError,
)
from reviewwatch.reports import (
    CustomField,
    FieldType,
    ReportBuilder,
    ReportSection,
    ReportStatus,
    ReportTemplate,
    ReportType,
    SectionType,
    default_templates,
)
from reviewwatch.reviews.review_models import Sentiment


NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


# ============================================================================
# TEST DATA
# ============================================================================

def make_review(review_id: str, product_id: str, rating: int, comment: str, days_ago: float,
                has_response: bool = False) -> Review:
    return Review(
        id=review_id,
        product_id=product_id,
        rating=rating,
        comment=comment,
        author=f"Autor {review_id}",
        date=NOW - timedelta(days=days_ago),
        has_response=has_response,
    )


PRODUCTS = [
    Product(id="P1", name="Fone Bluetooth"),
    Product(id="P2", name="Carregador USB-C"),
    Product(id="P3", name="Capa de Celular"),
]

REVIEWS = [
    make_review("R1", "P1", 5, "Som excelente, bateria excelente", 1, has_response=True),
    make_review("R2", "P1", 4, "Bateria boa, som limpo", 5),
    make_review("R3", "P1", 1, "Veio com defeito, qualidade péssima", 8),
    make_review("R4", "P2", 2, "A entrega atrasou muito", 12),
    make_review("R5", "P2", 5, "Carrega rápido", 20, has_response=True),
    make_review("R6", "P9", 3, "Produto razoável", 25),
    make_review("R7", "P3", 1, "Quebrou na primeira semana", 45),
]


class FailingRepository(ReviewRepository):
    """Repository whose reads blow up, to exercise the failure path."""

    def list_reviews(self):
        raise RuntimeError("database unavailable")

    def list_products(self):
        return []


def make_builder(repository=None, **kwargs) -> ReportBuilder:
    repository = repository or InMemoryReviewRepository(reviews=REVIEWS, products=PRODUCTS)
    return ReportBuilder(repository, clock=lambda: NOW, **kwargs)


# ============================================================================
# TEMPLATES
# ============================================================================

class TestTemplates:

    def setup_method(self):
        self.builder = make_builder()

    def test_default_templates(self):
        ids = [t.id for t in self.builder.get_templates()]
        assert ids == ["complete", "sentiment", "trends"]
        assert self.builder.get_template("trends").default_period == "90d"
        assert all(len(t.sections) == 5 for t in default_templates())

    def test_unknown_template_creates_no_report(self):
        with pytest.raises(TemplateNotFoundError):
            self.builder.generate("competitive", "30d")
        assert self.builder.get_reports() == []

    def test_unknown_period_creates_no_report(self):
        with pytest.raises(ValueError):
            self.builder.generate("complete", "2w")
        assert self.builder.get_reports() == []


# ============================================================================
# GENERATION
# ============================================================================

class TestGenerate:

    def setup_method(self):
        self.builder = make_builder()

    def test_ready_report(self):
        report = self.builder.generate("complete", "30d")

        assert report.status == ReportStatus.READY
        assert report.completed_at == NOW
        assert report.error is None
        assert report.name == "Relatório Completo - Últimos 30 dias"
        assert report.type == ReportType.COMPLETE
        assert self.builder.get_report(report.id) is report

    def test_default_period_from_template(self):
        report = self.builder.generate("trends")
        assert report.period == "90d"
        assert report.name == "Análise de Tendências - Últimos 90 dias"

    def test_summary_uses_period_window(self):
        summary = self.builder.generate("complete", "30d").data.summary
        assert summary.total_reviews == 6
        # P9 has no product record, P3 only reviewed 45 days ago
        assert summary.total_products == 2
        assert summary.average_rating == pytest.approx(20 / 6)
        assert summary.response_rate == pytest.approx(100 / 3)
        assert summary.satisfaction_score == pytest.approx(50.0)

    def test_metadata(self):
        report = self.builder.generate("complete", "7d")
        assert report.metadata.data_points == 2
        assert report.metadata.processing_time_ms >= 0
        assert report.metadata.data_source == "Mercado Livre API"
        assert report.metadata.filters["period"] == "7d"

    def test_product_breakdown(self):
        report = self.builder.generate("complete", "30d")
        products = {p.product_id: p for p in report.data.products}

        fone = products["P1"]
        assert fone.total_reviews == 3
        assert fone.rating_distribution == {1: 1, 2: 0, 3: 0, 4: 1, 5: 1}
        assert fone.sentiment_distribution.positive == 2
        assert fone.sentiment_distribution.negative == 1
        assert [k.keyword for k in fone.keywords] == ["excelente", "bateria"]
        assert len(fone.trends) == 6
        assert [(i.type, i.count) for i in fone.issues] == [("quality", 1)]
        assert fone.issues[0].percentage == pytest.approx(100 / 3)

        assert [(i.type, i.count) for i in products["P2"].issues] == [("delivery", 1)]

    def test_review_rows(self):
        report = self.builder.generate("complete", "30d")
        rows = {r.review_id: r for r in report.data.reviews}

        assert rows["R3"].is_urgent
        assert rows["R3"].category == "quality"
        assert rows["R3"].sentiment == Sentiment.NEGATIVE
        assert rows["R6"].product_name == "Produto não encontrado"
        assert not rows["R5"].is_urgent
        assert rows["R1"].keywords == ("excelente", "bateria")

    def test_trends_and_changes(self):
        report = self.builder.generate("complete", "30d")
        rows = report.data.trends
        assert len(rows) == 6
        assert sum(row.bucket.total for row in rows) == 6
        assert rows[0].change.reviews == 0
        for previous, current in zip(rows, rows[1:]):
            assert current.change.reviews == current.bucket.total - previous.bucket.total

    def test_comparisons_use_whole_history(self):
        report = self.builder.generate("complete", "7d")
        by_metric = {c.metric: c for c in report.data.comparisons}
        assert by_metric["total_reviews"].current == 6
        assert by_metric["total_reviews"].previous == 1

    def test_custom_period_keeps_everything(self):
        report = self.builder.generate("sentiment", "custom")
        assert report.name == "Análise de Sentimento - Período personalizado"
        assert report.data.summary.total_reviews == 7
        assert report.data.trends[0].bucket.start == NOW - timedelta(days=45)

    def test_insights_attached(self):
        report = self.builder.generate("complete", "30d")
        titles = [i.title for i in report.insights]
        assert "Atenção: Aumento de Reclamações" in titles
        assert "Baixa Taxa de Resposta" in titles

    def test_empty_repository(self):
        builder = make_builder(InMemoryReviewRepository())
        report = builder.generate("complete", "30d")
        assert report.status == ReportStatus.READY
        assert report.data.summary.total_reviews == 0
        assert report.data.products == []
        assert report.insights == []


# ============================================================================
# FAILURES & STATUS MACHINE
# ============================================================================

class TestFailures:

    def test_processing_error_fails_and_is_retained(self):
        builder = make_builder(FailingRepository())
        with pytest.raises(RuntimeError):
            builder.generate("complete", "30d")

        reports = builder.get_reports()
        assert len(reports) == 1
        assert reports[0].status == ReportStatus.FAILED
        assert reports[0].completed_at is None
        assert reports[0].error == "database unavailable"

    def test_missing_required_custom_field(self):
        template = ReportTemplate(
            id="loja",
            name="Relatório da Loja",
            description="",
            type=ReportType.COMPLETE,
            sections=(ReportSection("summary", "Resumo", SectionType.SUMMARY),),
            custom_fields=(CustomField("store", "Loja", FieldType.TEXT, required=True),),
        )
        builder = make_builder(templates=[template])

        with pytest.raises(ReportGenerationError):
            builder.generate("loja", "30d")
        assert builder.get_reports()[0].status == ReportStatus.FAILED

        report = builder.generate("loja", "30d", custom_fields={"store": "Centro"})
        assert report.status == ReportStatus.READY
        assert report.metadata.filters["store"] == "Centro"

    def test_terminal_states_cannot_be_left(self):
        report = make_builder().generate("complete", "30d")
        with pytest.raises(InvalidReportTransition):
            report.mark_failed("late failure")
        with pytest.raises(InvalidReportTransition):
            report.mark_ready(NOW)
        assert report.status == ReportStatus.READY


# ============================================================================
# COLLECTION & EXPORT
# ============================================================================

class TestCollectionAndExport:

    def setup_method(self):
        self.builder = make_builder()
        self.report = self.builder.generate("complete", "30d")

    def test_delete_is_idempotent(self):
        self.builder.delete_report(self.report.id)
        self.builder.delete_report(self.report.id)
        assert self.builder.get_report(self.report.id) is None

    def test_export_json(self):
        document = json.loads(self.builder.export_report(self.report.id, "json"))
        assert document["status"] == "ready"
        assert document["type"] == "complete"
        assert document["data"]["analytics"]["metrics"]["total_reviews"] == 6
        assert document["data"]["products"][0]["rating_distribution"]["5"] == 1

    def test_export_csv(self):
        text = self.builder.export_report(self.report.id, "csv")
        rows = list(csv.reader(io.StringIO(text)))
        assert rows[0] == ["report", "Relatório Completo - Últimos 30 dias"]
        assert ["total_reviews", "6"] in rows
        review_rows = [r for r in rows if r and r[0].startswith("R") and len(r) == 9]
        assert len(review_rows) == 6

    def test_export_unknown_report(self):
        with pytest.raises(ReportNotFoundError):
            self.builder.export_report("missing", "csv")

    def test_export_unsupported_format(self):
        with pytest.raises(ValueError):
            self.builder.export_report(self.report.id, "pdf")

    def test_export_failed_report(self):
        builder = make_builder(FailingRepository())
        with pytest.raises(RuntimeError):
            builder.generate("complete", "30d")
        failed = builder.get_reports()[0]
        with pytest.raises(ValueError):
            builder.export_report(failed.id, "json")
