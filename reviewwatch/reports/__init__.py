"""
ReviewWatch Reports
===================

On-demand report generation over a review repository.

Usage:
    from reviewwatch.reports import ReportBuilder

    builder = ReportBuilder(repository)
    report = builder.generate("complete", "30d")
"""

from .report_builder import ReportBuilder, default_templates, format_period, identify_issues
from .report_models import (
    CustomField,
    FieldType,
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
    to_jsonable,
)

__all__ = [
    "CustomField",
    "FieldType",
    "IssueStat",
    "ProductReport",
    "Report",
    "ReportBuilder",
    "ReportData",
    "ReportMetadata",
    "ReportSection",
    "ReportStatus",
    "ReportTemplate",
    "ReportType",
    "ReviewReport",
    "SectionType",
    "TrendRow",
    "default_templates",
    "format_period",
    "identify_issues",
    "to_jsonable",
]
