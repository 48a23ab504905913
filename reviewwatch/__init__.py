"""
ReviewWatch
===========

Review alert rule engine and review analytics / report aggregation engine.

Packages:
    - reviewwatch.data: review/product models, repository, configuration
    - reviewwatch.reviews: sentiment classification and keyword extraction
    - reviewwatch.alerts: rule evaluation and alert lifecycle
    - reviewwatch.notifications: notification channel selection and batching
    - reviewwatch.analytics: metrics, trends, comparisons, insights
    - reviewwatch.reports: report templates, generation and export
    - reviewwatch.orchestrator: logging setup and CLI
"""

__version__ = "1.0.0"
