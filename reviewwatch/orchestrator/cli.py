"""
ReviewWatch CLI
===============

Command-line interface for the alert and report engines.

Commands:
    alerts      - Stream a review file through the alert engine
    report      - Generate and export a report
    templates   - List report templates

Input files hold {"products": [...], "reviews": [...]}.

Usage:
    python -m reviewwatch.orchestrator.cli alerts --input data.json
    python -m reviewwatch.orchestrator.cli alerts --input data.json --rules rules.json --json
    python -m reviewwatch.orchestrator.cli report --input data.json --template complete --period 30d
    python -m reviewwatch.orchestrator.cli report --input data.json --template trends --format json
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from ..alerts import AlertManager, load_alert_config, load_rules_file
from ..data.config import get_settings
from ..data.data_models import parse_datetime
from ..data.repository import InMemoryReviewRepository
from ..exceptions import ReviewWatchError
from ..reports import ReportBuilder, ReportStatus
from .logging_config import setup_logging

logger = logging.getLogger(__name__)


def _fixed_clock(value: Optional[str]):
    if not value:
        return None
    moment = parse_datetime(value)
    return lambda: moment


def cmd_alerts(args):
    """Process every review of the input file and print the resulting alerts."""
    settings = get_settings()
    try:
        repository = InMemoryReviewRepository.from_json_file(args.input)

        config = settings.alerts.to_alert_config()
        if args.config:
            with open(args.config, "r", encoding="utf-8") as f:
                config = load_alert_config(json.load(f), base=config)

        rules = load_rules_file(args.rules) if args.rules else None

        manager_kwargs = {"config": config, "rules": rules}
        clock = _fixed_clock(args.now)
        if clock is not None:
            manager_kwargs["clock"] = clock
        manager = AlertManager(**manager_kwargs)

        reviews = sorted(repository.list_reviews(), key=lambda r: r.date)
        for review in reviews:
            manager.process_review(review, repository.get_product(review.product_id))

        alerts = manager.get_alerts()
        stats = manager.get_alert_stats()

        if args.json:
            output = {
                "alerts": [a.to_dict() for a in alerts],
                "stats": stats.to_dict(),
            }
            print(json.dumps(output, indent=2, ensure_ascii=False, default=str))
            return 0

        print("=" * 60)
        print("REVIEWWATCH ALERTS")
        print("=" * 60)
        print(f"Reviews processed: {len(reviews)}")
        print(f"Alerts created: {stats.total}")
        print(f"Critical: {stats.critical}  Unread: {stats.unread}  Pending: {stats.pending}")
        print()

        for i, alert in enumerate(alerts, 1):
            print(f"{i}. [{alert.type.value.upper()}] {alert.title}")
            print(f"   {alert.description}")
            print(f"   Review: {alert.review_id} by {alert.author} ({alert.rating}/5)")
            print(f"   Category: {alert.category.value}  Priority: {alert.priority.value}")
            print()

        return 0

    except (OSError, KeyError, TypeError, ValueError, ReviewWatchError) as e:
        print(f"ERROR: Alert processing failed: {e}", file=sys.stderr)
        logger.debug("Alert processing failed", exc_info=True)
        return 1


def cmd_report(args):
    """Generate a report and print it in the requested export format."""
    settings = get_settings()
    try:
        repository = InMemoryReviewRepository.from_json_file(args.input)

        builder_kwargs = {
            "settings": settings.reports,
            "analytics_settings": settings.analytics,
        }
        clock = _fixed_clock(args.now)
        if clock is not None:
            builder_kwargs["clock"] = clock
        builder = ReportBuilder(repository, **builder_kwargs)

        report = builder.generate(args.template, args.period)
        if report.status != ReportStatus.READY:
            print(f"ERROR: Report {report.id} is {report.status.value}", file=sys.stderr)
            return 1

        print(builder.export_report(report.id, args.format))
        return 0

    except (OSError, KeyError, TypeError, ValueError, ReviewWatchError) as e:
        print(f"ERROR: Report generation failed: {e}", file=sys.stderr)
        logger.debug("Report generation failed", exc_info=True)
        return 1


def cmd_templates(args):
    """List available report templates."""
    builder = ReportBuilder(InMemoryReviewRepository())
    for template in builder.get_templates():
        print(f"{template.id:12} {template.name} (default period: {template.default_period})")
        if args.verbose:
            for section in template.sections:
                print(f"    - {section.name} [{section.type.value}]")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reviewwatch",
        description="ReviewWatch alert and report engine CLI",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit logs as JSON lines",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # alerts command
    alerts_parser = subparsers.add_parser("alerts", help="Run reviews through the alert engine")
    alerts_parser.add_argument("--input", required=True, help="JSON file with products and reviews")
    alerts_parser.add_argument("--rules", help="JSON file with alert rules (default: built-in rules)")
    alerts_parser.add_argument("--config", help="JSON file with alert configuration overrides")
    alerts_parser.add_argument("--now", help="Reference time (ISO 8601) instead of the system clock")
    alerts_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # report command
    report_parser = subparsers.add_parser("report", help="Generate and export a report")
    report_parser.add_argument("--input", required=True, help="JSON file with products and reviews")
    report_parser.add_argument(
        "--template",
        default="complete",
        help="Report template id (default: complete)",
    )
    report_parser.add_argument(
        "--period",
        choices=["7d", "30d", "90d", "1y", "custom"],
        help="Report period (default: template default)",
    )
    report_parser.add_argument(
        "--format",
        choices=["csv", "json"],
        default="csv",
        help="Export format (default: csv)",
    )
    report_parser.add_argument("--now", help="Reference time (ISO 8601) instead of the system clock")

    # templates command
    subparsers.add_parser("templates", help="List report templates")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    log_settings = get_settings().logging
    setup_logging(
        level="DEBUG" if args.verbose else log_settings.level,
        json_output=args.log_json or log_settings.json_output,
        log_file=log_settings.log_file,
    )

    if args.command is None:
        parser.print_help()
        return 1

    commands = {
        "alerts": cmd_alerts,
        "report": cmd_report,
        "templates": cmd_templates,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)
    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
