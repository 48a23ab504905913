"""
ReviewWatch Orchestrator
========================

Entry points around the engines: logging setup and the command-line
interface.

Usage:
    python -m reviewwatch.orchestrator.cli report --input data.json
"""

from .logging_config import JSONFormatter, setup_logging

__all__ = [
    "JSONFormatter",
    "setup_logging",
]
