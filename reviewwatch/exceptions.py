"""
ReviewWatch Exceptions
======================

Configuration errors are isolated to the rule that caused them; report
errors fail the report and propagate to the caller.
"""


class ReviewWatchError(Exception):
    """Base exception for ReviewWatch."""
    pass


class RuleConfigurationError(ReviewWatchError):
    """A rule is malformed (unknown condition type, bad operator, no action)."""

    def __init__(self, rule_id: str, message: str):
        self.rule_id = rule_id
        super().__init__(f"Rule '{rule_id}': {message}")


class ReportGenerationError(ReviewWatchError):
    """Report data could not be produced."""
    pass


class TemplateNotFoundError(ReviewWatchError):
    """No report template with the requested id."""
    pass


class ReportNotFoundError(ReviewWatchError):
    """No report with the requested id."""
    pass


class InvalidReportTransition(ReviewWatchError):
    """Attempt to move a report out of a terminal status."""
    pass
