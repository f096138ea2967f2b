"""
CrimeWatch Triage - Crowdsource Module
Handles citizen crime reports and submission validation.
"""

from src.crowdsource.report_handler import ReportHandler
from src.crowdsource.validation import (
    ReportSubmission,
    ReportValidator,
    ReportValidationError,
    validate_report,
)

__all__ = [
    # Report Handler
    "ReportHandler",
    # Validation
    "ReportSubmission",
    "ReportValidator",
    "ReportValidationError",
    "validate_report",
]
