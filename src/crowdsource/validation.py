"""
Report validation for citizen crime reports
Checks a submission before it is stored
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

PHONE_PATTERN = re.compile(r"^\d{10}$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class ReportValidationError(ValueError):
    """A submission failed one or more checks."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


@dataclass
class ReportSubmission:
    """Crime report as entered by a citizen."""
    full_name: str
    phone_number: str
    email: str
    crime_type: str
    date: str
    time: str
    location: str
    description: str
    agreed_to_terms: bool = False
    coordinates: Optional[Tuple[float, float]] = None
    user_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "full_name": self.full_name,
            "phone_number": self.phone_number,
            "email": self.email,
            "crime_type": self.crime_type,
            "date": self.date,
            "time": self.time,
            "location": self.location,
            "description": self.description,
            "agreed_to_terms": self.agreed_to_terms,
            "coordinates": self.coordinates,
            "user_id": self.user_id,
        }


class ReportValidator:
    """
    Validates crime report submissions.

    Every failing rule contributes one message; nothing short-circuits.
    """

    def validate(self, submission: ReportSubmission) -> List[str]:
        """
        Validate a submission.

        Returns:
            List of error messages (empty when valid)
        """
        errors = []

        if not (submission.full_name or "").strip():
            errors.append("Full Name is required.")
        if not PHONE_PATTERN.match(submission.phone_number or ""):
            errors.append("Phone Number must be 10 digits.")
        if not EMAIL_PATTERN.match(submission.email or ""):
            errors.append("Invalid Email format.")
        if not submission.crime_type:
            errors.append("Crime Type is required.")
        if not submission.date:
            errors.append("Date is required.")
        if not submission.time:
            errors.append("Time is required.")
        if not (submission.location or "").strip():
            errors.append("Location is required.")
        if not (submission.description or "").strip():
            errors.append("Description is required.")
        if not submission.agreed_to_terms:
            errors.append("You must confirm the accuracy of the report.")

        if errors:
            logger.info(f"Report submission rejected: {len(errors)} errors")

        return errors


def validate_report(submission: ReportSubmission) -> None:
    """
    Convenience function to validate a submission.

    Raises:
        ReportValidationError: listing every failed check
    """
    errors = ReportValidator().validate(submission)
    if errors:
        raise ReportValidationError(errors)
