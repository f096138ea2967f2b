"""
CrimeWatch Triage - Core Utilities
Central configuration, logging, and reference data.
"""

from src.core.config import settings
from src.core.constants import (
    SENTIMENT_LABELS,
    CRIME_CATEGORY_LABELS,
    ROUTING_DEPARTMENT_LABELS,
    SEVERITY_LABELS,
    REPORT_TIME_FILTERS,
)

__all__ = [
    "settings",
    "SENTIMENT_LABELS",
    "CRIME_CATEGORY_LABELS",
    "ROUTING_DEPARTMENT_LABELS",
    "SEVERITY_LABELS",
    "REPORT_TIME_FILTERS",
]
