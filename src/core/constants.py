"""
CrimeWatch Triage - Constants and Reference Data
Static values used throughout the application.
"""

from typing import Dict, Tuple

# =============================================================================
# TRIAGE ASPECTS
# =============================================================================

SENTIMENT_LABELS: Tuple[str, ...] = ("positive", "neutral", "negative")

CRIME_CATEGORY_LABELS: Tuple[str, ...] = (
    "theft",
    "assault",
    "fraud",
    "drug-related",
    "vandalism",
    "cybercrime",
)

ROUTING_DEPARTMENT_LABELS: Tuple[str, ...] = (
    "local police department",
    "narcotics control bureau",
    "cyber crime investigation unit",
    "economic offenses wing",
    "women safety cell",
    "anti-terrorism squad",
    "traffic control department",
)

SEVERITY_LABELS: Tuple[str, ...] = ("low", "medium", "high")

# Sentinel labels
UNKNOWN_LABEL: str = "unknown"
UNAVAILABLE_LABEL: str = "unavailable"

# =============================================================================
# REPORTS
# =============================================================================

# Dashboard time filters (seconds); "all" has no lower bound
REPORT_TIME_FILTERS: Dict[str, int] = {
    "1h": 60 * 60,
    "24h": 24 * 60 * 60,
    "week": 7 * 24 * 60 * 60,
}

USER_TYPES: Tuple[str, ...] = ("citizen", "law")

# Collections in the realtime database
USERS_COLLECTION: str = "users"
CRIMES_COLLECTION: str = "crimes"

# =============================================================================
# API RATE LIMITS
# =============================================================================

API_RATE_LIMITS: Dict[str, Dict[str, int]] = {
    "nominatim": {"requests": 1, "period_seconds": 1},
}

