"""
CrimeWatch Triage - Database Module
Realtime database access and stored record models.
"""

from .connection import RealtimeDatabase
from .models import CrimeReport, UserProfile, parse_timestamp

__all__ = [
    "RealtimeDatabase",
    "CrimeReport",
    "UserProfile",
    "parse_timestamp",
]
