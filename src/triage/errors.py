"""
Triage error taxonomy.
"""

from typing import Optional


class TriageError(Exception):
    """Base class for triage pipeline errors."""


class InvalidInputError(TriageError, ValueError):
    """Caller-supplied text or labels are malformed. Never retried."""


class ClassificationUnavailableError(TriageError):
    """
    The classification collaborator failed (network, timeout or malformed
    response). Recovered by the orchestrator into an "unavailable" aspect.
    """

    def __init__(self, message: str, aspect_id: Optional[str] = None):
        self.aspect_id = aspect_id
        if aspect_id:
            message = f"[{aspect_id}] {message}"
        super().__init__(message)


class UnknownAspectError(TriageError, KeyError):
    """Aspect id is not in the registry."""

    def __init__(self, aspect_id: str):
        self.aspect_id = aspect_id
        super().__init__(aspect_id)

    def __str__(self) -> str:
        return f"Unknown aspect: {self.aspect_id}"
