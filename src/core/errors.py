"""
CrimeWatch Triage - Collaborator Errors
Failures raised by the thin clients for external services.
"""

from typing import Optional


class CollaboratorError(Exception):
    """An external service call failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class DocumentStoreError(CollaboratorError):
    """Realtime database request failed."""


class IdentityError(CollaboratorError):
    """Identity service rejected or failed a request."""

    def __init__(self, message: str, code: Optional[str] = None, status_code: Optional[int] = None):
        self.code = code
        super().__init__(message, status_code)


class MediaUploadError(CollaboratorError):
    """Media upload failed."""


class GeocodingError(CollaboratorError):
    """Geocoding lookup failed."""
