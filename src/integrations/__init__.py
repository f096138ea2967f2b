"""
CrimeWatch Triage - Integrations Module
Clients for the identity, media upload and geocoding services.
"""

from src.integrations.identity_client import IdentityClient, AuthSession
from src.integrations.media_client import MediaUploadClient
from src.integrations.geocoding_client import GeocodingClient, Place

__all__ = [
    "IdentityClient",
    "AuthSession",
    "MediaUploadClient",
    "GeocodingClient",
    "Place",
]
