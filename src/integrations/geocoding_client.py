"""
CrimeWatch Triage - Geocoding Client
Forward and reverse geocoding via OpenStreetMap Nominatim.
Rate limited to 1 request per second.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from src.core.config import settings
from src.core.constants import API_RATE_LIMITS
from src.core.errors import GeocodingError

logger = logging.getLogger(__name__)


@dataclass
class Place:
    """A geocoded place."""
    display_name: str
    latitude: float
    longitude: float
    place_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "display_name": self.display_name,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "type": self.place_type,
        }


class GeocodingClient:
    """
    Client for Nominatim search and reverse lookups.

    Usage:
        with GeocodingClient() as client:
            places = client.search("Connaught Place, Delhi")
            address = client.reverse(28.63, 77.21)
    """

    MIN_QUERY_LENGTH = 3

    def __init__(
        self,
        base_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None
    ):
        """
        Initialize the geocoding client.

        Args:
            base_url: Nominatim root URL
            user_agent: User-Agent required by the Nominatim usage policy
            timeout: Request timeout in seconds
            client: Optional pre-configured HTTP client
        """
        self.base_url = (base_url or settings.nominatim_url).rstrip("/")
        self.timeout = timeout
        self._client = client or httpx.Client(
            timeout=timeout,
            headers={"User-Agent": user_agent or settings.nominatim_user_agent}
        )
        self._last_request_time = 0.0

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._client.close()

    def _rate_limit(self):
        """Ensure we don't exceed rate limits."""
        limit = API_RATE_LIMITS["nominatim"]
        interval = limit["period_seconds"] / limit["requests"]
        elapsed = time.time() - self._last_request_time
        if elapsed < interval:
            time.sleep(interval - elapsed)
        self._last_request_time = time.time()

    def _get(self, path: str, params: Dict[str, Any]) -> Any:
        self._rate_limit()
        try:
            response = self._client.get(f"{self.base_url}/{path}", params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise GeocodingError(
                f"Nominatim {path} failed with HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise GeocodingError(f"Nominatim {path} failed: {e}") from e
        except ValueError as e:
            raise GeocodingError(f"Nominatim {path} returned invalid JSON") from e

    def search(self, query: str, limit: int = 5) -> List[Place]:
        """
        Forward geocode free text.

        Queries shorter than 3 characters return no suggestions.

        Args:
            query: Free-text location
            limit: Maximum number of places

        Returns:
            List of Place objects
        """
        query = (query or "").strip()
        if len(query) < self.MIN_QUERY_LENGTH:
            return []

        data = self._get("search", {"q": query, "format": "json", "limit": limit})

        places = []
        for item in data or []:
            try:
                places.append(Place(
                    display_name=item["display_name"],
                    latitude=float(item["lat"]),
                    longitude=float(item["lon"]),
                    place_type=item.get("type"),
                ))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed place: {e}")

        logger.info(f"Geocoded '{query}': {len(places)} places")
        return places

    def reverse(self, latitude: float, longitude: float) -> str:
        """
        Reverse geocode coordinates to an address.

        Returns:
            Display name, or "lat, lon" when no address is known
        """
        data = self._get("reverse", {"format": "json", "lat": latitude, "lon": longitude})
        address = data.get("display_name") if isinstance(data, dict) else None
        return address or f"{latitude}, {longitude}"
