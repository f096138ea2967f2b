"""
Realtime database connection for CrimeWatch Triage
Thin REST client for a Firebase Realtime Database
"""

import logging
from typing import Any, Optional

import httpx

from src.core.config import settings
from src.core.errors import DocumentStoreError

logger = logging.getLogger(__name__)


class RealtimeDatabase:
    """
    Hierarchical key-value document store accessed over REST.

    Every node is addressed by a slash path and read/written as JSON at
    `{database_url}/{path}.json`.

    Usage:
        with RealtimeDatabase("https://my-app.firebaseio.com") as db:
            report = db.get("crimes/-Nabc123")
    """

    def __init__(
        self,
        database_url: Optional[str] = None,
        auth_token: Optional[str] = None,
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None
    ):
        """
        Initialize database connection.

        Args:
            database_url: Root URL of the database
            auth_token: ID token or database secret sent as `auth`
            timeout: HTTP request timeout in seconds
            client: Optional pre-configured HTTP client
        """
        self.database_url = (database_url or settings.firebase_database_url or "").rstrip("/")
        if not self.database_url:
            raise ValueError("Realtime database URL not configured")

        self.auth_token = auth_token if auth_token is not None else settings.firebase_auth_token
        self.timeout = timeout
        self._client = client or httpx.Client(timeout=timeout)

        logger.info(f"Realtime database initialized: {self.database_url}")

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def close(self) -> None:
        self._client.close()

    def _url(self, path: str) -> str:
        path = path.strip("/")
        if not path:
            return f"{self.database_url}/.json"
        return f"{self.database_url}/{path}.json"

    def _params(self) -> dict:
        return {"auth": self.auth_token} if self.auth_token else {}

    def _send(self, method: str, path: str, value: Any = None) -> Any:
        """Send a request and decode the JSON body."""
        try:
            response = self._client.request(
                method,
                self._url(path),
                params=self._params(),
                json=value if method != "GET" else None,
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise DocumentStoreError(
                f"{method} {path} failed with HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise DocumentStoreError(f"{method} {path} failed: {e}") from e
        except ValueError as e:
            raise DocumentStoreError(f"{method} {path} returned invalid JSON") from e

    def get(self, path: str) -> Any:
        """Read a node; None when it does not exist."""
        return self._send("GET", path)

    def set(self, path: str, value: Any) -> Any:
        """Overwrite a node."""
        logger.debug(f"Writing {path}")
        return self._send("PUT", path, value)

    def update(self, path: str, values: dict) -> Any:
        """Merge children into a node."""
        return self._send("PATCH", path, values)

    def push(self, path: str, value: Any) -> str:
        """
        Append a child under a generated key.

        Returns:
            The generated key
        """
        data = self._send("POST", path, value)
        if not isinstance(data, dict) or "name" not in data:
            raise DocumentStoreError(f"POST {path} returned no generated key")

        logger.info(f"Created {path}/{data['name']}")
        return data["name"]
