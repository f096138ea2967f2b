"""
CrimeWatch Triage - Identity Client
Email/password accounts via the Firebase Auth REST API.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from src.core.config import settings
from src.core.errors import IdentityError

logger = logging.getLogger(__name__)


@dataclass
class AuthSession:
    """Signed-in identity."""
    uid: str
    email: str
    id_token: str
    refresh_token: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "uid": self.uid,
            "email": self.email,
            "id_token": self.id_token,
            "refresh_token": self.refresh_token,
        }


class IdentityClient:
    """
    Register, sign in and reset passwords.

    Credential storage and verification stay with the identity provider.
    """

    BASE_URL = "https://identitytoolkit.googleapis.com/v1"

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None
    ):
        self.api_key = api_key or settings.firebase_api_key
        if not self.api_key:
            raise ValueError("Firebase API key not configured")

        self.timeout = timeout
        self._client = client or httpx.Client(timeout=timeout)

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self._client.close()

    def _call(self, action: str, body: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self._client.post(
                f"{self.BASE_URL}/accounts:{action}",
                params={"key": self.api_key},
                json=body,
            )
        except httpx.HTTPError as e:
            raise IdentityError(f"Identity request {action} failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise IdentityError(
                f"Identity request {action} returned invalid JSON",
                status_code=response.status_code,
            ) from e

        if response.is_error:
            error = data.get("error", {}) if isinstance(data, dict) else {}
            code = error.get("message", "UNKNOWN_ERROR")
            raise IdentityError(
                f"Identity request {action} rejected: {code}",
                code=code,
                status_code=response.status_code,
            )

        return data

    def _session(self, data: Dict[str, Any]) -> AuthSession:
        return AuthSession(
            uid=data["localId"],
            email=data.get("email", ""),
            id_token=data["idToken"],
            refresh_token=data.get("refreshToken"),
        )

    def sign_up(self, email: str, password: str) -> AuthSession:
        """Create an account and sign it in."""
        data = self._call("signUp", {
            "email": email,
            "password": password,
            "returnSecureToken": True,
        })
        logger.info(f"Registered user {data.get('localId')}")
        return self._session(data)

    def sign_in(self, email: str, password: str) -> AuthSession:
        """Sign in with email and password."""
        data = self._call("signInWithPassword", {
            "email": email,
            "password": password,
            "returnSecureToken": True,
        })
        return self._session(data)

    def send_password_reset(self, email: str) -> None:
        """Ask the provider to email a password reset link."""
        self._call("sendOobCode", {"requestType": "PASSWORD_RESET", "email": email})
        logger.info("Password reset email requested")

    def sign_out(self, session: AuthSession) -> None:
        """Sign out locally; ID tokens are bearer tokens that simply expire."""
        session.id_token = ""
        session.refresh_token = None
