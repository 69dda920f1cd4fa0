"""HTTP client for the Keycloak Admin API.

Authenticates with a service account (client credentials grant) and renews
the access token shortly before it expires.
"""
from __future__ import annotations
import os
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import requests

from .exceptions import KeycloakAPIError

REQUEST_TIMEOUT = 5
TOKEN_REFRESH_MARGIN = timedelta(seconds=10)


class KeycloakClient:
    """Admin API client bound to one Keycloak base URL.

    Usage:
        client = KeycloakClient("http://keycloak:8080")
        client.authenticate_service_account("master", "automation-cli", "secret")
        response = client.get("/admin/realms/demo/roles/staff")
    """

    def __init__(self, base_url: Optional[str] = None, session: Optional[requests.Session] = None):
        """
        Args:
            base_url: Keycloak base URL (defaults to KEYCLOAK_URL env var)
            session: Optional requests session (one is created otherwise)
        """
        self.base_url = (base_url or os.environ.get("KEYCLOAK_URL", "http://keycloak:8080")).rstrip("/")
        self.session = session or requests.Session()
        self._token: Optional[str] = None
        self._token_expires_at: Optional[datetime] = None
        self._credentials: Optional[Dict[str, str]] = None

    def authenticate_service_account(self, auth_realm: str, client_id: str, client_secret: str) -> str:
        """Obtain a token and remember the credentials for later renewal.

        Returns:
            Access token
        """
        self._credentials = {
            "auth_realm": auth_realm,
            "client_id": client_id,
            "client_secret": client_secret,
        }
        self._refresh_token()
        return self._token

    def set_token(self, token: str, expires_in: int = 3600) -> None:
        """Use a pre-obtained access token; it is not renewed."""
        self._token = token
        self._token_expires_at = datetime.now() + timedelta(seconds=expires_in)

    def _refresh_token(self) -> None:
        payload = self._get_service_account_token(**self._credentials)
        self.set_token(payload["access_token"], int(payload.get("expires_in", 60)))

    def _ensure_authenticated(self) -> None:
        if not self._token or not self._token_expires_at:
            raise KeycloakAPIError(401, "Not authenticated - call authenticate_service_account first", "")
        if self._credentials and datetime.now() >= self._token_expires_at - TOKEN_REFRESH_MARGIN:
            self._refresh_token()

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        self._ensure_authenticated()
        headers = kwargs.pop("headers", {})
        headers["Authorization"] = f"Bearer {self._token}"
        resp = self.session.request(
            method,
            f"{self.base_url}{path}",
            headers=headers,
            timeout=REQUEST_TIMEOUT,
            **kwargs,
        )
        if resp.status_code >= 400:
            raise KeycloakAPIError(resp.status_code, resp.text, resp.url)
        return resp

    def get(self, path: str, params: Optional[Dict] = None, **kwargs) -> requests.Response:
        """GET an Admin API path.

        Raises:
            KeycloakAPIError: On HTTP error
        """
        return self._request("GET", path, params=params, **kwargs)

    def post(self, path: str, json: Optional[Any] = None, **kwargs) -> requests.Response:
        """POST a JSON body to an Admin API path.

        Raises:
            KeycloakAPIError: On HTTP error
        """
        return self._request("POST", path, json=json, **kwargs)

    def _get_service_account_token(self, auth_realm: str, client_id: str, client_secret: str) -> Dict[str, Any]:
        """Run the client credentials grant and return the token response."""
        url = f"{self.base_url}/realms/{auth_realm}/protocol/openid-connect/token"
        resp = self.session.post(
            url,
            data={
                "grant_type": "client_credentials",
                "client_id": client_id,
                "client_secret": client_secret,
            },
            timeout=REQUEST_TIMEOUT,
        )
        if resp.status_code != 200:
            raise KeycloakAPIError(resp.status_code, resp.text, url)
        return resp.json()


# ─────────────────────────────────────────────────────────────────────────────
# CLI helpers
# ─────────────────────────────────────────────────────────────────────────────
def get_service_account_token(kc_url: str, auth_realm: str, client_id: str, client_secret: str) -> str:
    """Fetch a service account access token."""
    return KeycloakClient(kc_url)._get_service_account_token(auth_realm, client_id, client_secret)["access_token"]


def create_client_with_token(kc_url: str, token: str, expires_in: int = 3600) -> KeycloakClient:
    """Create a KeycloakClient around a pre-obtained access token."""
    client = KeycloakClient(kc_url)
    client.set_token(token, expires_in)
    return client
