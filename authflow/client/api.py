"""
Async HTTP client for the authentication API.

Attaches the stored bearer token to every request, the way the SPA's axios
interceptor does, and persists the session on login and token refresh.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from authflow.client.session_store import ClientSessionStore

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Non-2xx response from the API."""

    def __init__(
        self,
        status_code: int,
        message: str,
        errors: Optional[Dict[str, List[str]]] = None,
        code: Optional[str] = None,
    ):
        self.status_code = status_code
        self.message = message
        self.errors = errors or {}
        self.code = code
        super().__init__(f"{status_code}: {message}")

    @property
    def is_unauthenticated(self) -> bool:
        return self.status_code == 401


def _raise_for_status(response: httpx.Response) -> None:
    if not response.is_error:
        return

    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    raise ApiError(
        status_code=response.status_code,
        message=body.get("message") or response.reason_phrase,
        errors=body.get("errors"),
        code=body.get("code"),
    )


class AuthApiClient:
    def __init__(self, http: httpx.AsyncClient, sessions: ClientSessionStore):
        self.http = http
        self.sessions = sessions

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        token = self.sessions.get_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _request(self, method: str, path: str, json: Optional[dict] = None) -> Any:
        response = await self.http.request(method, path, json=json, headers=self._headers())
        _raise_for_status(response)
        return response.json()

    async def register(self, name: str, email: str, password: str, password_confirmation: str) -> str:
        """Create an account. Nothing is stored: the account still has to be verified."""
        body = await self._request("POST", "/register", json={
            "name": name,
            "email": email,
            "password": password,
            "password_confirmation": password_confirmation,
        })
        return body["message"]

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        body = await self._request("POST", "/login", json={"email": email, "password": password})
        self.sessions.save(body["user"], body["token"])
        return body["user"]

    async def logout(self) -> None:
        await self._request("POST", "/logout")

    async def me(self) -> Dict[str, Any]:
        return await self._request("GET", "/me")

    async def refresh(self) -> str:
        body = await self._request("POST", "/refresh")
        self.sessions.replace_token(body["token"])
        return body["token"]

    async def dashboard(self) -> str:
        body = await self._request("GET", "/dashboard")
        return body["message"]

    async def resend_verification(self, email: str) -> str:
        body = await self._request("POST", "/email/verification-notification", json={"email": email})
        return body["message"]
