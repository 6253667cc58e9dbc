"""
Supabase Auth (GoTrue) REST API client.

The identity service owns users, passwords and sessions; this backend only
forwards credentials and bearer tokens to it. One IdentityClient is created in
the FastAPI lifespan, stored on `app.state.identity`, and injected into the
auth gateway and auth routes.

Endpoints used (relative to {SUPABASE_URL}/auth/v1):
- GET  /user                              -> verify a bearer token
- POST /signup                            -> create an account
- POST /token?grant_type=password         -> sign in
- POST /token?grant_type=refresh_token    -> refresh a session
- POST /logout                            -> revoke the caller's session

Every request carries the project's anon key in the `apikey` header.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from dq_tracker.core.config import Settings
from dq_tracker.core.errors import IdentityServiceError, Unauthenticated
from dq_tracker.models.schemas import AuthSession, Identity, SessionTokens

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 10.0


def _error_message(response: httpx.Response) -> str:
    """Pull the human-readable error out of a GoTrue error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        for key in ("msg", "error_description", "message", "error"):
            if body.get(key):
                return str(body[key])
    return f"HTTP {response.status_code}"


class IdentityClient:
    """Async client for the Supabase Auth REST API."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = _DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={"apikey": api_key, "Accept": "application/json"},
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "IdentityClient":
        return cls(
            base_url=settings.auth_base_url,
            api_key=settings.supabase_anon_key,
            timeout=settings.identity_timeout,
        )

    async def close(self) -> None:
        await self._client.aclose()

    # =========================================================================
    # Internal request helper
    # =========================================================================

    async def _request(
        self,
        method: str,
        path: str,
        *,
        token: Optional[str] = None,
        params: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        headers = {"Authorization": f"Bearer {token}"} if token else None
        try:
            return await self._client.request(method, path, params=params, json=json, headers=headers)
        except httpx.HTTPError as e:
            logger.error("Identity service %s %s failed: %s", method, path, e)
            raise IdentityServiceError() from e

    def _session_from(self, body: Dict[str, Any]) -> AuthSession:
        return AuthSession(
            user=Identity.model_validate(body["user"]),
            session=SessionTokens.model_validate(body),
        )

    # =========================================================================
    # Token verification
    # =========================================================================

    async def verify_token(self, token: str) -> Identity:
        """
        Resolve a bearer token to the identity it was issued to.

        Raises:
            Unauthenticated: The token is blank, rejected, or cannot be verified
                (including transport failures).
        """
        if not token or not token.strip():
            raise Unauthenticated("Invalid or expired authentication token")

        try:
            response = await self._request("GET", "/user", token=token)
        except IdentityServiceError as e:
            raise Unauthenticated("Invalid or expired authentication token") from e

        if response.status_code != 200:
            logger.warning("Token rejected by identity service: %s", _error_message(response))
            raise Unauthenticated("Invalid or expired authentication token")

        body = response.json()
        if not isinstance(body, dict) or not body.get("id"):
            logger.warning("Identity service returned no user for token")
            raise Unauthenticated("Invalid or expired authentication token")

        return Identity.model_validate(body)

    # =========================================================================
    # Account / session operations
    # =========================================================================

    async def sign_up(self, email: str, password: str, full_name: str) -> Identity:
        """
        Create an account.

        Depending on the project's email-confirmation setting, GoTrue answers
        either with the bare user or with a session wrapping it.
        """
        response = await self._request(
            "POST",
            "/signup",
            json={"email": email, "password": password, "data": {"full_name": full_name}},
        )
        if response.status_code >= 400:
            raise IdentityServiceError(_error_message(response), status_code=response.status_code)

        body = response.json()
        user = body.get("user") if isinstance(body.get("user"), dict) else body
        return Identity.model_validate(user)

    async def sign_in(self, email: str, password: str) -> AuthSession:
        response = await self._request(
            "POST",
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        if response.status_code >= 400:
            raise IdentityServiceError(_error_message(response), status_code=response.status_code)
        return self._session_from(response.json())

    async def refresh_session(self, refresh_token: str) -> AuthSession:
        response = await self._request(
            "POST",
            "/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": refresh_token},
        )
        if response.status_code >= 400:
            raise IdentityServiceError(_error_message(response), status_code=response.status_code)
        return self._session_from(response.json())

    async def sign_out(self, token: str) -> None:
        """Revoke the session the token belongs to."""
        response = await self._request("POST", "/logout", token=token)
        if response.status_code >= 400:
            raise IdentityServiceError(_error_message(response), status_code=response.status_code)


__all__ = ["IdentityClient"]
