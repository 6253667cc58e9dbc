"""
Tests for the Supabase Auth REST client.

The identity service is replaced by an httpx.MockTransport, so requests are
inspected exactly as they would go on the wire (path, query, headers, body).
"""

import json
from typing import Callable, List

import httpx
import pytest

from dq_tracker.core.errors import IdentityServiceError, Unauthenticated
from dq_tracker.core.identity import IdentityClient

from dq_tracker.tests.conftest import TEST_USER_ID


pytestmark = pytest.mark.asyncio

BASE_URL = "https://test-project.supabase.co/auth/v1"

USER_BODY = {
    "id": TEST_USER_ID,
    "email": "analyst@example.com",
    "user_metadata": {"full_name": "Data Analyst"},
    "aud": "authenticated",
}

SESSION_BODY = {
    "access_token": "access-123",
    "refresh_token": "refresh-456",
    "expires_at": 1792400000,
    "expires_in": 3600,
    "token_type": "bearer",
    "user": USER_BODY,
}


def make_client(handler: Callable[[httpx.Request], httpx.Response], seen: List[httpx.Request]) -> IdentityClient:
    def record(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    return IdentityClient(BASE_URL, "anon-key", transport=httpx.MockTransport(record))


# =============================================================================
# Token verification
# =============================================================================

class TestVerifyToken:

    async def test_valid_token_resolves_identity(self) -> None:
        seen: List[httpx.Request] = []
        client = make_client(lambda request: httpx.Response(200, json=USER_BODY), seen)

        identity = await client.verify_token("access-123")
        await client.close()

        assert identity.id == TEST_USER_ID
        assert identity.full_name == "Data Analyst"
        request = seen[0]
        assert request.method == "GET"
        assert request.url.path == "/auth/v1/user"
        assert request.headers["Authorization"] == "Bearer access-123"
        assert request.headers["apikey"] == "anon-key"

    async def test_rejected_token(self) -> None:
        seen: List[httpx.Request] = []
        client = make_client(lambda request: httpx.Response(401, json={"msg": "invalid JWT"}), seen)

        with pytest.raises(Unauthenticated) as exc_info:
            await client.verify_token("expired")
        await client.close()

        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Invalid or expired authentication token"

    async def test_blank_token_never_calls_service(self) -> None:
        seen: List[httpx.Request] = []
        client = make_client(lambda request: httpx.Response(200, json=USER_BODY), seen)

        with pytest.raises(Unauthenticated):
            await client.verify_token("   ")
        await client.close()

        assert seen == []

    async def test_unreachable_service_is_unauthenticated(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler, [])

        with pytest.raises(Unauthenticated):
            await client.verify_token("access-123")
        await client.close()


# =============================================================================
# Account / session operations
# =============================================================================

class TestAccountOperations:

    async def test_sign_up_sends_full_name_metadata(self) -> None:
        seen: List[httpx.Request] = []
        client = make_client(lambda request: httpx.Response(200, json=USER_BODY), seen)

        identity = await client.sign_up("analyst@example.com", "s3cretpass", "Data Analyst")
        await client.close()

        body = json.loads(seen[0].content)
        assert seen[0].url.path == "/auth/v1/signup"
        assert body["data"] == {"full_name": "Data Analyst"}
        assert identity.email == "analyst@example.com"

    async def test_sign_up_accepts_session_wrapped_user(self) -> None:
        client = make_client(lambda request: httpx.Response(200, json=SESSION_BODY), [])

        identity = await client.sign_up("analyst@example.com", "s3cretpass", "Data Analyst")
        await client.close()

        assert identity.id == TEST_USER_ID

    async def test_sign_up_rejection_carries_service_message(self) -> None:
        client = make_client(
            lambda request: httpx.Response(422, json={"msg": "User already registered"}),
            [],
        )

        with pytest.raises(IdentityServiceError) as exc_info:
            await client.sign_up("analyst@example.com", "s3cretpass", "Data Analyst")
        await client.close()

        assert exc_info.value.message == "User already registered"
        assert exc_info.value.status_code == 422

    async def test_sign_in_uses_password_grant(self) -> None:
        seen: List[httpx.Request] = []
        client = make_client(lambda request: httpx.Response(200, json=SESSION_BODY), seen)

        auth = await client.sign_in("analyst@example.com", "s3cretpass")
        await client.close()

        assert seen[0].url.path == "/auth/v1/token"
        assert seen[0].url.params["grant_type"] == "password"
        assert auth.session.access_token == "access-123"
        assert auth.session.refresh_token == "refresh-456"
        assert auth.user.to_public() == {
            "id": TEST_USER_ID,
            "email": "analyst@example.com",
            "full_name": "Data Analyst",
        }

    async def test_sign_in_bad_credentials(self) -> None:
        client = make_client(
            lambda request: httpx.Response(
                400,
                json={"error": "invalid_grant", "error_description": "Invalid login credentials"},
            ),
            [],
        )

        with pytest.raises(IdentityServiceError) as exc_info:
            await client.sign_in("analyst@example.com", "wrong-password")
        await client.close()

        assert exc_info.value.message == "Invalid login credentials"

    async def test_refresh_uses_refresh_token_grant(self) -> None:
        seen: List[httpx.Request] = []
        client = make_client(lambda request: httpx.Response(200, json=SESSION_BODY), seen)

        await client.refresh_session("refresh-456")
        await client.close()

        assert seen[0].url.params["grant_type"] == "refresh_token"
        assert json.loads(seen[0].content) == {"refresh_token": "refresh-456"}

    async def test_sign_out_sends_bearer(self) -> None:
        seen: List[httpx.Request] = []
        client = make_client(lambda request: httpx.Response(204), seen)

        await client.sign_out("access-123")
        await client.close()

        assert seen[0].url.path == "/auth/v1/logout"
        assert seen[0].headers["Authorization"] == "Bearer access-123"

    async def test_sign_out_failure(self) -> None:
        client = make_client(lambda request: httpx.Response(500, text="upstream exploded"), [])

        with pytest.raises(IdentityServiceError):
            await client.sign_out("access-123")
        await client.close()
