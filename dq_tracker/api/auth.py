"""
FastAPI router module for account and session management.

All credential handling is delegated to the hosted identity service through
IdentityClient; this module only checks request shape and shapes responses.

Key Endpoints:
- POST /auth/signup  - Create an account (public)
- POST /auth/signin  - Exchange email/password for a session (public)
- POST /auth/refresh - Exchange a refresh token for a new session (public)
- POST /auth/signout - Revoke the caller's session (bearer)
- GET  /auth/me      - Return the caller's identity (bearer)

Response Shapes:
- signup:  201 { success, message, user: {id, email} }
- signin:  { success, message, user: {id, email, full_name},
             session: {access_token, refresh_token, expires_at} }
- refresh: same as signin
- signout: { success, message }
- me:      { success, user: {id, email, full_name} }
"""

import logging

from fastapi import APIRouter, status

from dq_tracker.core.dependencies import (
    BearerTokenDep,
    CurrentUserDep,
    IdentityClientDep,
)
from dq_tracker.core.errors import (
    ApiError,
    IdentityServiceError,
    InvalidInput,
    Unauthenticated,
)
from dq_tracker.models.schemas import (
    AuthSession,
    RefreshRequest,
    SignInRequest,
    SignUpRequest,
)


# =============================================================================
# Module Configuration
# =============================================================================

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH: int = 8

router = APIRouter()


# =============================================================================
# Helper Functions
# =============================================================================


def _session_response(auth: AuthSession, message: str) -> dict:
    return {
        "success": True,
        "message": message,
        "user": auth.user.to_public(),
        "session": {
            "access_token": auth.session.access_token,
            "refresh_token": auth.session.refresh_token,
            "expires_at": auth.session.expires_at,
        },
    }


def _is_rejection(error: IdentityServiceError) -> bool:
    # 4xx: the service answered and refused; anything else is an outage
    return 400 <= error.status_code < 500


def _default_full_name(email: str) -> str:
    return email.split("@")[0]


# =============================================================================
# Public Endpoints
# =============================================================================


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(body: SignUpRequest, identity: IdentityClientDep) -> dict:
    """
    Create an account.

    full_name defaults to the local part of the email address.

    Raises:
        InvalidInput 400: Email/password missing, password shorter than 8
            characters, or the identity service rejected the signup (its
            message is passed through).
        ApiError 500: The identity service was unreachable or failed.
    """
    if not body.email or not body.password:
        raise InvalidInput("Email and password are required")

    if len(body.password) < MIN_PASSWORD_LENGTH:
        raise InvalidInput(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    try:
        user = await identity.sign_up(
            email=body.email,
            password=body.password,
            full_name=body.full_name or _default_full_name(body.email),
        )
    except IdentityServiceError as e:
        if not _is_rejection(e):
            logger.error(f"Signup failed for {body.email}: {e.message} (status {e.status_code})")
            raise ApiError("Signup failed") from e
        logger.warning(f"Signup rejected for {body.email}: {e.message}")
        raise InvalidInput(e.message) from e

    logger.info(f"Account created: id={user.id}")
    return {
        "success": True,
        "message": "Account created successfully",
        "user": {"id": user.id, "email": user.email},
    }


@router.post("/signin")
async def signin(body: SignInRequest, identity: IdentityClientDep) -> dict:
    """
    Sign in with email and password.

    Raises:
        InvalidInput 400: Email or password missing.
        Unauthenticated 401: Credentials rejected.
        ApiError 500: The identity service was unreachable or failed.
    """
    if not body.email or not body.password:
        raise InvalidInput("Email and password are required")

    try:
        auth = await identity.sign_in(email=body.email, password=body.password)
    except IdentityServiceError as e:
        if not _is_rejection(e):
            logger.error(f"Signin failed for {body.email}: {e.message} (status {e.status_code})")
            raise ApiError("Login failed") from e
        logger.warning(f"Signin rejected for {body.email}: {e.message}")
        raise Unauthenticated("Invalid credentials") from e

    return _session_response(auth, "Logged in successfully")


@router.post("/refresh")
async def refresh(body: RefreshRequest, identity: IdentityClientDep) -> dict:
    """
    Exchange a refresh token for a new session.

    Raises:
        InvalidInput 400: refresh_token missing.
        Unauthenticated 401: Refresh token rejected.
        ApiError 500: The identity service was unreachable or failed.
    """
    if not body.refresh_token:
        raise InvalidInput("Refresh token is required")

    try:
        auth = await identity.refresh_session(body.refresh_token)
    except IdentityServiceError as e:
        if not _is_rejection(e):
            logger.error(f"Session refresh failed: {e.message} (status {e.status_code})")
            raise ApiError("Session refresh failed") from e
        logger.warning(f"Session refresh rejected: {e.message}")
        raise Unauthenticated("Invalid refresh token") from e

    return _session_response(auth, "Session refreshed successfully")


# =============================================================================
# Authenticated Endpoints
# =============================================================================


@router.post("/signout")
async def signout(user: CurrentUserDep, token: BearerTokenDep, identity: IdentityClientDep) -> dict:
    """
    Revoke the caller's session on the identity service.

    Raises:
        ApiError 500: The identity service failed to revoke the session.
    """
    try:
        await identity.sign_out(token)
    except IdentityServiceError as e:
        logger.error(f"Signout failed for {user.id}: {e.message}")
        raise ApiError("Logout failed") from e

    logger.info(f"Signed out: id={user.id}")
    return {"success": True, "message": "Logged out successfully"}


@router.get("/me")
async def me(user: CurrentUserDep) -> dict:
    """Return the identity the bearer token resolves to."""
    return {"success": True, "user": user.to_public()}


__all__ = ["router"]
