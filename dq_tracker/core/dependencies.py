"""
FastAPI dependency injection module for the Data Quality Tracker backend.

This module provides reusable FastAPI dependencies for the store handle,
the identity client, configuration access, and authentication.

Key Dependencies Provided:
- get_database: Returns the Database handle created at startup
- get_identity_client: Returns the IdentityClient created at startup
- get_settings_dependency: Returns the cached Settings singleton
- get_bearer_token: Extracts the bearer token from the Authorization header
- get_current_user: Auth gateway - verifies the token and returns the Identity

Type aliases (DatabaseDep, IdentityClientDep, SettingsDep, BearerTokenDep,
CurrentUserDep) let endpoints declare what they need by annotation.

The store and identity handles live on `app.state` and are set by the
lifespan in dq_tracker.main. Tests replace them with
`app.dependency_overrides[get_database] = lambda: mock_db`.

Usage Examples:
    @router.get("/issues/{issue_id}")
    async def get_issue(
        issue_id: str,
        db: DatabaseDep,
        user: CurrentUserDep,
    ) -> dict:
        ...
"""

import logging
from typing import Annotated

from fastapi import Depends, Request

from dq_tracker.core.config import Settings, get_settings
from dq_tracker.core.database import Database
from dq_tracker.core.errors import Unauthenticated
from dq_tracker.core.identity import IdentityClient
from dq_tracker.models.schemas import Identity


logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


# =============================================================================
# Store / Client Handles
# =============================================================================

def get_database(request: Request) -> Database:
    """
    Return the Database handle attached to the application at startup.

    Resolving this dependency does not touch the database; connections are
    acquired per query by the handle itself.
    """
    return request.app.state.database


def get_identity_client(request: Request) -> IdentityClient:
    """Return the IdentityClient attached to the application at startup."""
    return request.app.state.identity


def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    Thin wrapper around get_settings() so tests can use
    app.dependency_overrides[get_settings_dependency].
    """
    return get_settings()


# =============================================================================
# Authentication (Auth Gateway)
# =============================================================================

def get_bearer_token(request: Request) -> str:
    """
    Extract the bearer token from the Authorization header.

    Raises:
        Unauthenticated: Header missing or not of the form "Bearer <token>".
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith(BEARER_PREFIX):
        logger.warning(f"Missing bearer token on {request.method} {request.url.path}")
        raise Unauthenticated("Authentication token required")
    return auth_header[len(BEARER_PREFIX):].strip()


async def get_current_user(
    token: Annotated[str, Depends(get_bearer_token)],
    identity: Annotated[IdentityClient, Depends(get_identity_client)],
) -> Identity:
    """
    Verify the caller's bearer token against the identity service.

    The token is re-verified on every request; nothing is cached locally.

    Returns:
        Identity: The resolved caller (id, email, user_metadata).

    Raises:
        Unauthenticated: Token missing, malformed, rejected or unverifiable.
    """
    return await identity.verify_token(token)


# =============================================================================
# Type Aliases for Dependency Injection
# =============================================================================

DatabaseDep = Annotated[Database, Depends(get_database)]

IdentityClientDep = Annotated[IdentityClient, Depends(get_identity_client)]

SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]

BearerTokenDep = Annotated[str, Depends(get_bearer_token)]

CurrentUserDep = Annotated[Identity, Depends(get_current_user)]
