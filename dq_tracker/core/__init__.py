"""
Core infrastructure package for the Data Quality Tracker backend.

Provides:
- Configuration management via pydantic-settings
- The asyncpg-backed Database store handle
- The httpx-backed IdentityClient for the hosted auth service
- The error taxonomy rendered into the JSON envelope
- FastAPI dependency injection utilities, including the auth gateway

Re-exports let callers write:

    from dq_tracker.core import get_settings, Database, CurrentUserDep
"""

from dq_tracker.core.config import Settings, get_settings

from dq_tracker.core.database import Database

from dq_tracker.core.identity import IdentityClient

from dq_tracker.core.errors import (
    ApiError,
    Unauthenticated,
    InvalidInput,
    NotFound,
    PersistenceError,
    Unavailable,
    IdentityServiceError,
)

from dq_tracker.core.dependencies import (
    get_database,
    get_identity_client,
    get_settings_dependency,
    get_bearer_token,
    get_current_user,
    DatabaseDep,
    IdentityClientDep,
    SettingsDep,
    BearerTokenDep,
    CurrentUserDep,
)

__all__ = [
    # Configuration
    'Settings',
    'get_settings',
    # Store / identity handles
    'Database',
    'IdentityClient',
    # Errors
    'ApiError',
    'Unauthenticated',
    'InvalidInput',
    'NotFound',
    'PersistenceError',
    'Unavailable',
    'IdentityServiceError',
    # Dependencies
    'get_database',
    'get_identity_client',
    'get_settings_dependency',
    'get_bearer_token',
    'get_current_user',
    'DatabaseDep',
    'IdentityClientDep',
    'SettingsDep',
    'BearerTokenDep',
    'CurrentUserDep',
]
