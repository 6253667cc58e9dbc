"""
Package initialization file for dq_tracker models.

Re-exports the Pydantic schemas and enumerations so other modules can import
them from dq_tracker.models directly.
"""

from dq_tracker.models.enums import IssueStatus, SortOrder

from dq_tracker.models.schemas import (
    Identity,
    SessionTokens,
    AuthSession,
    SignUpRequest,
    SignInRequest,
    RefreshRequest,
    IssueCreate,
    IssueUpdate,
    Pagination,
    OverallStats,
)

__all__ = [
    # Enums
    "IssueStatus",
    "SortOrder",
    # Identity / auth
    "Identity",
    "SessionTokens",
    "AuthSession",
    "SignUpRequest",
    "SignInRequest",
    "RefreshRequest",
    # Issues
    "IssueCreate",
    "IssueUpdate",
    # Responses
    "Pagination",
    "OverallStats",
]
