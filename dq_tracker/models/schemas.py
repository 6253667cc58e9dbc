"""
Pydantic request/response models for the Data Quality Tracker API.

Request models are deliberately permissive about *presence*: the issue-create
body declares every field optional so the validation layer can report all
missing required fields in one response rather than letting Pydantic reject
the body on the first one. Types and enum membership (status, integer ids and
scores) are still enforced by Pydantic.

All models use Pydantic v2 syntax.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from dq_tracker.models.enums import IssueStatus


def _blank_to_none(value: Any) -> Any:
    # HTML selects and number inputs post "" for "no value"
    if isinstance(value, str) and not value.strip():
        return None
    return value


# =============================================================================
# Identity Models
# =============================================================================


class Identity(BaseModel):
    """
    Caller identity resolved from a bearer token by the identity service.

    Only `id` is persisted (as `created_by` on issues); email and metadata are
    echoed back by the auth routes.
    """
    model_config = ConfigDict(extra='ignore')

    id: str
    email: Optional[str] = None
    user_metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def full_name(self) -> Optional[str]:
        return self.user_metadata.get("full_name")

    def to_public(self) -> Dict[str, Any]:
        return {"id": self.id, "email": self.email, "full_name": self.full_name}


class SessionTokens(BaseModel):
    """Tokens issued by the identity service on sign in or refresh."""
    model_config = ConfigDict(extra='ignore')

    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None


class AuthSession(BaseModel):
    user: Identity
    session: SessionTokens


# =============================================================================
# Auth Request Models
# =============================================================================


class SignUpRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    full_name: Optional[str] = None


class SignInRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class RefreshRequest(BaseModel):
    refresh_token: Optional[str] = None


# =============================================================================
# Issue Request Models
# =============================================================================


class IssueCreate(BaseModel):
    """
    Body of POST /api/issues.

    The four required strings are checked by
    dq_tracker.services.validation.parse_issue_payload, which reads
    the raw body before this model is built.
    """
    model_config = ConfigDict(
        extra='ignore',
        json_schema_extra={
            "example": {
                "dataset_name": "customer_orders",
                "description": "Null order_date on ~2% of rows since 2026-09-01",
                "owner": "data-platform",
                "issue_type": "Missing values",
                "category_id": 2,
                "severity_id": 3,
                "accuracy_score": 4,
                "completeness_score": 2,
                "timeliness_score": 5,
                "status": "open",
            }
        },
    )

    dataset_name: Optional[str] = None
    description: Optional[str] = None
    owner: Optional[str] = None
    issue_type: Optional[str] = None
    category_id: Optional[int] = None
    severity_id: Optional[int] = None
    accuracy_score: Optional[int] = None
    completeness_score: Optional[int] = None
    timeliness_score: Optional[int] = None
    status: Optional[IssueStatus] = None

    @field_validator(
        'category_id',
        'severity_id',
        'accuracy_score',
        'completeness_score',
        'timeliness_score',
        'status',
        mode='before',
    )
    @classmethod
    def _empty_string_is_none(cls, value: Any) -> Any:
        return _blank_to_none(value)


class IssueUpdate(BaseModel):
    """
    Body of PUT /api/issues/{id}: any subset of issue fields.

    Extra keys are kept so the repository can strip the immutable ones
    (id, created_at, created_by) and drop anything that is not a writable column.
    """
    model_config = ConfigDict(extra='allow')

    dataset_name: Optional[str] = None
    description: Optional[str] = None
    owner: Optional[str] = None
    issue_type: Optional[str] = None
    category_id: Optional[int] = None
    severity_id: Optional[int] = None
    accuracy_score: Optional[int] = None
    completeness_score: Optional[int] = None
    timeliness_score: Optional[int] = None
    status: Optional[IssueStatus] = None

    @field_validator(
        'category_id',
        'severity_id',
        'accuracy_score',
        'completeness_score',
        'timeliness_score',
        mode='before',
    )
    @classmethod
    def _empty_string_is_none(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator('status')
    @classmethod
    def _status_not_null(cls, value: Optional[IssueStatus]) -> IssueStatus:
        # status is always one of the enum values; it can be changed, never cleared
        if value is None:
            raise ValueError("status cannot be null")
        return value

    def changes(self) -> Dict[str, Any]:
        """Fields the client actually sent, with enums reduced to their values."""
        return self.model_dump(exclude_unset=True, mode='json')


# =============================================================================
# Response Models
# =============================================================================


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int


class OverallStats(BaseModel):
    """
    Overall dashboard statistics.

    The averages are two-decimal strings when at least one issue has a value
    for that score, and the bare number 0 otherwise.
    """
    totalIssues: int
    openIssues: int
    resolvedIssues: int
    avgAccuracy: Any
    avgCompleteness: Any
    avgTimeliness: Any


__all__ = [
    "Identity",
    "SessionTokens",
    "AuthSession",
    "SignUpRequest",
    "SignInRequest",
    "RefreshRequest",
    "IssueCreate",
    "IssueUpdate",
    "Pagination",
    "OverallStats",
]
