"""
Error taxonomy for the Data Quality Tracker API.

Every error that is allowed to reach a client derives from ApiError and carries
the HTTP status and a client-safe message. The FastAPI exception handler in
dq_tracker.main renders these into the response envelope:

    {"success": false, "message": "...", "errors": [...]}

Internal detail (database errors, identity service transport failures) is
logged where it is caught and never placed in `message`.

| Error                 | Status | Raised by                                   |
|-----------------------|--------|---------------------------------------------|
| Unauthenticated       | 401    | Auth gateway dependency                     |
| InvalidInput          | 400    | Validation layer, auth route body checks    |
| NotFound              | 404    | Issue repository                            |
| PersistenceError      | 500    | Any service wrapping a failed store call    |
| Unavailable           | 503    | Health check                                |
| IdentityServiceError  | varies | IdentityClient when the auth API rejects    |
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional


class ApiError(Exception):
    """Base class for errors rendered into the JSON envelope."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        # extra client-safe keys merged into the envelope
        self.details = dict(details or {})
        super().__init__(self.message)

    def to_payload(self) -> dict:
        return {"success": False, "message": self.message, **self.details}


class Unauthenticated(ApiError):
    status_code = 401
    default_message = "Authentication token required"


class InvalidInput(ApiError):
    """Request failed validation; `errors` holds one entry per violation."""

    status_code = 400
    default_message = "Invalid request"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.errors = list(errors or [])

    def to_payload(self) -> dict:
        payload = super().to_payload()
        if self.errors:
            payload["errors"] = self.errors
        return payload


class NotFound(ApiError):
    status_code = 404
    default_message = "Not found"


class PersistenceError(ApiError):
    status_code = 500
    default_message = "Database operation failed"


class Unavailable(ApiError):
    status_code = 503
    default_message = "Service unavailable"


class IdentityServiceError(ApiError):
    """
    The identity service rejected a request (bad credentials, duplicate signup,
    expired refresh token) or could not be reached.

    `message` holds the service's own error text when it sent one, so routes
    that surface it (signup) can pass it through; `status_code` mirrors the
    upstream status (502 when the service was unreachable).
    """

    status_code = 502
    default_message = "Identity service request failed"


def format_validation_errors(errors: Iterable[Mapping[str, Any]]) -> List[str]:
    """
    Flatten Pydantic error dicts into "<field>: <message>" strings.

    The "body" location prefix FastAPI adds is dropped so body and model
    errors read the same.
    """
    messages: List[str] = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = str(error.get("msg"))
        messages.append(f"{location}: {message}" if location else message)
    return messages


__all__ = [
    "ApiError",
    "Unauthenticated",
    "InvalidInput",
    "NotFound",
    "PersistenceError",
    "Unavailable",
    "IdentityServiceError",
    "format_validation_errors",
]
