"""
Validation layer for issue creation.

Checks the raw request body before anything reaches the store and reports
every violation at once, so the client can fix the whole form in one round
trip:

- one "<field> is required" entry per required field that is absent or blank
- one "<field>: <message>" entry per field Pydantic rejects (bad score type,
  unknown status)

The required-field check runs on the raw body, not on a parsed IssueCreate,
so a body that also has type errors (or no body at all) still lists every
missing field. Update payloads are not validated here; the repository strips
the immutable fields instead.
"""

import logging
from typing import Any, List, Mapping, Optional

from pydantic import ValidationError

from dq_tracker.core.errors import InvalidInput, format_validation_errors
from dq_tracker.models.schemas import IssueCreate


logger = logging.getLogger(__name__)

REQUIRED_ISSUE_FIELDS = ("dataset_name", "description", "owner", "issue_type")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def collect_issue_errors(body: Optional[Mapping[str, Any]]) -> List[str]:
    """
    Return one "<field> is required" entry per required field that is absent
    or blank after trimming, in REQUIRED_ISSUE_FIELDS order.

    Args:
        body: The raw JSON object sent by the client; None means no body.
    """
    body = body or {}
    return [
        f"{field_name} is required"
        for field_name in REQUIRED_ISSUE_FIELDS
        if _is_blank(body.get(field_name))
    ]


def parse_issue_payload(body: Optional[Mapping[str, Any]]) -> IssueCreate:
    """
    Validate a raw create body and return it as an IssueCreate.

    Required-field errors come first, followed by any type errors.

    Raises:
        InvalidInput: At least one field is missing, blank or of the wrong type.
    """
    body = body or {}
    errors = collect_issue_errors(body)

    payload: Optional[IssueCreate] = None
    try:
        payload = IssueCreate.model_validate(dict(body))
    except ValidationError as e:
        errors.extend(format_validation_errors(e.errors()))

    if errors or payload is None:
        logger.warning(f"Issue create rejected: {', '.join(errors)}")
        raise InvalidInput("Validation failed", errors=errors)
    return payload


__all__ = [
    "REQUIRED_ISSUE_FIELDS",
    "collect_issue_errors",
    "parse_issue_payload",
]
