"""
Issue repository service for the Data Quality Tracker backend.

CRUD over the data_issues table plus the two read-only lookups (categories,
severity_levels). Every issue returned to a caller is joined with its lookups:

    {
        "id": "...", "dataset_name": "...", ...,
        "category": {"id": 2, "name": "Completeness"} | None,
        "severity": {"id": 3, "name": "High", "level": 3, "color": "#F97316"} | None
    }

Key Functions:
- list_issues: Filtered, sorted, paginated listing with total count
- get_issue: One issue by id
- create_issue: Insert with server-set created_by and defaults
- update_issue: Partial update that never touches id/created_at/created_by
- delete_issue: Hard delete by id
- list_categories / list_severity_levels: Lookup tables

Error Handling:
- Absent issue -> NotFound (404)
- Any store failure -> PersistenceError (500) with a generic message; the
  underlying exception is logged with its traceback and chained
- No retries; a failed store call is reported once

Every operation is a single statement, so concurrent writers resolve as
last-write-wins in the database.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from uuid import UUID

from dq_tracker.core.database import Database
from dq_tracker.core.errors import NotFound, PersistenceError
from dq_tracker.models.enums import IssueStatus, SortOrder
from dq_tracker.models.schemas import Identity, IssueCreate, Pagination
from dq_tracker.sql.issue_queries import (
    CATEGORIES_QUERY,
    DEFAULT_SORT_COLUMN,
    IMMUTABLE_COLUMNS,
    INSERT_COLUMNS,
    ISSUE_DELETE_QUERY,
    SEVERITY_LEVELS_QUERY,
    UPDATABLE_COLUMNS,
    build_issue_filters,
    get_issue_by_id_query,
    get_issue_count_query,
    get_issue_insert_query,
    get_issue_list_query,
    get_issue_update_query,
    ordered_values,
)


# =============================================================================
# Module Configuration
# =============================================================================

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE: int = 10

ISSUE_NOT_FOUND = "Issue not found"

# Optional fields stored as NULL when omitted or falsy on create (0, "" included)
_NULL_WHEN_FALSY = (
    "category_id",
    "severity_id",
    "accuracy_score",
    "completeness_score",
    "timeliness_score",
)


# =============================================================================
# Query Parameters
# =============================================================================


@dataclass
class IssueQuery:
    """
    Listing parameters for list_issues.

    Attributes:
        page: 1-based page number.
        limit: Page size.
        sort: Column to sort by (non-whitelisted values fall back to created_at).
        order: Sort direction.
        dataset: Case-insensitive substring of dataset_name.
        category: Exact category id.
        severity: Exact severity id.
        status: Exact status.
        owner: Case-insensitive substring of owner.
    """
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    sort: str = DEFAULT_SORT_COLUMN
    order: SortOrder = SortOrder.DESC
    dataset: Optional[str] = None
    category: Optional[int] = None
    severity: Optional[int] = None
    status: Optional[IssueStatus] = None
    owner: Optional[str] = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def ascending(self) -> bool:
        return self.order == SortOrder.ASC


# =============================================================================
# Helper Functions
# =============================================================================


def record_to_issue(record: Any) -> Dict[str, Any]:
    """
    Convert a joined issue row into the API shape, nesting the flattened
    lookup columns into `category` and `severity` objects (None when unset).
    """
    row = dict(record)
    category_name = row.pop("category_name", None)
    severity_name = row.pop("severity_name", None)
    severity_level = row.pop("severity_level", None)
    severity_color = row.pop("severity_color", None)

    row["category"] = (
        {"id": row["category_id"], "name": category_name}
        if row.get("category_id") is not None
        else None
    )
    row["severity"] = (
        {
            "id": row["severity_id"],
            "name": severity_name,
            "level": severity_level,
            "color": severity_color,
        }
        if row.get("severity_id") is not None
        else None
    )
    return row


def parse_issue_id(issue_id: Any) -> Optional[UUID]:
    """Return the id as a UUID, or None when it cannot name any issue."""
    if isinstance(issue_id, UUID):
        return issue_id
    try:
        return UUID(str(issue_id))
    except ValueError:
        return None


# =============================================================================
# Lookups
# =============================================================================


async def list_categories(db: Database) -> List[Dict[str, Any]]:
    """All categories ordered by name."""
    try:
        records = await db.fetch(CATEGORIES_QUERY)
    except Exception as e:
        logger.error(f"Error fetching categories: {str(e)}", exc_info=True)
        raise PersistenceError("Failed to fetch categories") from e
    return [dict(record) for record in records]


async def list_severity_levels(db: Database) -> List[Dict[str, Any]]:
    """All severity levels, most severe first."""
    try:
        records = await db.fetch(SEVERITY_LEVELS_QUERY)
    except Exception as e:
        logger.error(f"Error fetching severity levels: {str(e)}", exc_info=True)
        raise PersistenceError("Failed to fetch severity levels") from e
    return [dict(record) for record in records]


# =============================================================================
# Issue CRUD
# =============================================================================


async def list_issues(db: Database, query: IssueQuery) -> Dict[str, Any]:
    """
    Fetch one page of the filtered, sorted issue set.

    Returns:
        {
            "data": [issue, ...],
            "pagination": {"page", "limit", "total", "totalPages"}
        }
        where totalPages = ceil(total / limit).

    Raises:
        PersistenceError: The count or page query failed.
    """
    where_sql, params = build_issue_filters(
        dataset=query.dataset,
        category=query.category,
        severity=query.severity,
        status=query.status.value if query.status else None,
        owner=query.owner,
    )

    try:
        total = await db.fetchval(get_issue_count_query(where_sql), *params)
        records = await db.fetch(
            get_issue_list_query(where_sql, len(params), query.sort, query.ascending),
            *params,
            query.limit,
            query.offset,
        )
    except Exception as e:
        logger.error(f"Error fetching issues: {str(e)}", exc_info=True)
        raise PersistenceError("Failed to fetch issues") from e

    total = int(total or 0)
    issues = [record_to_issue(record) for record in records]

    logger.debug(
        f"Listed {len(issues)} of {total} issues "
        f"(page={query.page}, limit={query.limit}, sort={query.sort} {query.order.value})"
    )

    return {
        "data": issues,
        "pagination": Pagination(
            page=query.page,
            limit=query.limit,
            total=total,
            totalPages=math.ceil(total / query.limit),
        ).model_dump(),
    }


async def get_issue(db: Database, issue_id: Any) -> Dict[str, Any]:
    """
    Fetch one issue joined with its lookups.

    Raises:
        NotFound: No issue has this id (malformed ids included).
        PersistenceError: The store call failed.
    """
    parsed_id = parse_issue_id(issue_id)
    if parsed_id is None:
        raise NotFound(ISSUE_NOT_FOUND)

    try:
        record = await db.fetchrow(get_issue_by_id_query(), parsed_id)
    except Exception as e:
        logger.error(f"Error fetching issue {issue_id}: {str(e)}", exc_info=True)
        raise PersistenceError("Failed to fetch issue") from e

    if not record:
        logger.warning(f"Issue not found: id={issue_id}")
        raise NotFound(ISSUE_NOT_FOUND)

    return record_to_issue(record)


async def create_issue(db: Database, payload: IssueCreate, user: Identity) -> Dict[str, Any]:
    """
    Insert a new issue on behalf of `user`.

    created_by is always the caller's id, status defaults to "open", and the
    lookup ids and scores are stored as NULL when omitted or falsy.

    Raises:
        PersistenceError: The insert failed or returned no row.
    """
    values: Dict[str, Any] = {
        "dataset_name": payload.dataset_name,
        "description": payload.description,
        "owner": payload.owner,
        "issue_type": payload.issue_type,
        "status": (payload.status or IssueStatus.OPEN).value,
    }
    for field_name in _NULL_WHEN_FALSY:
        values[field_name] = getattr(payload, field_name) or None

    try:
        values["created_by"] = UUID(user.id)
        record = await db.fetchrow(
            get_issue_insert_query(),
            *ordered_values(values, INSERT_COLUMNS),
        )
    except Exception as e:
        logger.error(f"Error creating issue for dataset={payload.dataset_name}: {str(e)}", exc_info=True)
        raise PersistenceError("Failed to create issue") from e

    if not record:
        logger.error(f"Insert returned no row for dataset={payload.dataset_name}")
        raise PersistenceError("Failed to create issue")

    issue = record_to_issue(record)
    logger.info(f"Created issue: id={issue.get('id')}, dataset={payload.dataset_name}, by={user.id}")
    return issue


def strip_immutable_fields(changes: Dict[str, Any]) -> Dict[str, Any]:
    """
    Keep only writable columns: id, created_at and created_by are dropped
    whatever their value, and unknown keys are ignored.
    """
    cleaned = {key: value for key, value in changes.items() if key not in IMMUTABLE_COLUMNS}
    ignored = sorted(key for key in cleaned if key not in UPDATABLE_COLUMNS)
    if ignored:
        logger.debug(f"Ignoring non-writable update fields: {ignored}")
    return {column: cleaned[column] for column in UPDATABLE_COLUMNS if column in cleaned}


async def update_issue(db: Database, issue_id: Any, changes: Dict[str, Any]) -> Dict[str, Any]:
    """
    Apply a partial update and return the updated issue.

    A payload with nothing writable left after stripping returns the current
    issue unchanged.

    Raises:
        NotFound: No issue has this id.
        PersistenceError: The update failed.
    """
    parsed_id = parse_issue_id(issue_id)
    if parsed_id is None:
        raise NotFound(ISSUE_NOT_FOUND)

    writable = strip_immutable_fields(changes)
    if not writable:
        return await get_issue(db, parsed_id)

    columns = list(writable)
    try:
        record = await db.fetchrow(
            get_issue_update_query(columns),
            parsed_id,
            *ordered_values(writable, columns),
        )
    except Exception as e:
        logger.error(f"Error updating issue {issue_id}: {str(e)}", exc_info=True)
        raise PersistenceError("Failed to update issue") from e

    if not record:
        logger.warning(f"Update target not found: id={issue_id}")
        raise NotFound(ISSUE_NOT_FOUND)

    logger.info(f"Updated issue: id={issue_id}, fields={columns}")
    return record_to_issue(record)


async def delete_issue(db: Database, issue_id: Any) -> int:
    """
    Hard-delete an issue.

    Deleting an id that matches no row (malformed ids included) is not an
    error; the store reports zero rows and the call succeeds.

    Returns:
        Number of rows deleted (0 or 1).

    Raises:
        PersistenceError: The delete failed.
    """
    parsed_id = parse_issue_id(issue_id)
    if parsed_id is None:
        logger.info(f"Delete skipped, id cannot match any issue: {issue_id}")
        return 0

    try:
        status = await db.execute(ISSUE_DELETE_QUERY, parsed_id)
    except Exception as e:
        logger.error(f"Error deleting issue {issue_id}: {str(e)}", exc_info=True)
        raise PersistenceError("Failed to delete issue") from e

    # asyncpg status string, e.g. "DELETE 1"
    try:
        deleted = int(str(status).split()[-1])
    except (ValueError, IndexError):
        deleted = 0

    logger.info(f"Deleted issue: id={issue_id}, rows={deleted}")
    return deleted


__all__ = [
    "IssueQuery",
    "record_to_issue",
    "parse_issue_id",
    "strip_immutable_fields",
    "list_categories",
    "list_severity_levels",
    "list_issues",
    "get_issue",
    "create_issue",
    "update_issue",
    "delete_issue",
]
