"""
FastAPI router module for data quality issue CRUD.

Every endpoint requires a bearer token; the auth gateway rejects the request
with 401 before any store access. Persistence lives in
dq_tracker.services.issues; this module maps HTTP to it.

Key Endpoints:
- GET    /issues       - Filtered, sorted, paginated listing
- GET    /issues/{id}  - One issue
- POST   /issues       - Create (required: dataset_name, description, owner, issue_type)
- PUT    /issues/{id}  - Partial update (id, created_at, created_by are ignored)
- DELETE /issues/{id}  - Hard delete

Response Shapes:
- list:   { success, data: [...], pagination: {page, limit, total, totalPages} }
- get:    { success, data: {...} }
- create: 201 { success, message, data: {...} }
- update: { success, message, data: {...} }
- delete: { success, message }

Authorization Note:
Any authenticated identity may update or delete any issue; there is no
ownership check on created_by.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Query

from dq_tracker.core.dependencies import CurrentUserDep, DatabaseDep, SettingsDep
from dq_tracker.models.enums import IssueStatus, SortOrder
from dq_tracker.models.schemas import IssueUpdate
from dq_tracker.services.issues import (
    IssueQuery,
    create_issue,
    delete_issue,
    get_issue,
    list_issues,
    update_issue,
)
from dq_tracker.services.validation import parse_issue_payload
from dq_tracker.sql.issue_queries import DEFAULT_SORT_COLUMN


# =============================================================================
# Module Configuration
# =============================================================================

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# GET /issues - List Issues
# =============================================================================


@router.get("")
async def get_issues(
    user: CurrentUserDep,
    db: DatabaseDep,
    settings: SettingsDep,
    page: int = Query(default=1, ge=1, description="1-based page number"),
    limit: Optional[int] = Query(default=None, ge=1, description="Page size"),
    sort: str = Query(default=DEFAULT_SORT_COLUMN, description="Column to sort by"),
    order: str = Query(default=SortOrder.DESC.value, description="asc or desc"),
    dataset: Optional[str] = Query(default=None, description="Substring of dataset_name"),
    category: Optional[int] = Query(default=None, description="Exact category id"),
    severity: Optional[int] = Query(default=None, description="Exact severity id"),
    status: Optional[IssueStatus] = Query(default=None, description="Exact status"),
    owner: Optional[str] = Query(default=None, description="Substring of owner"),
) -> dict:
    """
    List issues matching every supplied filter.

    limit defaults to the configured page size and is capped at max_page_size.
    Any order other than "asc" sorts descending.

    Example Request:
        GET /api/issues?page=2&limit=10&dataset=orders&status=open&order=asc

    Raises:
        PersistenceError 500: The store call failed.
    """
    page_size = min(limit or settings.default_page_size, settings.max_page_size)

    query = IssueQuery(
        page=page,
        limit=page_size,
        sort=sort,
        order=SortOrder.ASC if order.lower() == SortOrder.ASC.value else SortOrder.DESC,
        dataset=dataset,
        category=category,
        severity=severity,
        status=status,
        owner=owner,
    )
    result = await list_issues(db, query)
    return {"success": True, **result}


# =============================================================================
# GET /issues/{issue_id} - Get Issue
# =============================================================================


@router.get("/{issue_id}")
async def get_issue_by_id(issue_id: str, user: CurrentUserDep, db: DatabaseDep) -> dict:
    """
    Fetch one issue with its category and severity.

    Raises:
        NotFound 404: No issue has this id.
    """
    issue = await get_issue(db, issue_id)
    return {"success": True, "data": issue}


# =============================================================================
# POST /issues - Create Issue
# =============================================================================


@router.post("", status_code=201)
async def post_issue(
    user: CurrentUserDep,
    db: DatabaseDep,
    body: Optional[Dict[str, Any]] = Body(default=None, description="Issue fields (see IssueCreate)"),
) -> dict:
    """
    Create an issue owned by the caller.

    Example Request:
        POST /api/issues
        {
            "dataset_name": "customer_orders",
            "description": "Null order_date on ~2% of rows",
            "owner": "data-platform",
            "issue_type": "Missing values",
            "severity_id": 3
        }

    Raises:
        InvalidInput 400: Required fields missing or blank, or fields of the
            wrong type; `errors` lists every violation. A missing body counts
            as an empty one.
        PersistenceError 500: The insert failed.
    """
    payload = parse_issue_payload(body)
    issue = await create_issue(db, payload, user)
    return {"success": True, "message": "Issue created successfully", "data": issue}


# =============================================================================
# PUT /issues/{issue_id} - Update Issue
# =============================================================================


@router.put("/{issue_id}")
async def put_issue(issue_id: str, payload: IssueUpdate, user: CurrentUserDep, db: DatabaseDep) -> dict:
    """
    Apply a partial update.

    id, created_at and created_by in the payload are ignored.

    Raises:
        NotFound 404: No issue has this id.
        PersistenceError 500: The update failed.
    """
    issue = await update_issue(db, issue_id, payload.changes())
    logger.info(f"Issue {issue_id} updated by {user.id}")
    return {"success": True, "message": "Issue updated successfully", "data": issue}


# =============================================================================
# DELETE /issues/{issue_id} - Delete Issue
# =============================================================================


@router.delete("/{issue_id}")
async def remove_issue(issue_id: str, user: CurrentUserDep, db: DatabaseDep) -> dict:
    """
    Hard-delete an issue. Deleting an id that matches nothing still succeeds.

    Raises:
        PersistenceError 500: The delete failed.
    """
    await delete_issue(db, issue_id)
    logger.info(f"Issue {issue_id} delete requested by {user.id}")
    return {"success": True, "message": "Issue deleted successfully"}


__all__ = ["router"]
