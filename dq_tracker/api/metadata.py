"""
FastAPI router module for the read-only lookup tables.

Key Endpoints:
- GET /categories      - All categories ordered by name
- GET /severity-levels - All severity levels ordered by level (most severe first)

Both require a bearer token and respond { success: true, data: [...] }.
"""

import logging

from fastapi import APIRouter

from dq_tracker.core.dependencies import CurrentUserDep, DatabaseDep
from dq_tracker.services.issues import list_categories, list_severity_levels


logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/categories")
async def get_categories(user: CurrentUserDep, db: DatabaseDep) -> dict:
    """
    List categories.

    Raises:
        PersistenceError 500: The store call failed.
    """
    categories = await list_categories(db)
    return {"success": True, "data": categories}


@router.get("/severity-levels")
async def get_severity_levels(user: CurrentUserDep, db: DatabaseDep) -> dict:
    """
    List severity levels, highest level first.

    Raises:
        PersistenceError 500: The store call failed.
    """
    levels = await list_severity_levels(db)
    return {"success": True, "data": levels}


__all__ = ["router"]
