"""
FastAPI router module for dashboard statistics.

Key Endpoints:
- GET /dashboard/stats - Per-dataset breakdown plus overall counts and averages

Response Shape:
    {
        "success": true,
        "data": {
            "datasetStats": [{dataset_name, total_issues, open_issues, ...}],
            "overallStats": {totalIssues, openIssues, resolvedIssues,
                             avgAccuracy, avgCompleteness, avgTimeliness}
        }
    }

The statistics always cover the full issue set; no filter parameters are
accepted. See dq_tracker.services.aggregation for the average formatting rule.
"""

import logging

from fastapi import APIRouter

from dq_tracker.core.dependencies import CurrentUserDep, DatabaseDep
from dq_tracker.services.aggregation import get_dashboard_stats


logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/stats")
async def dashboard_stats(user: CurrentUserDep, db: DatabaseDep) -> dict:
    """
    Compute dashboard statistics.

    Raises:
        PersistenceError 500: Either underlying query failed.
    """
    stats = await get_dashboard_stats(db)
    return {"success": True, "data": stats}


__all__ = ["router"]
