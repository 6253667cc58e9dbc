"""
FastAPI router module for CSV export.

Key Endpoints:
- GET /export/csv - Every issue as a CSV attachment

The export is unfiltered: it always contains every issue, whatever filters
the client has applied to its listing view.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import Response

from dq_tracker.core.dependencies import CurrentUserDep, DatabaseDep, SettingsDep
from dq_tracker.services.export import (
    CSV_MEDIA_TYPE,
    content_disposition,
    export_issues_csv,
)


logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/csv")
async def export_csv(user: CurrentUserDep, db: DatabaseDep, settings: SettingsDep) -> Response:
    """
    Download all issues as CSV.

    Returns:
        text/csv body with Content-Disposition: attachment; filename=<export_filename>

    Raises:
        PersistenceError 500: The export query failed.
    """
    csv_text = await export_issues_csv(db)
    logger.info(f"CSV export requested by {user.id}")
    return Response(
        content=csv_text,
        media_type=CSV_MEDIA_TYPE,
        headers={"Content-Disposition": content_disposition(settings.export_filename)},
    )


__all__ = ["router"]
