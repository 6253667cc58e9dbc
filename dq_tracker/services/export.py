"""
CSV export service for the Data Quality Tracker backend.

Reads every issue through the `get_issues_for_export()` database function
(category and severity names inlined as plain text) and serializes the rows
with pandas. Export is never filtered or paginated: the row count always
equals the total issue count.

Column order is fixed:
    dataset_name, description, owner, issue_type, category, severity,
    accuracy_score, completeness_score, timeliness_score, status, created_at

Missing values render as empty cells. The header row is written even when
there are no issues.
"""

import logging
from typing import Any, Iterable, List

import pandas as pd

from dq_tracker.core.database import Database
from dq_tracker.core.errors import PersistenceError
from dq_tracker.sql.issue_queries import EXPORT_QUERY


logger = logging.getLogger(__name__)

EXPORT_FIELDS: List[str] = [
    "dataset_name",
    "description",
    "owner",
    "issue_type",
    "category",
    "severity",
    "accuracy_score",
    "completeness_score",
    "timeliness_score",
    "status",
    "created_at",
]

_SCORE_FIELDS = ["accuracy_score", "completeness_score", "timeliness_score"]

CSV_MEDIA_TYPE = "text/csv"


def _to_iso(value: Any) -> Any:
    if pd.isna(value):
        return None
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


def issues_to_csv(rows: Iterable[Any]) -> str:
    """
    Serialize export rows to CSV text in EXPORT_FIELDS order.

    Keys outside EXPORT_FIELDS are dropped; absent keys become empty cells.
    Scores stay integers (no "4.0") and timestamps are ISO 8601.
    """
    frame = pd.DataFrame([dict(row) for row in rows], columns=EXPORT_FIELDS)

    for column in _SCORE_FIELDS:
        frame[column] = pd.to_numeric(frame[column], errors="coerce").astype("Int64")
    frame["created_at"] = frame["created_at"].map(_to_iso)

    return frame.to_csv(index=False, na_rep="", lineterminator="\n")


async def export_issues_csv(db: Database) -> str:
    """
    Fetch every issue and return it as CSV text.

    Raises:
        PersistenceError: The export query failed.
    """
    try:
        records = await db.fetch(EXPORT_QUERY)
    except Exception as e:
        logger.error(f"Error fetching issues for export: {str(e)}", exc_info=True)
        raise PersistenceError("Failed to export data") from e

    logger.info(f"Exporting {len(records)} issues to CSV")
    return issues_to_csv(records)


def content_disposition(filename: str) -> str:
    return f"attachment; filename={filename}"


__all__ = [
    "EXPORT_FIELDS",
    "CSV_MEDIA_TYPE",
    "issues_to_csv",
    "export_issues_csv",
    "content_disposition",
]
