"""
Dashboard aggregation service for the Data Quality Tracker backend.

Computes the statistics behind GET /api/dashboard/stats over the full,
unfiltered issue set:

- datasetStats: rows of the `dashboard_stats` view (per-dataset total/open/
  resolved counts, per-score averages and overall_quality_score), passed
  through as the database computed them
- overallStats: totals and score averages computed here with pandas

Average Formatting:
- Each score is averaged independently over the issues where that score is
  non-null, and formatted as a two-decimal string ("4.00").
- When no issue contributes a value for a score (always the case for an
  empty issue set) the average is the bare number 0, not "0.00". Dashboard
  clients rely on this falsy value to render their placeholder.
"""

import logging
from typing import Any, Dict, Iterable, List, Union

import pandas as pd

from dq_tracker.core.database import Database
from dq_tracker.core.errors import PersistenceError
from dq_tracker.models.enums import IssueStatus
from dq_tracker.models.schemas import OverallStats
from dq_tracker.sql.issue_queries import DATASET_STATS_QUERY, ISSUE_SCORES_QUERY


logger = logging.getLogger(__name__)

SCORE_COLUMNS = {
    "avgAccuracy": "accuracy_score",
    "avgCompleteness": "completeness_score",
    "avgTimeliness": "timeliness_score",
}

_FRAME_COLUMNS = ["status", "accuracy_score", "completeness_score", "timeliness_score"]


def format_average(values: pd.Series) -> Union[str, int]:
    """
    Mean of the non-null values as a two-decimal string, or 0 when there are none.

    Example:
        >>> format_average(pd.Series([3, 4, 5]))
        '4.00'
        >>> format_average(pd.Series([], dtype=float))
        0
    """
    numeric = pd.to_numeric(values, errors="coerce").dropna()
    if numeric.empty:
        return 0
    return f"{numeric.mean():.2f}"


def compute_overall_stats(rows: Iterable[Any]) -> Dict[str, Any]:
    """
    Compute overall counts and score averages.

    Args:
        rows: Records (or dicts) with status and the three score columns.

    Returns:
        Dict with totalIssues, openIssues, resolvedIssues, avgAccuracy,
        avgCompleteness, avgTimeliness.
    """
    frame = pd.DataFrame([dict(row) for row in rows], columns=_FRAME_COLUMNS)

    stats: Dict[str, Any] = {
        "totalIssues": int(len(frame)),
        "openIssues": int((frame["status"] == IssueStatus.OPEN.value).sum()),
        "resolvedIssues": int((frame["status"] == IssueStatus.RESOLVED.value).sum()),
    }
    for key, column in SCORE_COLUMNS.items():
        stats[key] = format_average(frame[column])
    return OverallStats(**stats).model_dump()


async def get_dataset_stats(db: Database) -> List[Dict[str, Any]]:
    """Rows of the dashboard_stats view."""
    try:
        records = await db.fetch(DATASET_STATS_QUERY)
    except Exception as e:
        logger.error(f"Error fetching dataset stats: {str(e)}", exc_info=True)
        raise PersistenceError("Failed to fetch dashboard stats") from e
    return [dict(record) for record in records]


async def get_dashboard_stats(db: Database) -> Dict[str, Any]:
    """
    Build the dashboard payload.

    Returns:
        {"datasetStats": [...], "overallStats": {...}}

    Raises:
        PersistenceError: Either underlying query failed.
    """
    dataset_stats = await get_dataset_stats(db)

    try:
        score_rows = await db.fetch(ISSUE_SCORES_QUERY)
    except Exception as e:
        logger.error(f"Error fetching issue scores: {str(e)}", exc_info=True)
        raise PersistenceError("Failed to fetch dashboard stats") from e

    overall = compute_overall_stats(score_rows)
    logger.debug(
        f"Dashboard stats: {len(dataset_stats)} datasets, "
        f"{overall['totalIssues']} issues"
    )
    return {"datasetStats": dataset_stats, "overallStats": overall}


__all__ = [
    "SCORE_COLUMNS",
    "format_average",
    "compute_overall_stats",
    "get_dataset_stats",
    "get_dashboard_stats",
]
