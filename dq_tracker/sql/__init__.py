"""
SQL Query Module for the Data Quality Tracker backend.

Provides the parameterized SQL used by the service layer, keeping data access
text out of business logic. schema.sql alongside this package is the reference
DDL for the tables, view and export function these queries read.

Example usage:
    from dq_tracker.sql import build_issue_filters, get_issue_list_query

    where_sql, params = build_issue_filters(dataset="orders", status="open")
    sql = get_issue_list_query(where_sql, len(params), "created_at", ascending=False)
"""

from dq_tracker.sql.issue_queries import (
    SORTABLE_COLUMNS,
    DEFAULT_SORT_COLUMN,
    UPDATABLE_COLUMNS,
    IMMUTABLE_COLUMNS,
    INSERT_COLUMNS,
    CATEGORIES_QUERY,
    SEVERITY_LEVELS_QUERY,
    DATASET_STATS_QUERY,
    ISSUE_SCORES_QUERY,
    EXPORT_QUERY,
    ISSUE_DELETE_QUERY,
    build_issue_filters,
    resolve_sort_column,
    get_issue_list_query,
    get_issue_count_query,
    get_issue_by_id_query,
    get_issue_insert_query,
    get_issue_update_query,
    ordered_values,
)

__all__ = [
    'SORTABLE_COLUMNS',
    'DEFAULT_SORT_COLUMN',
    'UPDATABLE_COLUMNS',
    'IMMUTABLE_COLUMNS',
    'INSERT_COLUMNS',
    'CATEGORIES_QUERY',
    'SEVERITY_LEVELS_QUERY',
    'DATASET_STATS_QUERY',
    'ISSUE_SCORES_QUERY',
    'EXPORT_QUERY',
    'ISSUE_DELETE_QUERY',
    'build_issue_filters',
    'resolve_sort_column',
    'get_issue_list_query',
    'get_issue_count_query',
    'get_issue_by_id_query',
    'get_issue_insert_query',
    'get_issue_update_query',
    'ordered_values',
]
