"""
Parameterized SQL for the data_issues table and its lookups.

All user-supplied values travel as asyncpg positional parameters ($1, $2, ...).
Identifiers that vary per request (sort column, updated columns) are only ever
taken from the whitelists defined here, never from the request text.

Tables (see schema.sql):
- data_issues: the primary entity
- categories: classification lookup (id, name)
- severity_levels: ranked lookup (id, name, level, color)
- dashboard_stats: per-dataset aggregate view
- get_issues_for_export(): export function with lookup names inlined

Every issue-returning query selects the issue columns plus flattened lookup
columns (category_name, severity_name, severity_level, severity_color); the
repository nests these into `category` / `severity` objects.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple


# =============================================================================
# Column Whitelists
# =============================================================================

# Columns a client may sort by
SORTABLE_COLUMNS: Tuple[str, ...] = (
    "created_at",
    "updated_at",
    "dataset_name",
    "owner",
    "issue_type",
    "status",
    "accuracy_score",
    "completeness_score",
    "timeliness_score",
    "category_id",
    "severity_id",
)

DEFAULT_SORT_COLUMN = "created_at"

# Columns a client may write on update
UPDATABLE_COLUMNS: Tuple[str, ...] = (
    "dataset_name",
    "description",
    "owner",
    "issue_type",
    "category_id",
    "severity_id",
    "accuracy_score",
    "completeness_score",
    "timeliness_score",
    "status",
)

# Never client-writable, whatever the payload says
IMMUTABLE_COLUMNS: Tuple[str, ...] = ("id", "created_at", "created_by")

INSERT_COLUMNS: Tuple[str, ...] = UPDATABLE_COLUMNS + ("created_by",)


# =============================================================================
# Shared SELECT fragments
# =============================================================================

_ISSUE_COLUMNS = """
        i.id,
        i.dataset_name,
        i.description,
        i.owner,
        i.issue_type,
        i.category_id,
        i.severity_id,
        i.accuracy_score,
        i.completeness_score,
        i.timeliness_score,
        i.status,
        i.created_by,
        i.created_at,
        i.updated_at,
        c.name AS category_name,
        s.name AS severity_name,
        s.level AS severity_level,
        s.color AS severity_color
"""

_ISSUE_JOINS = """
    FROM data_issues i
    LEFT JOIN categories c ON c.id = i.category_id
    LEFT JOIN severity_levels s ON s.id = i.severity_id
"""


# =============================================================================
# Lookup Queries
# =============================================================================

CATEGORIES_QUERY = """
    SELECT id, name
    FROM categories
    ORDER BY name ASC
"""

SEVERITY_LEVELS_QUERY = """
    SELECT id, name, level, color
    FROM severity_levels
    ORDER BY level DESC
"""


# =============================================================================
# Aggregation / Export Queries
# =============================================================================

DATASET_STATS_QUERY = """
    SELECT *
    FROM dashboard_stats
"""

ISSUE_SCORES_QUERY = """
    SELECT status, accuracy_score, completeness_score, timeliness_score
    FROM data_issues
"""

EXPORT_QUERY = """
    SELECT *
    FROM get_issues_for_export()
"""


# =============================================================================
# Issue Query Builders
# =============================================================================


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_issue_filters(
    dataset: Optional[str] = None,
    category: Optional[int] = None,
    severity: Optional[int] = None,
    status: Optional[str] = None,
    owner: Optional[str] = None,
) -> Tuple[str, List[Any]]:
    """
    Build a conjunctive WHERE clause for issue listing.

    dataset and owner are case-insensitive substring matches; category,
    severity and status are exact matches. Absent filters are skipped.

    Returns:
        (where_sql, params): where_sql is "" when no filter applies, otherwise
        "WHERE ... AND ..." with placeholders numbered from $1.
    """
    clauses: List[str] = []
    params: List[Any] = []

    def add(template: str, value: Any) -> None:
        params.append(value)
        clauses.append(template.format(n=len(params)))

    if dataset:
        add("i.dataset_name ILIKE ${n}", f"%{_escape_like(dataset)}%")
    if category is not None:
        add("i.category_id = ${n}", category)
    if severity is not None:
        add("i.severity_id = ${n}", severity)
    if status:
        add("i.status = ${n}", status)
    if owner:
        add("i.owner ILIKE ${n}", f"%{_escape_like(owner)}%")

    where_sql = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    return where_sql, params


def resolve_sort_column(sort: Optional[str]) -> str:
    """Map a client sort key to a whitelisted column, defaulting to created_at."""
    if sort in SORTABLE_COLUMNS:
        return sort
    return DEFAULT_SORT_COLUMN


def get_issue_list_query(where_sql: str, param_count: int, sort_column: str, ascending: bool) -> str:
    """
    Page of joined issues. Expects the filter params followed by LIMIT and OFFSET.

    `id` is a secondary sort key so rows with equal sort values keep a stable
    order across pages.
    """
    direction = "ASC" if ascending else "DESC"
    column = resolve_sort_column(sort_column)
    return f"""
    SELECT {_ISSUE_COLUMNS}
    {_ISSUE_JOINS}
    {where_sql}
    ORDER BY i.{column} {direction} NULLS LAST, i.id {direction}
    LIMIT ${param_count + 1} OFFSET ${param_count + 2}
    """


def get_issue_count_query(where_sql: str) -> str:
    return f"""
    SELECT COUNT(*)
    FROM data_issues i
    {where_sql}
    """


def get_issue_by_id_query() -> str:
    return f"""
    SELECT {_ISSUE_COLUMNS}
    {_ISSUE_JOINS}
    WHERE i.id = $1
    """


def get_issue_insert_query() -> str:
    """
    Insert one issue and return it joined with its lookups.

    Parameters follow INSERT_COLUMNS order.
    """
    columns = ", ".join(INSERT_COLUMNS)
    placeholders = ", ".join(f"${n}" for n in range(1, len(INSERT_COLUMNS) + 1))
    return f"""
    WITH i AS (
        INSERT INTO data_issues ({columns})
        VALUES ({placeholders})
        RETURNING *
    )
    SELECT {_ISSUE_COLUMNS}
    FROM i
    LEFT JOIN categories c ON c.id = i.category_id
    LEFT JOIN severity_levels s ON s.id = i.severity_id
    """


def get_issue_update_query(columns: Sequence[str]) -> str:
    """
    Update the given columns of one issue (id is $1, values follow in order)
    and return it joined with its lookups. updated_at is always refreshed.

    Raises:
        ValueError: A column outside UPDATABLE_COLUMNS was requested.
    """
    for column in columns:
        if column not in UPDATABLE_COLUMNS:
            raise ValueError(f"Column is not updatable: {column}")

    assignments = [f"{column} = ${n}" for n, column in enumerate(columns, start=2)]
    assignments.append("updated_at = NOW()")
    return f"""
    WITH i AS (
        UPDATE data_issues
        SET {', '.join(assignments)}
        WHERE id = $1
        RETURNING *
    )
    SELECT {_ISSUE_COLUMNS}
    FROM i
    LEFT JOIN categories c ON c.id = i.category_id
    LEFT JOIN severity_levels s ON s.id = i.severity_id
    """


ISSUE_DELETE_QUERY = """
    DELETE FROM data_issues
    WHERE id = $1
"""


def ordered_values(values: Dict[str, Any], columns: Sequence[str]) -> List[Any]:
    """Values for `columns` in order, None where a key is absent."""
    return [values.get(column) for column in columns]


__all__ = [
    "SORTABLE_COLUMNS",
    "DEFAULT_SORT_COLUMN",
    "UPDATABLE_COLUMNS",
    "IMMUTABLE_COLUMNS",
    "INSERT_COLUMNS",
    "CATEGORIES_QUERY",
    "SEVERITY_LEVELS_QUERY",
    "DATASET_STATS_QUERY",
    "ISSUE_SCORES_QUERY",
    "EXPORT_QUERY",
    "ISSUE_DELETE_QUERY",
    "build_issue_filters",
    "resolve_sort_column",
    "get_issue_list_query",
    "get_issue_count_query",
    "get_issue_by_id_query",
    "get_issue_insert_query",
    "get_issue_update_query",
    "ordered_values",
]
