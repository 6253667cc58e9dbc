"""
Backend Services Module

Business logic for the Data Quality Tracker. Services are stateless: the
Database handle is passed into each call by the API layer.

Services:
- validation: Required-field checks on issue create
- issues: Issue repository (CRUD, filtering, pagination) and lookups
- aggregation: Dashboard statistics
- export: CSV export of the full issue set
"""

# =============================================================================
# Validation Layer
# =============================================================================

from dq_tracker.services.validation import (
    REQUIRED_ISSUE_FIELDS,
    collect_issue_errors,
    parse_issue_payload,
)

# =============================================================================
# Issue Repository
# =============================================================================

from dq_tracker.services.issues import (
    IssueQuery,
    list_categories,
    list_severity_levels,
    list_issues,
    get_issue,
    create_issue,
    update_issue,
    delete_issue,
)

# =============================================================================
# Aggregation Service
# =============================================================================

from dq_tracker.services.aggregation import (
    compute_overall_stats,
    get_dashboard_stats,
)

# =============================================================================
# Export Service
# =============================================================================

from dq_tracker.services.export import (
    EXPORT_FIELDS,
    issues_to_csv,
    export_issues_csv,
)

__all__ = [
    'REQUIRED_ISSUE_FIELDS',
    'collect_issue_errors',
    'parse_issue_payload',
    'IssueQuery',
    'list_categories',
    'list_severity_levels',
    'list_issues',
    'get_issue',
    'create_issue',
    'update_issue',
    'delete_issue',
    'compute_overall_stats',
    'get_dashboard_stats',
    'EXPORT_FIELDS',
    'issues_to_csv',
    'export_issues_csv',
]
