"""
Enumeration definitions for the Data Quality Tracker backend.

All enums inherit from both `str` and `Enum` so they serialize as plain strings
in JSON responses and validate incoming request values through Pydantic.
"""

from enum import Enum


class IssueStatus(str, Enum):
    """
    Lifecycle status of a data quality issue.

    Values: 'open' | 'in_progress' | 'resolved' | 'closed'

    New issues default to OPEN. The dashboard counts OPEN and RESOLVED issues
    separately; IN_PROGRESS and CLOSED only contribute to the total.
    """
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class SortOrder(str, Enum):
    """Sort direction for issue listing."""
    ASC = "asc"
    DESC = "desc"
