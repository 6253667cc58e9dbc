"""
API package initialization.

This package contains the FastAPI router modules for the Data Quality Tracker:
- auth: Signup, signin, refresh, signout, current identity
- metadata: Categories and severity levels
- dashboard: Aggregate statistics
- issues: Issue CRUD, filtering and pagination
- export: CSV export

api_router mounts them all; dq_tracker.main includes it under /api.
"""

from fastapi import APIRouter

from dq_tracker.api.auth import router as auth_router
from dq_tracker.api.metadata import router as metadata_router
from dq_tracker.api.dashboard import router as dashboard_router
from dq_tracker.api.issues import router as issues_router
from dq_tracker.api.export import router as export_router

# Create main API router
api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["auth"])
api_router.include_router(metadata_router, tags=["metadata"])  # /categories, /severity-levels
api_router.include_router(dashboard_router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(issues_router, prefix="/issues", tags=["issues"])
api_router.include_router(export_router, prefix="/export", tags=["export"])

__all__ = [
    "api_router",
    "auth_router",
    "metadata_router",
    "dashboard_router",
    "issues_router",
    "export_router",
]
