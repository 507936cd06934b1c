"""Admin API Router package — Aggregates all admin-facing endpoints
into a single router for inclusion in the FastAPI application.

Included routers:
    - issues: Triage list, detail, status transitions, notes and deletion
    - dashboard: Aggregate statistics
"""

from fastapi import APIRouter

from civic_reporter.api.admin.issues import router as issues_router
from civic_reporter.api.admin.dashboard import router as dashboard_router

admin_router: APIRouter = APIRouter()

# /admin/issues, /admin/issues/{id}/status, /admin/issues/{id}/notes
admin_router.include_router(issues_router, prefix="/issues", tags=["Admin Issues"])
# /admin/stats
admin_router.include_router(dashboard_router, tags=["Admin Dashboard"])
