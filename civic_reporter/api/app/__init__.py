"""App API Router package — Aggregates all citizen-facing endpoints
into a single router for inclusion in the FastAPI application.

Included routers:
    - issues: Report, list, read, track and delete issues
"""

from fastapi import APIRouter

from civic_reporter.api.app.issues import router as issues_router

app_router: APIRouter = APIRouter()

# /issues, /issues/my-issues, /issues/track/{id}, /issues/{id}
app_router.include_router(issues_router, prefix="/issues", tags=["Issues"])
