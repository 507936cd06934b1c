"""FastAPI application entry point — Middleware, error envelope and router registration.

Configures logging, CORS, the health check, the JSON error envelope and
includes the auth, citizen and admin routers under ``/api``.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from civic_reporter.config import settings
from civic_reporter.middleware.axiom_logging import AxiomLoggingMiddleware
from civic_reporter.services.storage_service import storage_service

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app: FastAPI = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Registered before CORS to capture all requests
app.add_middleware(AxiomLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Error envelope: {"success": false, "message": ..., "error"?: ...}
# ---------------------------------------------------------------------------
def _error_response(status_code: int, message: str, error: str | None = None, headers: dict | None = None) -> JSONResponse:
    body: dict = {"success": False, "message": message}
    if error is not None and settings.DEBUG:
        body["error"] = error
    return JSONResponse(status_code=status_code, content=body, headers=headers)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if not errors:
        return _error_response(400, "Invalid request data")
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
    message = str(first.get("msg", "Invalid request data")).removeprefix("Value error, ")
    return _error_response(400, f"{field}: {message}" if field else message)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(500, "Server error", error=f"{type(exc).__name__}: {exc}")


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint for load balancers and monitoring."""
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------
from civic_reporter.api.auth import router as auth_router  # noqa: E402
from civic_reporter.api.app import app_router  # noqa: E402
from civic_reporter.api.admin import admin_router  # noqa: E402

app.include_router(auth_router, prefix="/api/auth", tags=["Auth"])
app.include_router(app_router, prefix="/api")
app.include_router(admin_router, prefix="/api/admin")

# Locally stored photos are served by the API itself
if storage_service.is_local:
    app.mount("/uploads", StaticFiles(directory=storage_service.uploads_dir, check_dir=False), name="uploads")
