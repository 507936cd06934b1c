"""Request logging middleware.

Logs every API request (method, path, status code, duration) through the
stdlib logger and, when Axiom is configured, ships the same event with the
masked JSON request body and the error envelope message to Axiom.
"""

import json
import logging
import re
import time
from typing import Any

from axiom_py import Client as AxiomClient
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from civic_reporter.config import settings

logger = logging.getLogger("civic_reporter.requests")

# Fields masked in request bodies and query params
_SENSITIVE_KEYS = re.compile(
    r"(password|passwd|secret|token|authorization|api_key|apikey|credential)",
    re.IGNORECASE,
)

_SKIP_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}
_SKIP_PREFIXES = ("/uploads/",)


def _mask(data: Any, depth: int = 0) -> Any:
    """Recursively replace sensitive values with ``***``."""
    if depth > 5:
        return "..."
    if isinstance(data, dict):
        return {k: "***" if _SENSITIVE_KEYS.search(str(k)) else _mask(v, depth + 1) for k, v in data.items()}
    if isinstance(data, list):
        return [_mask(item, depth + 1) for item in data[:20]]
    if isinstance(data, str) and len(data) > 2000:
        return data[:2000] + "...(truncated)"
    return data


def _envelope_message(body: bytes) -> str:
    """The ``message`` of an error envelope, or the raw body text."""
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return body.decode("utf-8", errors="replace")[:500]
    if isinstance(data, dict) and "message" in data:
        return str(data["message"])[:500]
    return str(data)[:500]


class AxiomLoggingMiddleware(BaseHTTPMiddleware):
    """Per-request access log, mirrored to Axiom when a token and dataset are set."""

    def __init__(self, app: Any) -> None:
        super().__init__(app)
        self._client: AxiomClient | None = None
        self._dataset: str = settings.AXIOM_DATASET
        if settings.AXIOM_API_TOKEN and settings.AXIOM_DATASET:
            self._client = AxiomClient(token=settings.AXIOM_API_TOKEN)

    async def _read_json_body(self, request: Request) -> Any:
        # Multipart uploads are never buffered into the log
        if not request.headers.get("content-type", "").startswith("application/json"):
            return None
        body_bytes = await request.body()
        if not body_bytes:
            return None
        try:
            return _mask(json.loads(body_bytes))
        except (json.JSONDecodeError, UnicodeDecodeError):
            return "(malformed json body)"

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if path in _SKIP_PATHS or path.startswith(_SKIP_PREFIXES):
            return await call_next(request)

        start_time = time.perf_counter()
        method = request.method
        request_body: Any = None
        if self._client is not None and method in ("POST", "PUT", "PATCH"):
            request_body = await self._read_json_body(request)

        error_detail: str | None = None
        status_code: int = 500
        try:
            response = await call_next(request)
            status_code = response.status_code

            if status_code >= 400:
                resp_body = b""
                async for chunk in response.body_iterator:
                    resp_body += chunk if isinstance(chunk, bytes) else chunk.encode("utf-8")
                error_detail = _envelope_message(resp_body)
                # Re-wrap the consumed body
                response = Response(
                    content=resp_body,
                    status_code=status_code,
                    headers=dict(response.headers),
                    media_type=response.media_type,
                )
        except Exception as exc:
            error_detail = f"{type(exc).__name__}: {str(exc)[:300]}"
            raise
        finally:
            duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
            if error_detail:
                logger.info("%s %s %s %.2fms - %s", method, path, status_code, duration_ms, error_detail)
            else:
                logger.info("%s %s %s %.2fms", method, path, status_code, duration_ms)

            if self._client is not None:
                event: dict[str, Any] = {
                    "method": method,
                    "path": path,
                    "status_code": status_code,
                    "duration_ms": duration_ms,
                }
                if request.query_params:
                    event["query_params"] = _mask(dict(request.query_params))
                if request.path_params:
                    event["path_params"] = dict(request.path_params)
                if request_body is not None:
                    event["request_body"] = request_body
                if error_detail:
                    event["error"] = error_detail
                try:
                    self._client.ingest_events(self._dataset, [event])
                except Exception as exc:
                    # Never break a request on a log shipping failure
                    logger.warning("Axiom ingest failed: %s", exc)

        return response
