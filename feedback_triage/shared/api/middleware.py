"""
Shared API Middleware
======================

Request context, request logging and the exception handlers that turn
service exceptions into JSON error responses.

Error body::

    {"detail": "...", "correlation_id": "...", "timestamp": "...", ...}
"""

import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, Dict

from fastapi import FastAPI, Request, Response, status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
from fastapi.responses import JSONResponse

from feedback_triage.config import settings
from feedback_triage.core import (
    ApplicationException,
    ConflictException,
    DomainException,
    ResourceNotFoundException,
    ValidationException,
    utc_now,
)
from feedback_triage.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"

# Checked in order, so subclasses must come before their bases
STATUS_BY_EXCEPTION = (
    (ResourceNotFoundException, status.HTTP_404_NOT_FOUND),
    (ConflictException, status.HTTP_409_CONFLICT),
    (ValidationException, status.HTTP_400_BAD_REQUEST),
    (DomainException, status.HTTP_400_BAD_REQUEST),
)


@dataclass
class RouteStats:
    """Request counters for one route template."""
    count: int = 0
    errors: int = 0
    total_ms: float = 0.0

    @property
    def average_ms(self) -> float:
        return round(self.total_ms / self.count, 1) if self.count else 0.0


@dataclass
class RequestStats:
    """In-process request counters keyed by ``METHOD /route/{template}``."""
    routes: Dict[str, RouteStats] = field(default_factory=dict)

    def record(self, key: str, elapsed_ms: float, failed: bool) -> None:
        stats = self.routes.setdefault(key, RouteStats())
        stats.count += 1
        stats.total_ms += elapsed_ms
        if failed:
            stats.errors += 1

    def summary(self) -> dict:
        total = sum(stats.count for stats in self.routes.values())
        errors = sum(stats.errors for stats in self.routes.values())
        return {"requests": total, "server_errors": errors}


request_stats = RequestStats()


def _route_key(request: Request) -> str:
    # Path template once routing has run, so /api/feedback/{feedback_id}
    # is counted as one route
    route = request.scope.get("route")
    path = getattr(route, "path", None) or request.url.path
    return f"{request.method} {path}"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Assigns the correlation id used by every log line of a request.

    An incoming ``X-Correlation-ID`` header is reused so that a client
    retrying a CSV import can find its earlier attempt in the logs.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id

        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs each request with its route, status and latency.

    Requests slower than ``slow_request_ms`` are logged as warnings;
    LLM-backed detection is the usual culprit.
    """

    def __init__(self, app: ASGIApp, stats: RequestStats, slow_request_ms: int):
        super().__init__(app)
        self._stats = stats
        self._slow_request_ms = slow_request_ms

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = getattr(request.state, "correlation_id", "unknown")
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            self._stats.record(_route_key(request), elapsed_ms, failed=True)
            logger.error(
                "Request failed",
                extra={
                    "correlation_id": correlation_id,
                    "method": request.method,
                    "path": request.url.path,
                    "error": str(e),
                    "response_time_ms": int(elapsed_ms)
                }
            )
            raise

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        route = _route_key(request)
        self._stats.record(route, elapsed_ms, failed=response.status_code >= 500)
        response.headers["X-Response-Time"] = f"{elapsed_ms / 1000:.3f}s"

        log = logger.warning if elapsed_ms >= self._slow_request_ms else logger.info
        log(
            "Request completed",
            extra={
                "correlation_id": correlation_id,
                "route": route,
                "path": request.url.path,
                "status_code": response.status_code,
                "response_time_ms": int(elapsed_ms)
            }
        )
        return response


def _error_body(request: Request, detail: str, **extra) -> dict:
    return {
        "detail": detail,
        "correlation_id": getattr(request.state, "correlation_id", "unknown"),
        "timestamp": utc_now().isoformat(),
        **extra,
    }


async def application_exception_handler(request: Request, exc: ApplicationException) -> JSONResponse:
    """Map a service exception to its HTTP status; unmapped ones become 500."""
    status_code = next(
        (code for exc_type, code in STATUS_BY_EXCEPTION if isinstance(exc, exc_type)),
        None
    )
    if status_code is None:
        return await global_exception_handler(request, exc)

    logger.info(
        "Request rejected",
        extra={
            "correlation_id": getattr(request.state, "correlation_id", "unknown"),
            "path": request.url.path,
            "error_type": type(exc).__name__,
            "status_code": status_code,
        }
    )

    return JSONResponse(
        status_code=status_code,
        content=_error_body(request, exc.message, errors=exc.details or None)
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler for unhandled exceptions.

    The raw error text is only returned in development and test.
    """
    logger.error(
        "Unhandled exception",
        extra={
            "correlation_id": getattr(request.state, "correlation_id", "unknown"),
            "path": request.url.path,
            "method": request.method,
            "error_type": type(exc).__name__,
            "error_message": str(exc)
        }
    )

    debug_info = str(exc) if settings.environment in ("development", "test") else None
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(request, "Internal server error", debug_info=debug_info)
    )


def install_middleware(app: FastAPI) -> None:
    """Register the request middleware and exception handlers."""
    app.add_middleware(
        RequestLoggingMiddleware,
        stats=request_stats,
        slow_request_ms=settings.slow_request_ms
    )
    # Added last so it runs first and the correlation id is set for logging
    app.add_middleware(RequestContextMiddleware)
    app.add_exception_handler(ApplicationException, application_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
