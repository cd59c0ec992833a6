"""
Shared API Middleware
======================

Common middleware and exception handlers for the edge HTTP handler.

Every response leaving the application carries permissive CORS headers that
reflect the caller's Origin plus ``Cache-Control: no-store``. All error bodies
share one shape: ``{"error": message}``.
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from ticketbuddy.core import ApplicationException
from ticketbuddy.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

ALLOWED_METHODS = "GET,POST,PATCH,DELETE,OPTIONS"
ALLOWED_HEADERS = (
    "content-type,authorization,x-correlation-id,"
    "x-github-event,x-github-delivery,x-hub-signature-256"
)


def edge_headers(origin: str) -> dict[str, str]:
    """CORS and caching headers attached to every response."""
    return {
        "Access-Control-Allow-Origin": origin,
        "Access-Control-Allow-Methods": ALLOWED_METHODS,
        "Access-Control-Allow-Headers": ALLOWED_HEADERS,
        "Vary": "Origin",
        "Cache-Control": "no-store",
    }


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


class EdgeHeadersMiddleware(BaseHTTPMiddleware):
    """
    Outermost middleware of the edge handler.

    - OPTIONS preflight short-circuits with 204 and no body
    - CORS + no-store headers are added to every response
    - Any exception that escapes the application becomes a 500 ``{"error": message}``
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        origin = request.headers.get("origin") or "*"

        if request.method == "OPTIONS":
            return Response(status_code=204, headers=edge_headers(origin))

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Unhandled exception",
                extra={
                    "correlation_id": getattr(request.state, "correlation_id", "unknown"),
                    "path": request.url.path,
                    "method": request.method,
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
                exc_info=True,
            )
            response = error_response(500, str(e) or type(e).__name__)

        response.headers.update(edge_headers(origin))
        return response


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """
    Adds correlation ID to requests for tracing.

    Correlation IDs link the log lines of one request together.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = request.headers.get("X-Correlation-ID", str(uuid.uuid4()))

        request.state.correlation_id = correlation_id

        response = await call_next(request)
        response.headers["X-Correlation-ID"] = correlation_id
        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs all requests and responses.

    Provides audit trail and debugging information.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = getattr(request.state, "correlation_id", "unknown")
        start_time = time.perf_counter()

        logger.info(
            "Request started",
            extra={
                "correlation_id": correlation_id,
                "method": request.method,
                "path": request.url.path,
                "client": request.client.host if request.client else None
            }
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                extra={
                    "correlation_id": correlation_id,
                    "method": request.method,
                    "path": request.url.path,
                    "error": str(e),
                    "response_time_ms": int((time.perf_counter() - start_time) * 1000)
                }
            )
            raise

        logger.info(
            "Request completed",
            extra={
                "correlation_id": correlation_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "response_time_ms": int((time.perf_counter() - start_time) * 1000)
            }
        )
        return response


# ========== Exception Handlers ==========

async def application_exception_handler(request: Request, exc: ApplicationException) -> JSONResponse:
    """Render domain and upstream failures with the status their class declares."""
    status_code = exc.status_code
    log = logger.warning if status_code < 500 else logger.error
    log(
        "Request rejected",
        extra={
            "correlation_id": getattr(request.state, "correlation_id", "unknown"),
            "path": request.url.path,
            "status_code": status_code,
            "error_type": type(exc).__name__,
            "error_message": exc.message,
        }
    )
    return error_response(status_code, exc.message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Router misses and explicit HTTPExceptions."""
    if exc.status_code == 404 and exc.detail == "Not Found":
        message = "not found"
    elif exc.status_code == 405 and exc.detail == "Method Not Allowed":
        # Unmatched method+path is reported like any other miss
        return error_response(404, "not found")
    else:
        message = str(exc.detail)
    return error_response(exc.status_code, message)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Request body/query validation failures are client errors (400)."""
    problems = []
    for error in exc.errors():
        location = ".".join(
            str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")
        )
        message = error.get("msg", "invalid value")
        problems.append(f"{location}: {message}" if location else message)
    return error_response(400, "; ".join(problems) or "invalid request")
