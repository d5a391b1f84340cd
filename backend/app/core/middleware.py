"""
ComplaintDesk - HTTP Middleware

Request logging with correlation ids, security headers for responses that
carry complaint data, and a request body size limit.
"""

import re
import time
from typing import Any, Callable, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from app.core.exceptions import RequestTooLargeError, error_response
from app.core.logging_config import (
    logger,
    generate_request_id,
    set_account_id,
    set_request_id,
)


QUIET_PATHS = {"/", "/favicon.ico", "/docs", "/redoc", "/openapi.json"}

SLOW_REQUEST_MS = 1000

_COMPLAINT_PATH = re.compile(r"/complaints/(?P<complaint_id>[^/]+)")


def should_skip_logging(path: str) -> bool:
    """Docs, root and health checks are not logged"""
    return path in QUIET_PATHS or "/health" in path


def request_context(request: Request) -> Dict[str, Any]:
    """Log fields describing who touched which complaint"""
    context: Dict[str, Any] = {
        "http_method": request.method,
        "http_path": request.url.path,
    }
    match = _COMPLAINT_PATH.search(request.url.path)
    if match:
        context["complaint_id"] = match.group("complaint_id")
    # Set by the auth dependency once the bearer token checks out
    account_id: Optional[str] = getattr(request.state, "account_id", None)
    if account_id:
        context["caller_account_id"] = account_id
    return context


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log each API request once it completes.

    Reuses an incoming ``X-Request-ID`` or generates one, and returns it
    with ``X-Response-Time`` so the CLI and server logs can be matched.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        set_request_id(request_id)
        quiet = should_skip_logging(request.url.path)
        started = time.perf_counter()

        try:
            response = await call_next(request)
            elapsed_ms = (time.perf_counter() - started) * 1000
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time"] = f"{elapsed_ms:.2f}ms"

            if not quiet:
                self._log_completion(request, response.status_code, elapsed_ms)
            return response
        except Exception as exc:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.error(
                f"{request.method} {request.url.path} raised {type(exc).__name__} after {elapsed_ms:.0f}ms",
                exc_info=True,
                extra={
                    "event_type": "http_request_error",
                    "duration_ms": elapsed_ms,
                    **request_context(request),
                },
            )
            raise
        finally:
            set_request_id("")
            set_account_id("")

    @staticmethod
    def _log_completion(request: Request, status_code: int, elapsed_ms: float) -> None:
        if status_code >= 500:
            log = logger.error
        elif status_code >= 400:
            log = logger.warning
        else:
            log = logger.info

        context = request_context(request)
        log(
            f"{request.method} {request.url.path} -> {status_code} ({elapsed_ms:.0f}ms)",
            extra={
                "event_type": "http_request",
                "http_status": status_code,
                "duration_ms": elapsed_ms,
                **context,
            },
        )

        if elapsed_ms > SLOW_REQUEST_MS:
            logger.warning(
                f"Slow request: {request.method} {request.url.path} took {elapsed_ms:.0f}ms",
                extra={"event_type": "slow_request", "duration_ms": elapsed_ms, **context},
            )


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Standard hardening headers; API responses are never cached"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        # Complaint bodies are private to their owner and admins
        if request.url.path.startswith("/api/"):
            response.headers["Cache-Control"] = "no-store"
        return response


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject bodies over ``max_size`` using the declared Content-Length"""

    def __init__(self, app: ASGIApp, max_size: int = 1024 * 1024):
        super().__init__(app)
        self.max_size = max_size

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        declared = request.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > self.max_size:
            error = RequestTooLargeError(self.max_size)
            logger.warning(
                f"Rejected {declared}-byte body on {request.url.path}",
                extra={"event_type": "request_too_large", "http_path": request.url.path},
            )
            return JSONResponse(status_code=error.status_code, content=error_response(error))

        return await call_next(request)


__all__ = [
    "RequestLoggingMiddleware",
    "SecurityHeadersMiddleware",
    "RequestSizeLimitMiddleware",
    "request_context",
    "should_skip_logging",
]
