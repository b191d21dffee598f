"""HTTP middleware: rate limiting, request correlation, access logging and security headers."""

from __future__ import annotations

import logging
import time
from typing import Awaitable, Callable
from uuid import uuid4

from fastapi import FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter

from app.errors import internal_error_response, problem_response
from settings import Settings

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains; preload",
    "Content-Security-Policy": (
        "default-src 'self'; script-src 'self'; style-src 'self' 'unsafe-inline'; "
        "img-src 'self' data: https:"
    ),
}

CallNext = Callable[[Request], Awaitable[Response]]


def _client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def install_middleware(app: FastAPI, settings: Settings) -> None:
    """Attach rate-limit, security-header, request-logging and CORS middleware."""

    # Each app gets its own counters so separate instances do not share quota.
    limiter = FixedWindowRateLimiter(MemoryStorage())
    rate_limit_item = RateLimitItemPerSecond(
        settings.rate_limit_max_requests, max(1, settings.rate_limit_window_ms // 1000)
    )

    @app.middleware("http")
    async def rate_limit(request: Request, call_next: CallNext) -> Response:
        key = _client_key(request)
        allowed = limiter.hit(rate_limit_item, key)
        stats = limiter.get_window_stats(rate_limit_item, key)
        reset_seconds = max(0, int(stats.reset_time - time.time()))
        if allowed:
            response = await call_next(request)
        else:
            logger.warning(
                "Rate limit exceeded",
                extra={
                    "request_id": getattr(request.state, "request_id", None),
                    "path": request.url.path,
                    "error_code": "RATE_LIMIT_EXCEEDED",
                },
            )
            response = problem_response(
                request,
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                type_="/errors/rate-limit-exceeded",
                title="Rate Limit Exceeded",
                detail="Too many requests from this IP. Please try again later.",
            )
            response.headers["Retry-After"] = str(reset_seconds)
        response.headers["RateLimit-Limit"] = str(settings.rate_limit_max_requests)
        response.headers["RateLimit-Remaining"] = str(stats.remaining)
        response.headers["RateLimit-Reset"] = str(reset_seconds)
        return response

    @app.middleware("http")
    async def security_headers(request: Request, call_next: CallNext) -> Response:
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response

    @app.middleware("http")
    async def request_context(request: Request, call_next: CallNext) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        request.state.request_id = request_id
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as exc:
            response = internal_error_response(request, exc)
            for header, value in SECURITY_HEADERS.items():
                response.headers.setdefault(header, value)

        duration_ms = round((time.perf_counter() - start_time) * 1000, 3)
        response.headers[REQUEST_ID_HEADER] = request_id
        context = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        }
        logger.info("Request completed", extra=context)
        if duration_ms > settings.slow_request_ms:
            logger.warning("Slow request detected", extra=context)
        return response

    # Added last so it wraps the other middleware and answers preflights first.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "Authorization", "X-API-Key", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER],
    )
