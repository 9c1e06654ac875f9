"""
Request logging middleware.

Logs every purge-service request with timing and a request id.
"""

import logging
import time
import uuid
from typing import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware logging method, path, client, status and duration.

    The request id is taken from ``X-Request-ID`` or generated, and echoed
    back on the response so operators can match it with purge logs.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        logger_instance: logging.Logger | None = None,
        skip_paths: set[str] | None = None,
    ) -> None:
        """
        Initialize the logging middleware.

        Args:
            app: ASGI application
            logger_instance: Custom logger instance
            skip_paths: Paths to skip logging for (default: /health)
        """
        super().__init__(app)
        self._logger = logger_instance or logger
        self._skip_paths = skip_paths if skip_paths is not None else {"/health"}

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if request.url.path in self._skip_paths:
            return await call_next(request)

        start = time.perf_counter()
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:12]
        request.state.request_id = request_id
        info = {
            "method": request.method,
            "path": request.url.path,
            "client_ip": self._get_client_ip(request),
            "request_id": request_id,
        }

        self._logger.info(
            f"{info['method']} {info['path']} started",
            extra={"event": "request_started", **info},
        )

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start) * 1000
            self._logger.error(
                f"{info['method']} {info['path']} failed: {e}",
                extra={"event": "request_failed", "duration_ms": round(duration_ms, 2), **info},
                exc_info=True,
            )
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        self._logger.info(
            f"{info['method']} {info['path']} -> {response.status_code} ({duration_ms:.0f}ms)",
            extra={
                "event": "request_completed",
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
                **info,
            },
        )
        response.headers["X-Process-Time"] = f"{duration_ms:.2f}"
        response.headers["X-Request-ID"] = request_id
        return response

    @staticmethod
    def _get_client_ip(request: Request) -> str:
        """Client address, preferring proxy forwarding headers."""
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()
        real_ip = request.headers.get("x-real-ip")
        if real_ip:
            return real_ip
        if request.client:
            return request.client.host
        return "unknown"
