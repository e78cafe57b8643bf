"""Request middleware for context management and logging."""

import time
from collections.abc import Awaitable, Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from studynotion.core.context import (
    clear_context,
    set_correlation_id,
    set_request_id,
    set_trace_id,
)


logger = structlog.get_logger(__name__)

_CLIENT_ERROR = 400
_SERVER_ERROR = 500


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Give each request its own logging context and timing log lines.

    ``X-Request-ID`` is reused when the client (e.g. the checkout frontend)
    sends one and is always echoed on the response. ``X-Correlation-ID``
    ties the capture, verify and email calls of one checkout together, and
    ``X-Trace-ID`` carries an upstream tracing ID into the logs.
    """

    REQUEST_ID_HEADER = "X-Request-ID"
    TRACE_ID_HEADER = "X-Trace-ID"
    CORRELATION_ID_HEADER = "X-Correlation-ID"

    def __init__(
        self,
        app: ASGIApp,
        log_requests: bool = True,
        exclude_paths: list[str] | None = None,
    ) -> None:
        super().__init__(app)
        self.log_requests = log_requests
        self.exclude_paths = tuple(exclude_paths or ("/health",))

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        start = time.perf_counter()

        request_id = set_request_id(request.headers.get(self.REQUEST_ID_HEADER))
        set_trace_id(request.headers.get(self.TRACE_ID_HEADER))
        set_correlation_id(request.headers.get(self.CORRELATION_ID_HEADER))
        request.state.request_id = request_id

        log = logger.bind(
            method=request.method,
            path=request.url.path,
        )
        verbose = self.log_requests and not request.url.path.startswith(
            self.exclude_paths
        )

        if verbose:
            log.info(
                "request_started",
                client_ip=self._client_ip(request),
                user_agent=request.headers.get("user-agent"),
            )

        try:
            response = await call_next(request)
        except Exception as e:
            log.exception(
                "request_failed",
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=_elapsed_ms(start),
            )
            raise
        else:
            if verbose:
                self._level_for(log, response.status_code)(
                    "request_completed",
                    status_code=response.status_code,
                    duration_ms=_elapsed_ms(start),
                )
            response.headers[self.REQUEST_ID_HEADER] = request_id
            return response
        finally:
            clear_context()

    @staticmethod
    def _level_for(log, status_code: int):
        if status_code >= _SERVER_ERROR:
            return log.error
        if status_code >= _CLIENT_ERROR:
            return log.warning
        return log.info

    @staticmethod
    def _client_ip(request: Request) -> str | None:
        """Client address, preferring reverse proxy headers."""
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()
        return request.headers.get("x-real-ip") or (
            request.client.host if request.client else None
        )
