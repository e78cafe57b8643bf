# Core infrastructure
from studynotion.core.context import (
    clear_context,
    get_context,
    get_correlation_id,
    get_request_id,
    get_trace_id,
    get_user_id,
    set_correlation_id,
    set_request_id,
    set_trace_id,
    set_user_id,
)
from studynotion.core.logging import configure_structlog, get_logger
from studynotion.core.middleware import RequestContextMiddleware


__all__ = [
    "RequestContextMiddleware",
    "clear_context",
    "configure_structlog",
    "get_context",
    "get_correlation_id",
    "get_logger",
    "get_request_id",
    "get_trace_id",
    "get_user_id",
    "set_correlation_id",
    "set_request_id",
    "set_trace_id",
    "set_user_id",
]
