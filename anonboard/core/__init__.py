# Core infrastructure
from anonboard.core.context import (
    clear_context,
    get_context,
    get_request_id,
    get_user_id,
    set_principal,
    set_request_id,
    set_trace_id,
)
from anonboard.core.database import init_async_cassandra, shutdown_async_cassandra
from anonboard.core.logging import configure_structlog, get_logger
from anonboard.core.middleware import RequestContextMiddleware


__all__ = [
    "RequestContextMiddleware",
    "clear_context",
    "configure_structlog",
    "get_context",
    "get_logger",
    "get_request_id",
    "get_user_id",
    "init_async_cassandra",
    "set_principal",
    "set_request_id",
    "set_trace_id",
    "shutdown_async_cassandra",
]
