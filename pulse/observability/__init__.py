"""
Observability module: structured logging with request and user context.

Usage:
    from pulse.observability import RequestContext, bind_user, configure_logging

    configure_logging("INFO")
    with RequestContext():
        bind_user(identity.user_id)
        logger.info("Request started")   # carries request_id and user_id
"""

from .context import (
    RequestContext,
    bind_user,
    generate_request_id,
    get_request_id,
    get_user_id,
)
from .logging import (
    CorrelationIdMiddleware,
    HumanFormatter,
    JSONFormatter,
    configure_log_rotation,
    configure_logging,
)

__all__ = [
    "configure_logging",
    "configure_log_rotation",
    "JSONFormatter",
    "HumanFormatter",
    "CorrelationIdMiddleware",
    "RequestContext",
    "bind_user",
    "get_user_id",
    "generate_request_id",
    "get_request_id",
]
