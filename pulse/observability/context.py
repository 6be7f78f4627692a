"""
Per-request logging context: request id and the authenticated user.

Both live in context variables so they follow a request across awaits and
into the threadpool that runs sync endpoints. ``RequestContext`` scopes
them; the auth dependency binds the user once the key is resolved.
"""

import contextvars
import uuid

_request_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)
_user_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("user_id", default=None)


def get_request_id() -> str | None:
    return _request_id_var.get()


def get_user_id() -> str | None:
    return _user_id_var.get()


def bind_user(user_id: str) -> None:
    """Attach the caller's user id to every log line for the rest of the request."""
    _user_id_var.set(user_id)


def generate_request_id() -> str:
    return f"req-{uuid.uuid4().hex[:16]}"


class RequestContext:
    """
    Scope for one request's logging context.

    Usage:
        with RequestContext() as ctx:
            logger.info("Processing")   # carries ctx.request_id

        with RequestContext(request_id="req-abc123"):
            bind_user("user-1")         # later lines also carry user_id

    The user binding never outlives the block.
    """

    def __init__(self, request_id: str | None = None):
        self.request_id = request_id or generate_request_id()
        self._tokens: list[tuple[contextvars.ContextVar, contextvars.Token]] = []

    def __enter__(self) -> "RequestContext":
        self._tokens = [
            (_request_id_var, _request_id_var.set(self.request_id)),
            (_user_id_var, _user_id_var.set(None)),
        ]
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        for var, token in reversed(self._tokens):
            var.reset(token)
        self._tokens = []
