"""
API Authentication for Project Pulse.

Resolves the bearer key on a request to an Identity (user id + role).

Token extraction order:
1. Authorization: Bearer <token> header
2. X-API-Token header

Usage:
    from api.auth import require_identity

    @router.get("/protected")
    def protected_endpoint(identity: Identity = Depends(require_identity)):
        ...
"""

import logging

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from pulse.access import Identity
from pulse.observability import bind_user
from pulse.security import KeyManager

logger = logging.getLogger(__name__)

# Security scheme for OpenAPI docs
security = HTTPBearer(auto_error=False)


def _get_token_from_request(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:]

    x_token = request.headers.get("X-API-Token")
    if x_token:
        return x_token

    return None


def get_key_manager(request: Request) -> KeyManager:
    return request.app.state.keys


async def require_identity(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Identity:
    """
    Dependency that requires a valid API key.

    Returns the caller's Identity, attaches it to request.state.identity
    and binds the user id to the request's log context.
    Raises HTTPException 401 when the key is missing or invalid.
    """
    provided_token = _get_token_from_request(request)

    if not provided_token:
        logger.warning(f"Auth failed: no token provided for {request.url.path}")
        raise HTTPException(
            status_code=401,
            detail="Authentication required. Provide Bearer token in Authorization header.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    identity = get_key_manager(request).validate_key(provided_token)
    if identity is None:
        logger.warning(f"Auth failed: invalid key for {request.url.path}")
        raise HTTPException(
            status_code=401,
            detail="Invalid authentication token.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    request.state.identity = identity
    bind_user(identity.user_id)
    logger.debug(f"Auth succeeded for {request.url.path} (user={identity.user_id}, role={identity.role})")
    return identity
