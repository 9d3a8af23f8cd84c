"""Shared request helpers: caller identity and engine error → HTTP status."""

from __future__ import annotations

from fastapi import Header, HTTPException, Request

from ..core.errors import (
    AuthError,
    DispatchError,
    NotAuthenticatedError,
    NotAuthorizedError,
)

# Exceptions the routes translate instead of letting them become a bare 500
ENGINE_ERRORS = (AuthError, LookupError, ValueError, DispatchError)


async def caller_id(x_caller_id: str | None = Header(default=None)) -> str | None:
    """Identity asserted by the upstream auth layer, if any."""
    return x_caller_id or None


def require_admin(request: Request, caller: str | None) -> str:
    """Raise 401/403 unless the caller is an administrator."""
    try:
        return request.app.state.policy.require(caller)
    except AuthError as e:
        raise to_http(e) from e


def to_http(e: Exception) -> HTTPException:
    """Translate an engine exception into the matching HTTPException."""
    if isinstance(e, NotAuthenticatedError):
        return HTTPException(status_code=401, detail=str(e))
    if isinstance(e, NotAuthorizedError):
        return HTTPException(status_code=403, detail=str(e))
    if isinstance(e, LookupError):
        detail = e.args[0] if isinstance(e, KeyError) and e.args else str(e)
        return HTTPException(status_code=404, detail=str(detail))
    if isinstance(e, ValueError):
        return HTTPException(status_code=400, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))
