"""
Caller identity plumbing.

Authentication happens upstream and deposits the caller's user id on
`request.state.user_id`. When the service sits behind a gateway that forwards
the authenticated id as a header instead, IdentityMiddleware copies it there.
"""

from __future__ import annotations

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.errors import UnauthorizedError


class IdentityMiddleware(BaseHTTPMiddleware):
    """Copy the trusted identity header into request.state unless already set."""

    def __init__(self, app, header_name: str = "X-User-Id") -> None:
        super().__init__(app)
        self._header_name = header_name

    async def dispatch(self, request: Request, call_next):
        if getattr(request.state, "user_id", None) is None:
            value = (request.headers.get(self._header_name) or "").strip()
            if value:
                request.state.user_id = value
        return await call_next(request)


def get_caller_id(request: Request) -> str:
    """Return the authenticated caller id or fail with 401."""
    user_id = getattr(request.state, "user_id", None)
    if not user_id:
        raise UnauthorizedError()
    return str(user_id)
