"""
Authentication middleware for the protected API prefixes.

Only presence and validity of the session cookie is checked here.
Per-operation permissions are enforced by require_capability and by
the services themselves.
"""

import logging
from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from src.auth.jwt import get_token_from_cookie, verify_token

logger = logging.getLogger(__name__)

PROTECTED_PREFIXES = (
    "/api/admin",
    "/api/panel",
)


class AuthMiddleware(BaseHTTPMiddleware):
    """Reject unauthenticated calls to /api/admin/* and /api/panel/* with 401."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable,
    ) -> Response:
        path = request.url.path
        if not path.startswith(PROTECTED_PREFIXES):
            return await call_next(request)

        token = get_token_from_cookie(request)
        if not token or verify_token(token) is None:
            logger.debug(f"Unauthenticated request to {path}")
            return JSONResponse(
                status_code=401,
                content={"detail": "Not authenticated"},
            )

        return await call_next(request)
