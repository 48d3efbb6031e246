"""FastAPI middleware that keeps unauthenticated browsers on the login page."""

import re
from fastapi import Request
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Sequence

from app.core.auth.session_verifier import SessionVerifier

LOGIN_PATH = "/login"

PUBLIC_PREFIXES = (
    "/login",
    "/auth/error",
    "/api/auth",
    "/static",
)
PUBLIC_PATHS = ("/favicon.ico",)

# Static assets never reach the guard at all.
STATIC_ASSET_PATTERN = re.compile(r"^/static/")

# JSON endpoints that answer anonymous callers with their own 401.
SELF_AUTHENTICATED_PATHS = ("/api/chat", "/api/assistant-ui-token")


def is_public_path(path: str, prefixes: Sequence[str] = PUBLIC_PREFIXES) -> bool:
    return path in PUBLIC_PATHS or any(path.startswith(prefix) for prefix in prefixes)


class RouteGuardMiddleware(BaseHTTPMiddleware):
    """Redirects requests without a session to the login route"""

    def __init__(self, app, verifier: SessionVerifier, login_path: str = LOGIN_PATH):
        """Initializes the middleware."""
        super().__init__(app)
        self.verifier = verifier
        self.login_path = login_path

    async def dispatch(self, request: Request, call_next):
        """Lets public and authenticated requests through, redirects the rest."""
        path = request.url.path

        if STATIC_ASSET_PATTERN.match(path):
            return await call_next(request)

        if is_public_path(path) or path in SELF_AUTHENTICATED_PATHS:
            return await call_next(request)

        if self.verifier.get_session(request) is None:
            return RedirectResponse(url=self.login_path, status_code=307)

        return await call_next(request)
