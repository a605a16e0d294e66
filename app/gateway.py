"""
Access-control gateway.

Runs ahead of every gated request, resolves the caller, and redirects
according to authentication state and role. ``decide_redirect`` holds the
policy and has no side effects; ``AccessControlMiddleware`` wires it into
the ASGI stack.
"""

import logging
import re
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import RedirectResponse, Response

from app.identity import ADMIN_ROLE, IdentityProvider

logger = logging.getLogger(__name__)

SIGN_IN_PATH = "/sign-in"
DASHBOARD_PATH = "/dashboard"
ADMIN_DASHBOARD_PATH = "/admin/dashboard"
ADMIN_PREFIX = "/admin"
ERROR_PATH = "/error"

PUBLIC_ROUTES = [
    re.compile(r"/"),
    re.compile(r"/api/webhook/register"),
    re.compile(r"/sign-in(.*)"),
    re.compile(r"/sign-up(.*)"),
]

_INTERNAL_PREFIXES = ("/_next", "/static", "/docs", "/redoc", "/openapi.json")
_STATIC_ASSET = re.compile(
    r".*\.(?:html?|css|js(?!on)|jpe?g|webp|png|gif|svg|ttf|woff2?|ico|csv|docx?|xlsx?|zip|webmanifest)$"
)


def is_public_route(path: str) -> bool:
    return any(pattern.fullmatch(path) for pattern in PUBLIC_ROUTES)


def is_gated(path: str) -> bool:
    """API paths always pass through the gateway; static assets and framework paths never do."""
    if path.startswith("/api"):
        return True
    if path.startswith(_INTERNAL_PREFIXES):
        return False
    return not _STATIC_ASSET.match(path)


def dashboard_for(role: Optional[str]) -> str:
    return ADMIN_DASHBOARD_PATH if role == ADMIN_ROLE else DASHBOARD_PATH


def decide_redirect(path: str, user_id: Optional[str], role: Optional[str] = None) -> Optional[str]:
    """Where to send the caller, or None to let the request through."""
    public = is_public_route(path)

    if user_id is None:
        return None if public else SIGN_IN_PATH

    if role == ADMIN_ROLE and path == DASHBOARD_PATH:
        return ADMIN_DASHBOARD_PATH
    if role != ADMIN_ROLE and path.startswith(ADMIN_PREFIX):
        return DASHBOARD_PATH
    if public:
        return dashboard_for(role)
    return None


class AccessControlMiddleware(BaseHTTPMiddleware):
    """
    The identity provider is read from ``app.state.identity`` on every
    request so it can be swapped at runtime (tests do).
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if not is_gated(path):
            return await call_next(request)

        identity: IdentityProvider = request.app.state.identity
        try:
            user = await identity.resolve(request)
        except Exception:
            logger.exception("Failed to resolve caller identity for %s", path)
            return RedirectResponse(ERROR_PATH)

        target = decide_redirect(path, user.id if user else None, user.role if user else None)
        if target is not None:
            logger.debug("Redirecting %s to %s", path, target)
            return RedirectResponse(target)

        request.state.user = user
        return await call_next(request)
