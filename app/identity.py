"""
Identity provider access.

Verifies session tokens issued by the hosted identity provider and looks
up a user's role from its backend API.
"""

import logging
from typing import Optional

import httpx
from fastapi import Request
from jose import JWTError, jwt
from pydantic import BaseModel

from app.config import Settings, get_settings
from app.exceptions import AuthenticationError, ConfigurationError

logger = logging.getLogger(__name__)

SESSION_COOKIE = "__session"
ADMIN_ROLE = "admin"


class AuthenticatedUser(BaseModel):
    id: str
    role: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


def session_token_from_request(request: Request) -> Optional[str]:
    """Bearer token if present, else the session cookie."""
    authorization = request.headers.get("authorization", "")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer" and token:
        return token.strip()
    return request.cookies.get(SESSION_COOKIE) or None


class IdentityProvider:
    def __init__(self, settings: Optional[Settings] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings or get_settings()
        self._transport = transport

    def verify_session(self, token: Optional[str]) -> Optional[str]:
        """
        Return the user id (``sub``) of a valid session token.

        Missing, expired or tampered tokens yield ``None``; the caller treats
        that as an anonymous request.
        """
        if not token:
            return None
        if not self.settings.session_jwt_key:
            raise ConfigurationError("Session verification key is not configured", code="SESSION_KEY_MISSING")

        try:
            claims = jwt.decode(
                token,
                self.settings.session_jwt_key,
                algorithms=self.settings.session_jwt_algorithms,
                options={"verify_aud": False},
            )
        except JWTError as e:
            logger.debug("Rejected session token: %s", e)
            return None
        return claims.get("sub") or None

    async def fetch_role(self, user_id: str) -> Optional[str]:
        """Role stored in the user's public metadata, or None."""
        if not self.settings.clerk_secret_key:
            raise ConfigurationError("Identity provider secret key is not configured", code="CLERK_KEY_MISSING")

        async with httpx.AsyncClient(
            base_url=self.settings.clerk_api_url,
            headers={"Authorization": f"Bearer {self.settings.clerk_secret_key}"},
            transport=self._transport,
            timeout=10.0,
        ) as client:
            response = await client.get(f"/users/{user_id}")
            response.raise_for_status()
            data = response.json()

        metadata = data.get("public_metadata") or {}
        role = metadata.get("role")
        return role if isinstance(role, str) else None

    async def resolve(self, request: Request) -> Optional[AuthenticatedUser]:
        user_id = self.verify_session(session_token_from_request(request))
        if user_id is None:
            return None
        return AuthenticatedUser(id=user_id, role=await self.fetch_role(user_id))


async def get_current_user(request: Request) -> AuthenticatedUser:
    """
    Route dependency for the caller resolved by the access-control gateway.

    Usage:
        @router.get("/")
        async def route(user: AuthenticatedUser = Depends(get_current_user)):
            ...
    """
    user = getattr(request.state, "user", None)
    if user is None:
        raise AuthenticationError("Not signed in", code="NOT_AUTHENTICATED")
    return user
