"""
Request authorization.

Two steps, repeated for every protected endpoint:
1. authenticate: session token -> Identity, or Unauthenticated (401)
2. authorize_admin: Identity -> Identity, or Forbidden (403)

Roles are compared case-insensitively through ``normalize_role`` only.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional

from fastapi import Request

from tradersjournal.auth.profiles import get_role
from tradersjournal.auth.supabase_auth import SupabaseUser, get_user_from_token
from tradersjournal.config import settings
from tradersjournal.errors import Forbidden, Unauthenticated
from tradersjournal.journal.models import Role

logger = logging.getLogger(__name__)

ACCESS_TOKEN_COOKIE = "access_token"
REFRESH_TOKEN_COOKIE = "refresh_token"
LEGACY_ACCESS_TOKEN_COOKIE = "sb-access-token"


@dataclass(frozen=True)
class Identity:
    """The authenticated caller."""

    user_id: str
    email: str
    role: Role = Role.USER
    username: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def normalize_role(value: Any) -> Role:
    """Map stored role text to a Role. Anything but admin is a plain user."""
    if isinstance(value, Role):
        return value
    if isinstance(value, str) and value.strip().lower() == Role.ADMIN.value:
        return Role.ADMIN
    return Role.USER


def extract_token(request: Request) -> Optional[str]:
    """
    Find the session token on a request.

    Checks:
    1. Authorization header (Bearer token)
    2. Session cookie (access_token, then sb-access-token)
    """
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header[7:].strip()
        if token:
            return token

    return request.cookies.get(ACCESS_TOKEN_COOKIE) or request.cookies.get(LEGACY_ACCESS_TOKEN_COOKIE)


async def resolve_user(
    auth_client: Any,
    token: str,
    timeout: Optional[float] = None,
) -> Optional[SupabaseUser]:
    """
    Look the token up with the identity provider, giving up after ``timeout``.

    A lookup that times out is treated like an invalid session.
    """
    limit = settings.session_timeout_seconds if timeout is None else timeout
    try:
        return await asyncio.wait_for(get_user_from_token(auth_client, token), timeout=limit)
    except asyncio.TimeoutError:
        logger.warning(f"Session lookup timed out after {limit}s")
        return None


async def authenticate(
    token: Optional[str],
    auth_client: Any,
    db: Any,
    timeout: Optional[float] = None,
) -> Identity:
    """
    Resolve the caller's identity and role.

    Raises:
        Unauthenticated: no token, or the token is invalid/expired
        UpstreamFailure: the profile lookup failed
    """
    if not token:
        raise Unauthenticated("Not authenticated")

    user = await resolve_user(auth_client, token, timeout=timeout)
    if user is None:
        raise Unauthenticated("Invalid or expired token")

    role = await asyncio.to_thread(get_role, db, user.id)
    return Identity(
        user_id=user.id,
        email=user.email,
        role=normalize_role(role),
        username=user.username,
    )


def authorize_admin(identity: Identity) -> Identity:
    """Allow only admins through."""
    if not identity.is_admin:
        logger.warning(f"Non-admin user {identity.user_id} denied admin access")
        raise Forbidden("Forbidden")
    return identity
