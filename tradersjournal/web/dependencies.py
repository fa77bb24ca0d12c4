"""
Shared FastAPI dependencies for authentication/authorization.

Every protected route depends on ``get_current_identity`` (401 on failure);
admin routes add ``require_admin`` (403 on failure). Clients are provided
through dependencies so tests can override them.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import Depends, Request

from tradersjournal.auth.authorizer import Identity, authenticate, authorize_admin, extract_token
from tradersjournal.db.supabase_client import get_service_client, get_supabase_client, new_auth_client
from tradersjournal.errors import Unauthenticated
from tradersjournal.llm.client import LLMClient, get_llm_client

logger = logging.getLogger(__name__)


def get_db() -> Any:
    """Service-role client used for table access."""
    return get_service_client()


def get_auth_client() -> Any:
    """Shared anon client for stateless Supabase Auth calls."""
    return get_supabase_client()


def get_sign_in_client() -> Any:
    """Fresh anon client per request; sign-ins never share session state."""
    return new_auth_client()


def get_llm() -> LLMClient:
    return get_llm_client()


async def get_current_identity(
    request: Request,
    db: Any = Depends(get_db),
    auth_client: Any = Depends(get_auth_client),
) -> Identity:
    """
    Resolve the caller from the request's session.

    Raises:
        Unauthenticated (401) when there is no valid session
    """
    identity = await authenticate(extract_token(request), auth_client, db)
    request.state.identity = identity
    return identity


async def get_optional_identity(
    request: Request,
    db: Any = Depends(get_db),
    auth_client: Any = Depends(get_auth_client),
) -> Optional[Identity]:
    """The caller if signed in, None otherwise."""
    try:
        return await authenticate(extract_token(request), auth_client, db)
    except Unauthenticated:
        return None


async def require_admin(identity: Identity = Depends(get_current_identity)) -> Identity:
    """
    Allow only administrators.

    Raises:
        Unauthenticated (401) without a session, Forbidden (403) for non-admins
    """
    return authorize_admin(identity)


def client_ip(request: Request) -> str:
    """Best-effort caller IP (proxy headers first)."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    return request.client.host if request.client else "unknown"


# Dependency for router-level admin guards
require_admin_user = Depends(require_admin)
