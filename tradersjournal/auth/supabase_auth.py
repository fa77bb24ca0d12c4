"""
Supabase Authentication Service.

Handles user authentication via Supabase Auth, including:
- Sign in with email/password
- Account creation (admin API, auto-confirmed)
- Password reset
- Token validation
- Account deletion
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional
from datetime import datetime

from tradersjournal.config import get_site_url
from tradersjournal.errors import BadRequest, Unauthenticated, UpstreamFailure

logger = logging.getLogger(__name__)


@dataclass
class SupabaseUser:
    """User object from Supabase Auth."""
    id: str  # UUID
    email: str
    username: Optional[str] = None
    is_verified: bool = False
    created_at: Optional[datetime] = None
    last_sign_in_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "username": self.username,
            "is_verified": self.is_verified,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "last_sign_in_at": self.last_sign_in_at.isoformat() if self.last_sign_in_at else None,
        }


def _session_to_dict(session: Any) -> dict:
    # Safely extract expires_at (handle both int and string formats)
    expires_at = session.expires_at
    if isinstance(expires_at, str):
        try:
            expires_at = int(expires_at)
        except (ValueError, TypeError):
            expires_at = None

    return {
        "access_token": session.access_token,
        "refresh_token": session.refresh_token,
        "expires_at": expires_at,
    }


async def sign_in(auth_client: Any, email: str, password: str) -> dict:
    """
    Sign in with email and password.

    ``auth_client`` must be a per-call client (see ``new_auth_client``); signing
    in stores the session on it.

    Returns:
        dict with 'user' (SupabaseUser) and 'session' keys

    Raises:
        Unauthenticated if the credentials are rejected
    """
    def _do_sign_in():
        return auth_client.auth.sign_in_with_password({
            "email": email,
            "password": password
        })

    try:
        result = await asyncio.to_thread(_do_sign_in)
    except Exception as e:
        error_msg = str(e)
        logger.error(f"Sign in error: {error_msg}")

        lowered = error_msg.lower()
        if "invalid" in lowered or "credentials" in lowered:
            raise Unauthenticated("Invalid username or password") from e
        if "not confirmed" in lowered:
            raise Unauthenticated("Please verify your email before signing in.") from e
        raise UpstreamFailure("Login failed. Please try again.", message=error_msg) from e

    if result.user is None or result.session is None:
        raise Unauthenticated("Invalid username or password")

    logger.info(f"User signed in: {result.user.id}")
    return {
        "user": _parse_user(result.user),
        "session": _session_to_dict(result.session),
    }


async def verify_password(auth_client: Any, email: str, password: str) -> bool:
    """Re-check a password without surfacing errors. Used before destructive actions."""
    try:
        await sign_in(auth_client, email, password)
        return True
    except (Unauthenticated, UpstreamFailure):
        return False


async def sign_out(service_client: Any, access_token: Optional[str]) -> bool:
    """
    Revoke the session behind ``access_token`` (this session only).

    Returns:
        True if a session was revoked; a failed or skipped remote sign-out
        still leaves the caller signed out locally once cookies are cleared
    """
    if not access_token:
        return False

    def _do_sign_out():
        try:
            service_client.auth.admin.sign_out(access_token, "local")
        except Exception as e:
            logger.warning(f"Sign out error: {e}")
            return False
        return True

    return await asyncio.to_thread(_do_sign_out)


async def create_user(service_client: Any, email: str, password: str, username: str) -> SupabaseUser:
    """
    Create an auto-confirmed auth user via the admin API.

    Raises:
        BadRequest if Supabase rejects the account (e.g. duplicate e-mail)
    """
    def _do_create():
        return service_client.auth.admin.create_user({
            "email": email,
            "password": password,
            "email_confirm": True,
            "user_metadata": {"username": username, "name": username},
        })

    try:
        result = await asyncio.to_thread(_do_create)
    except Exception as e:
        error_msg = str(e)
        logger.error(f"Create user error: {error_msg}")
        if "already" in error_msg.lower():
            raise BadRequest("This email is already registered.") from e
        raise BadRequest("Database error creating new user", message=error_msg) from e

    if result.user is None:
        raise BadRequest("Failed to create user account - no user data returned")

    logger.info(f"User created: {result.user.id}")
    return _parse_user(result.user)


async def delete_user(service_client: Any, user_id: str) -> None:
    """Delete an auth user via the admin API."""
    def _do_delete():
        service_client.auth.admin.delete_user(user_id)

    try:
        await asyncio.to_thread(_do_delete)
    except Exception as e:
        logger.error(f"Failed to delete auth user {user_id}: {e}")
        raise UpstreamFailure("Failed to delete user account", message=str(e)) from e


def get_user_from_token_sync(auth_client: Any, access_token: str) -> Optional[SupabaseUser]:
    """
    Validate an access token and get the user.

    Returns:
        SupabaseUser if valid, None otherwise
    """
    if not access_token:
        return None
    try:
        result = auth_client.auth.get_user(access_token)
    except Exception as e:
        logger.debug(f"Token validation failed: {e}")
        return None
    if result is None or result.user is None:
        return None
    return _parse_user(result.user)


async def get_user_from_token(auth_client: Any, access_token: str) -> Optional[SupabaseUser]:
    return await asyncio.to_thread(get_user_from_token_sync, auth_client, access_token)


async def reset_password_request(auth_client: Any, email: str) -> bool:
    """
    Send a password reset email.

    Returns:
        True whether or not the e-mail exists, so account existence is not revealed
    """
    def _do_reset():
        try:
            redirect_url = f"{get_site_url()}/reset-password"
            auth_client.auth.reset_password_email(
                email,
                options={"redirect_to": redirect_url}
            )
            logger.info("Password reset email requested")
        except Exception as e:
            logger.warning(f"Password reset request failed: {e}")
        return True

    return await asyncio.to_thread(_do_reset)


def _parse_user(supabase_user) -> SupabaseUser:
    """Parse Supabase user object to SupabaseUser dataclass."""
    user_metadata = getattr(supabase_user, "user_metadata", {}) or {}

    def _parse_datetime(value) -> Optional[datetime]:
        """Parse a datetime value that could be string or datetime object."""
        if value is None:
            return None
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                return datetime.fromisoformat(value.replace("Z", "+00:00"))
            except (ValueError, AttributeError):
                pass
        return None

    email = getattr(supabase_user, "email", None) or ""
    username = user_metadata.get("username") or user_metadata.get("name")
    if not username and email:
        username = email.split("@")[0]

    return SupabaseUser(
        id=str(supabase_user.id),
        email=email,
        username=username,
        is_verified=getattr(supabase_user, "email_confirmed_at", None) is not None,
        created_at=_parse_datetime(getattr(supabase_user, "created_at", None)),
        last_sign_in_at=_parse_datetime(getattr(supabase_user, "last_sign_in_at", None)),
    )
