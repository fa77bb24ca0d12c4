"""
Authentication routes for user management.

Provides endpoints for:
- Login/Logout (session cookies)
- Registration (with optional CAPTCHA)
- Current user
- Password reset
- Account deletion
"""

import asyncio
import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from tradersjournal.auth import profiles
from tradersjournal.auth.authorizer import (
    ACCESS_TOKEN_COOKIE,
    LEGACY_ACCESS_TOKEN_COOKIE,
    REFRESH_TOKEN_COOKIE,
    Identity,
    extract_token,
)
from tradersjournal.auth.captcha import verify_turnstile
from tradersjournal.auth.supabase_auth import (
    create_user,
    delete_user,
    reset_password_request,
    sign_in,
    sign_out,
    verify_password,
)
from tradersjournal.config import get_turnstile_secret_key, settings
from tradersjournal.errors import BadRequest, Unauthenticated
from tradersjournal.web.dependencies import (
    client_ip,
    get_auth_client,
    get_current_identity,
    get_db,
    get_optional_identity,
    get_sign_in_client,
)
from tradersjournal.web.schemas import (
    DeleteAccountRequest,
    LoginRequest,
    PasswordResetRequest,
    RegisterRequest,
    success_response,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])

PROFILE_FIELDS = (
    "avatar_url",
    "first_name",
    "last_name",
    "bio",
    "profession",
    "location",
    "trader_status",
    "trader_type",
)


def _set_session_cookies(response: JSONResponse, session: dict) -> None:
    cookie_options = {
        "httponly": True,
        "secure": settings.secure_cookies,
        "samesite": "lax",
        "path": "/",
        "max_age": settings.cookie_max_age_seconds,
    }
    response.set_cookie(ACCESS_TOKEN_COOKIE, session["access_token"], **cookie_options)
    response.set_cookie(REFRESH_TOKEN_COOKIE, session["refresh_token"], **cookie_options)


def _clear_session_cookies(response: JSONResponse) -> None:
    for name in (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE, LEGACY_ACCESS_TOKEN_COOKIE):
        response.delete_cookie(name, path="/")


@router.post("/login")
async def login(
    body: LoginRequest,
    db: Any = Depends(get_db),
    auth_client: Any = Depends(get_sign_in_client),
):
    """Sign in with username and password; sets the session cookies."""
    account = await asyncio.to_thread(profiles.find_by_username, db, body.username)
    if not account or not account.get("email"):
        logger.info(f"Login attempt for unknown username: {body.username}")
        raise Unauthenticated("Invalid username or password")

    result = await sign_in(auth_client, account["email"], body.password)
    user = result["user"]

    await asyncio.to_thread(profiles.touch_last_login, db, user.id)
    profile = await asyncio.to_thread(profiles.get_profile, db, user.id)

    response = JSONResponse({
        "user": user.to_dict(),
        "session": result["session"],
        "profile": profile,
    })
    _set_session_cookies(response, result["session"])
    return response


@router.post("/register", status_code=201)
async def register(
    body: RegisterRequest,
    request: Request,
    db: Any = Depends(get_db),
):
    """Create an account and its profile."""
    if get_turnstile_secret_key():
        if not body.captcha_token:
            raise BadRequest("CAPTCHA verification required")
        captcha = await asyncio.to_thread(verify_turnstile, body.captcha_token, client_ip(request))
        if not captcha.success:
            raise BadRequest("CAPTCHA verification failed", details=captcha.error_codes or None)

    email = body.email.lower().strip()
    if await asyncio.to_thread(profiles.username_taken, db, body.username):
        raise BadRequest("This username is already taken.")

    user = await create_user(db, email, body.password, body.username)
    await asyncio.to_thread(profiles.create_profile, db, user.id, body.username, email)

    logger.info(f"Registered user {user.id}")
    return JSONResponse(
        {
            "message": "User registered successfully",
            "user": user.to_dict(),
            "redirect_to": "/login",
        },
        status_code=201,
    )


@router.post("/logout")
async def logout(request: Request, db: Any = Depends(get_db)):
    """Revoke the caller's own session, if any, and clear the session cookies."""
    await sign_out(db, extract_token(request))
    response = JSONResponse(success_response(message="Logged out"))
    _clear_session_cookies(response)
    return response


@router.get("/user")
async def current_user(
    identity: Optional[Identity] = Depends(get_optional_identity),
    db: Any = Depends(get_db),
):
    """Current user with profile details; never fails for anonymous callers."""
    if identity is None:
        return JSONResponse({"is_authenticated": False, "user": None})

    profile = await asyncio.to_thread(profiles.get_profile, db, identity.user_id) or {}
    user = {
        "id": identity.user_id,
        "email": identity.email,
        "username": profile.get("username") or identity.username,
        "role": identity.role.value,
    }
    for field in PROFILE_FIELDS:
        user[field] = profile.get(field) or ""
    return JSONResponse({"is_authenticated": True, "user": user})


@router.post("/reset-password")
async def reset_password(
    body: PasswordResetRequest,
    auth_client: Any = Depends(get_auth_client),
):
    """Request a password reset e-mail."""
    await reset_password_request(auth_client, body.email)
    return JSONResponse(
        success_response(message="If an account exists for that email, a reset link has been sent.")
    )


@router.post("/delete-account")
async def delete_account(
    request: Request,
    body: DeleteAccountRequest,
    identity: Identity = Depends(get_current_identity),
    db: Any = Depends(get_db),
    auth_client: Any = Depends(get_sign_in_client),
):
    """Delete the caller's data and auth account after re-checking the password."""
    if not await verify_password(auth_client, identity.email, body.password):
        raise Unauthenticated("Invalid password")

    await asyncio.to_thread(profiles.delete_user_data, db, identity.user_id)
    await sign_out(db, extract_token(request))
    await delete_user(db, identity.user_id)

    response = JSONResponse(success_response(message="Account successfully deleted"))
    _clear_session_cookies(response)
    return response
