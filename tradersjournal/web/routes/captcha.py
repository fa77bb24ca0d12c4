"""
Cloudflare Turnstile verification endpoint.
"""

import asyncio

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from tradersjournal.auth.captcha import verify_turnstile
from tradersjournal.web.dependencies import client_ip
from tradersjournal.web.schemas import TurnstileVerifyRequest

router = APIRouter(prefix="/api/turnstile", tags=["captcha"])


@router.post("/verify")
async def verify(body: TurnstileVerifyRequest, request: Request):
    """Verify a widget token server-side; 400 when verification fails."""
    if not body.token:
        return JSONResponse({"success": False, "error": "Token is required"}, status_code=400)

    result = await asyncio.to_thread(
        verify_turnstile, body.token, client_ip(request), body.action, body.cdata
    )
    return JSONResponse(result.to_dict(), status_code=200 if result.success else 400)
