"""
Cloudflare Turnstile CAPTCHA verification.

Posts the client token to the siteverify endpoint and checks the optional
action/cdata bindings.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

import httpx

from tradersjournal.config import get_turnstile_secret_key
from tradersjournal.errors import UpstreamFailure

logger = logging.getLogger(__name__)

TURNSTILE_VERIFY_URL = "https://challenges.cloudflare.com/turnstile/v0/siteverify"


@dataclass
class CaptchaResult:
    """Outcome of a Turnstile verification."""

    success: bool
    error: Optional[str] = None
    error_codes: list[str] = field(default_factory=list)
    challenge_ts: Optional[str] = None
    hostname: Optional[str] = None
    action: Optional[str] = None
    cdata: Optional[str] = None

    def to_dict(self) -> dict:
        if not self.success:
            body = {"success": False, "error": self.error or "Verification failed"}
            if self.error_codes:
                body["error_codes"] = self.error_codes
            return body
        return {
            "success": True,
            "challenge_ts": self.challenge_ts,
            "hostname": self.hostname,
            "action": self.action,
            "cdata": self.cdata,
        }


def verify_turnstile(
    token: str,
    remote_ip: Optional[str] = None,
    action: Optional[str] = None,
    cdata: Optional[str] = None,
    secret: Optional[str] = None,
    client: Optional[httpx.Client] = None,
) -> CaptchaResult:
    """
    Verify a Turnstile token.

    Args:
        token: Token produced by the widget
        remote_ip: Caller IP, forwarded to Cloudflare when known
        action: Expected action; a different action in the reply fails
        cdata: Expected customer data; a different value fails
        secret: Secret key (defaults to TURNSTILE_SECRET_KEY)
        client: Optional httpx client (tests inject a mock transport)

    Raises:
        UpstreamFailure: no secret configured, or the HTTP call failed
    """
    secret = secret or get_turnstile_secret_key()
    if not secret:
        raise UpstreamFailure("CAPTCHA verification is not configured")

    form = {"secret": secret, "response": token}
    if remote_ip and remote_ip != "unknown":
        form["remoteip"] = remote_ip

    try:
        if client is None:
            with httpx.Client(timeout=10.0) as http:
                response = http.post(TURNSTILE_VERIFY_URL, data=form)
        else:
            response = client.post(TURNSTILE_VERIFY_URL, data=form)
        response.raise_for_status()
        result = response.json()
    except httpx.HTTPError as e:
        logger.error(f"Turnstile request failed: {e}")
        raise UpstreamFailure("CAPTCHA verification failed", message=str(e)) from e
    except ValueError as e:
        logger.error(f"Turnstile returned invalid JSON: {e}")
        raise UpstreamFailure("CAPTCHA verification failed", message=str(e)) from e

    if not result.get("success"):
        codes = result.get("error-codes") or []
        logger.warning(f"Turnstile verification failed: {codes}")
        return CaptchaResult(success=False, error="Verification failed", error_codes=codes)

    if action and result.get("action") and result["action"] != action:
        return CaptchaResult(success=False, error="Action mismatch")

    if cdata and result.get("cdata") and result["cdata"] != cdata:
        return CaptchaResult(success=False, error="Data mismatch")

    return CaptchaResult(
        success=True,
        challenge_ts=result.get("challenge_ts"),
        hostname=result.get("hostname"),
        action=result.get("action"),
        cdata=result.get("cdata"),
    )
