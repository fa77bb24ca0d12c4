"""
Authentication module for Trader's Journal.

Provides:
- Supabase Auth calls (sign in, account creation, token validation)
- Request authorization (identity + admin role check)
- Turnstile CAPTCHA verification
"""

from .authorizer import (
    Identity,
    authenticate,
    authorize_admin,
    extract_token,
    normalize_role,
)
from .captcha import CaptchaResult, verify_turnstile
from .supabase_auth import SupabaseUser, get_user_from_token, sign_in, sign_out

__all__ = [
    'Identity',
    'authenticate',
    'authorize_admin',
    'extract_token',
    'normalize_role',
    'CaptchaResult',
    'verify_turnstile',
    'SupabaseUser',
    'get_user_from_token',
    'sign_in',
    'sign_out',
]
