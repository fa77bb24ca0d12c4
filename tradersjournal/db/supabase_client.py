"""
Supabase client initialization.

Provides both anon (auth-facing) and service (server-side) clients.
"""

import os
import logging
from functools import lru_cache
from typing import Optional

from supabase import Client, ClientOptions, create_client

logger = logging.getLogger(__name__)


def get_supabase_url() -> str:
    """Get Supabase project URL."""
    url = os.getenv("SUPABASE_URL", "").strip()
    if not url:
        raise ValueError("SUPABASE_URL environment variable is required")
    return url


def get_supabase_anon_key() -> str:
    """Get Supabase anonymous/public key."""
    key = os.getenv("SUPABASE_ANON_KEY", "").strip()
    if not key:
        raise ValueError("SUPABASE_ANON_KEY environment variable is required")
    return key


def get_supabase_service_key() -> Optional[str]:
    """Get Supabase service role key (for server-side operations)."""
    return os.getenv("SUPABASE_SERVICE_KEY", "").strip() or None


def is_supabase_configured() -> bool:
    """Check that the URL and both keys are present."""
    url = os.getenv("SUPABASE_URL", "").strip()
    anon = os.getenv("SUPABASE_ANON_KEY", "").strip()
    return bool(url and anon and get_supabase_service_key())


@lru_cache(maxsize=1)
def get_supabase_client() -> Client:
    """
    Get the Supabase client with anonymous key.

    Used for stateless Supabase Auth calls (token validation, reset e-mails).
    Nothing signs in on it, so it never holds a user session.
    """
    url = get_supabase_url()
    key = get_supabase_anon_key()
    logger.info(f"Initializing Supabase client with URL: {url[:30]}...")
    client = create_client(url, key)
    logger.info("Supabase client initialized successfully")
    return client


@lru_cache(maxsize=1)
def get_service_client() -> Client:
    """
    Get the Supabase client with service role key.

    Used for all table access. It bypasses RLS, so every user-scoped query
    filters on the caller's id explicitly.
    """
    url = get_supabase_url()
    key = get_supabase_service_key()
    if not key:
        raise ValueError(
            "SUPABASE_SERVICE_KEY environment variable is required for service client"
        )
    client = create_client(url, key)
    logger.info("Supabase service client initialized")
    return client


def new_auth_client() -> Client:
    """
    Build a short-lived anon client for a single sign-in.

    Sessions are neither persisted nor refreshed, so one caller's sign-in
    never leaks into another request.
    """
    options = ClientOptions(persist_session=False, auto_refresh_token=False)
    return create_client(get_supabase_url(), get_supabase_anon_key(), options=options)
