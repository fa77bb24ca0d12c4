"""Database module for Supabase integration."""

from tradersjournal.db.supabase_client import get_supabase_client, get_service_client, new_auth_client
from tradersjournal.db.tables import count_rows, fetch_page, first_row, iter_rows, iter_rows_in, run_query

__all__ = [
    "get_supabase_client",
    "get_service_client",
    "new_auth_client",
    "count_rows",
    "fetch_page",
    "first_row",
    "iter_rows",
    "iter_rows_in",
    "run_query",
]
