"""
Query helpers for Supabase (PostgREST) tables.

All reads that feed aggregations go through ``iter_rows`` so that no
endpoint ever depends on a single unbounded fetch.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Iterator, Optional

from tradersjournal.config import settings
from tradersjournal.errors import UpstreamFailure

logger = logging.getLogger(__name__)

# Ids per ``in_`` filter; keeps request URLs well under proxy limits
IN_FILTER_CHUNK_SIZE = 100


def run_query(query: Any, action: str) -> Any:
    """
    Execute a PostgREST query builder.

    Args:
        query: Query builder with an ``execute()`` method
        action: Short description used in logs and the error message,
            e.g. "fetch trades"

    Returns:
        The client response (``.data`` / ``.count``)

    Raises:
        UpstreamFailure: if the client raised, carrying its message
    """
    try:
        return query.execute()
    except Exception as e:
        logger.error(f"Failed to {action}: {e}")
        raise UpstreamFailure(f"Failed to {action}", message=str(e)) from e


def iter_rows(
    build_query: Callable[[], Any],
    action: str,
    page_size: Optional[int] = None,
    key: str = "id",
) -> Iterator[dict]:
    """
    Yield every row of a query, one page at a time.

    Pages are read in ascending ``key`` order and each page resumes after the
    last key seen (keyset pagination), so rows inserted or deleted while
    iterating never shift a page boundary. ``key`` must be unique and
    selected by the query.

    ``build_query`` must return a fresh, filtered but unordered query
    builder on every call. Iteration stops at the first short page.
    """
    size = page_size or settings.page_size
    last_key = None
    while True:
        query = build_query()
        if last_key is not None:
            query = query.gt(key, last_key)
        response = run_query(query.order(key).limit(size), action)
        rows = response.data or []
        yield from rows
        if len(rows) < size:
            break
        last_key = rows[-1][key]


def iter_rows_in(
    build_query: Callable[[], Any],
    column: str,
    values: Iterable[Any],
    action: str,
    key: str = "id",
    chunk_size: int = IN_FILTER_CHUNK_SIZE,
) -> Iterator[dict]:
    """
    Yield every row whose ``column`` is one of ``values``.

    Values are split into ``in_`` filters of at most ``chunk_size`` entries
    and each chunk is paged with ``iter_rows``.
    """
    values = list(dict.fromkeys(values))
    for start in range(0, len(values), chunk_size):
        chunk = values[start:start + chunk_size]
        yield from iter_rows(lambda: build_query().in_(column, chunk), action, key=key)


def fetch_page(build_query: Callable[[], Any], action: str, page: int, per_page: int) -> list[dict]:
    """Fetch a single 1-based page of an ordered listing (display only, never aggregated)."""
    start = (page - 1) * per_page
    response = run_query(build_query().range(start, start + per_page - 1), action)
    return response.data or []


def count_rows(query: Any, action: str) -> int:
    """Return the exact count of a ``select(..., count="exact", head=True)`` query."""
    response = run_query(query, action)
    return response.count or 0


def first_row(query: Any, action: str) -> Optional[dict]:
    """Return the first row of a query, or None."""
    response = run_query(query.limit(1), action)
    rows = response.data or []
    return rows[0] if rows else None
