"""
Trade storage operations against the ``trades`` table.

All functions are blocking; routes run them through ``asyncio.to_thread``.
"""

import logging
from typing import Any, Iterator, Optional

from tradersjournal.db.tables import count_rows, fetch_page, iter_rows, run_query
from tradersjournal.errors import UpstreamFailure
from tradersjournal.journal.models import TradeCreate

logger = logging.getLogger(__name__)

TRADES_TABLE = "trades"
SUMMARY_COLUMNS = "id, date, currency_pair, trade_type, profit_loss, pips, duration, tags"
ANALYSIS_COLUMNS = (
    "id, date, currency_pair, trade_type, profit_loss, entry_price, exit_price, "
    "duration, lot_size, pips, tags"
)


def iter_trades(db: Any, user_id: Optional[str] = None, columns: str = "*") -> Iterator[dict]:
    """
    Stream trades page by page in id order, for aggregation.

    With ``user_id`` only that user's trades are read; without it the whole
    table is read (admin statistics). ``columns`` must include ``id``.
    """

    def build():
        query = db.table(TRADES_TABLE).select(columns)
        if user_id is not None:
            query = query.eq("user_id", user_id)
        return query

    return iter_rows(build, "fetch trades")


def list_trades(db: Any, user_id: str, page: int, per_page: int) -> tuple[list[dict], int]:
    """Return one page of a user's trades and the user's total trade count."""
    total = count_rows(
        db.table(TRADES_TABLE).select("id", count="exact", head=True).eq("user_id", user_id),
        "count trades",
    )
    rows = fetch_page(
        lambda: db.table(TRADES_TABLE)
        .select("*")
        .eq("user_id", user_id)
        .order("created_at", desc=True)
        .order("id", desc=True),
        "fetch trades",
        page,
        per_page,
    )
    return rows, total


def recent_trades(db: Any, user_id: str, limit: int, columns: str = "*") -> list[dict]:
    """The user's newest ``limit`` trades, newest first, in a single bounded read."""
    return fetch_page(
        lambda: db.table(TRADES_TABLE)
        .select(columns)
        .eq("user_id", user_id)
        .order("created_at", desc=True)
        .order("id", desc=True),
        "fetch trades",
        1,
        limit,
    )


def create_trade(db: Any, user_id: str, trade: TradeCreate) -> dict:
    """Insert a trade owned by ``user_id`` and return the stored row."""
    response = run_query(db.table(TRADES_TABLE).insert(trade.to_row(user_id)), "add trade")
    rows = response.data or []
    if not rows:
        raise UpstreamFailure("Failed to add trade", message="No row returned from insert")
    logger.info(f"Trade {rows[0].get('id')} added for user {user_id}")
    return rows[0]


def _trades_with_tag(db: Any, user_id: str, tag: str) -> list[dict]:
    return list(
        iter_rows(
            lambda: db.table(TRADES_TABLE)
            .select("id, tags")
            .eq("user_id", user_id)
            .contains("tags", [tag]),
            "fetch tagged trades",
        )
    )


def rename_tag(db: Any, user_id: str, old_tag: str, new_tag: str) -> int:
    """
    Replace ``old_tag`` with ``new_tag`` on every trade of the user.

    Other tags on the same trade are kept. Returns the number of trades touched.
    """
    updated = 0
    for row in _trades_with_tag(db, user_id, old_tag):
        tags = []
        for tag in row.get("tags") or []:
            replacement = new_tag if tag == old_tag else tag
            if replacement not in tags:
                tags.append(replacement)
        run_query(
            db.table(TRADES_TABLE).update({"tags": tags}).eq("id", row["id"]).eq("user_id", user_id),
            "rename tag",
        )
        updated += 1
    logger.info(f"Renamed tag '{old_tag}' -> '{new_tag}' on {updated} trades")
    return updated


def remove_tag(db: Any, user_id: str, tag: str) -> int:
    """Remove ``tag`` from every trade of the user. Returns trades touched."""
    updated = 0
    for row in _trades_with_tag(db, user_id, tag):
        tags = [t for t in (row.get("tags") or []) if t != tag]
        run_query(
            db.table(TRADES_TABLE).update({"tags": tags}).eq("id", row["id"]).eq("user_id", user_id),
            "delete tag",
        )
        updated += 1
    logger.info(f"Removed tag '{tag}' from {updated} trades")
    return updated


def delete_user_trades(db: Any, user_id: str) -> None:
    run_query(db.table(TRADES_TABLE).delete().eq("user_id", user_id), "delete trades")
