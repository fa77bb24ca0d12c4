"""
Dashboard statistics for the signed-in trader.
"""

import asyncio
from typing import Any

from fastapi import APIRouter, Depends

from tradersjournal.auth.authorizer import Identity
from tradersjournal.journal.analytics import summarize_journal
from tradersjournal.journal.trades import SUMMARY_COLUMNS, iter_trades
from tradersjournal.web.dependencies import get_current_identity, get_db

router = APIRouter(prefix="/api/stats", tags=["stats"])


@router.get("")
async def get_stats(
    identity: Identity = Depends(get_current_identity),
    db: Any = Depends(get_db),
):
    """Overall, activity and per-pair statistics over all of the caller's trades."""

    def _do_summarize():
        return summarize_journal(iter_trades(db, identity.user_id, columns=SUMMARY_COLUMNS)).to_dict()

    return await asyncio.to_thread(_do_summarize)
