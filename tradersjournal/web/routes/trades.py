"""
Trade journal API routes.

Handles listing and adding trades, tag maintenance and AI summaries.
Every operation is scoped to the signed-in caller.
"""

import asyncio
import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from tradersjournal.auth.authorizer import Identity
from tradersjournal.config import settings
from tradersjournal.journal.models import TradeCreate
from tradersjournal.journal.trades import (
    SUMMARY_COLUMNS,
    create_trade,
    list_trades,
    recent_trades,
    remove_tag,
    rename_tag,
)
from tradersjournal.llm.client import LLMClient
from tradersjournal.llm.prompts import build_summary_prompt
from tradersjournal.web.dependencies import get_current_identity, get_db, get_llm
from tradersjournal.web.schemas import (
    AISummaryRequest,
    PaginatedResponse,
    TagDeleteRequest,
    TagRenameRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/trades", tags=["trades"])


@router.get("")
async def get_trades(
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1, le=500),
    identity: Identity = Depends(get_current_identity),
    db: Any = Depends(get_db),
):
    """List the caller's trades, newest first."""
    per_page = per_page or settings.trades_per_page
    rows, total = await asyncio.to_thread(list_trades, db, identity.user_id, page, per_page)
    return PaginatedResponse.build(rows, page, per_page, total).model_dump()


@router.post("", status_code=201)
async def add_trade(
    trade: TradeCreate,
    identity: Identity = Depends(get_current_identity),
    db: Any = Depends(get_db),
):
    """Add a trade; duration and pips are derived from the entry/exit fields."""
    row = await asyncio.to_thread(create_trade, db, identity.user_id, trade)
    return JSONResponse({"message": "Trade added successfully", "trade": row}, status_code=201)


@router.patch("/tags")
async def update_tag(
    body: TagRenameRequest,
    identity: Identity = Depends(get_current_identity),
    db: Any = Depends(get_db),
):
    """Rename a tag across the caller's trades."""
    updated = await asyncio.to_thread(rename_tag, db, identity.user_id, body.old_tag, body.new_tag)
    return {"message": "Tag updated successfully", "updated_count": updated}


@router.delete("/tags")
async def delete_tag(
    body: TagDeleteRequest,
    identity: Identity = Depends(get_current_identity),
    db: Any = Depends(get_db),
):
    """Remove a tag from the caller's trades."""
    updated = await asyncio.to_thread(remove_tag, db, identity.user_id, body.tag)
    return {"message": "Tag deleted successfully", "updated_count": updated}


@router.post("/ai-summary")
async def ai_summary(
    body: AISummaryRequest,
    identity: Identity = Depends(get_current_identity),
    db: Any = Depends(get_db),
    llm: LLMClient = Depends(get_llm),
):
    """
    Summarize the caller's most recent trades with the LLM.

    Only the newest ``llm.max_trades`` trades go into the prompt.
    """

    trades = await asyncio.to_thread(
        recent_trades, db, identity.user_id, settings.llm_max_trades, SUMMARY_COLUMNS
    )
    if not trades:
        return {"summary": "No trades found to analyze."}

    system_prompt, user_prompt = build_summary_prompt(trades, body.mode)
    summary = await asyncio.to_thread(llm.complete, system_prompt, user_prompt)
    logger.info(f"AI summary ({body.mode}) generated for {identity.user_id} over {len(trades)} trades")
    return {"summary": summary}
