"""
AI analysis API routes.

Each analysis reads the signed-in caller's own trades (newest
``llm.max_trades``) or journal statistics; clients never post trade data.
"""

import asyncio
import logging
from typing import Any, Callable

from fastapi import APIRouter, Depends

from tradersjournal.auth.authorizer import Identity
from tradersjournal.config import settings
from tradersjournal.journal.analytics import summarize_journal
from tradersjournal.journal.trades import ANALYSIS_COLUMNS, SUMMARY_COLUMNS, iter_trades, recent_trades
from tradersjournal.llm.analyses import analyze_behavior, analyze_patterns, assess_risk, suggest_strategy
from tradersjournal.llm.client import LLMClient
from tradersjournal.web.dependencies import get_current_identity, get_db, get_llm

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["ai"])


async def _analyze_recent_trades(
    analysis: Callable[[LLMClient, list[dict]], dict],
    identity: Identity,
    db: Any,
    llm: LLMClient,
) -> dict:
    def _do_analyze():
        trades = recent_trades(db, identity.user_id, settings.llm_max_trades, ANALYSIS_COLUMNS)
        return analysis(llm, trades)

    result = await asyncio.to_thread(_do_analyze)
    logger.info(f"AI {analysis.__name__} generated for {identity.user_id}")
    return result


@router.post("/trading-behavior")
async def trading_behavior(
    identity: Identity = Depends(get_current_identity),
    db: Any = Depends(get_db),
    llm: LLMClient = Depends(get_llm),
):
    """Behavioral patterns and psychological insights (needs at least 5 trades)."""
    return await _analyze_recent_trades(analyze_behavior, identity, db, llm)


@router.post("/risk-assessment")
async def risk_assessment(
    identity: Identity = Depends(get_current_identity),
    db: Any = Depends(get_db),
    llm: LLMClient = Depends(get_llm),
):
    """Risk score, level and recommendations."""
    return await _analyze_recent_trades(assess_risk, identity, db, llm)


@router.post("/trading-patterns")
async def trading_patterns(
    identity: Identity = Depends(get_current_identity),
    db: Any = Depends(get_db),
    llm: LLMClient = Depends(get_llm),
):
    """Markdown analysis of patterns, strengths and weaknesses."""
    return await _analyze_recent_trades(analyze_patterns, identity, db, llm)


@router.post("/strategy-suggestions")
async def strategy_suggestions(
    identity: Identity = Depends(get_current_identity),
    db: Any = Depends(get_db),
    llm: LLMClient = Depends(get_llm),
):
    """Markdown strategy suggestions from the caller's full journal statistics."""

    def _do_suggest():
        performance = summarize_journal(iter_trades(db, identity.user_id, columns=SUMMARY_COLUMNS)).to_dict()
        return suggest_strategy(llm, performance)

    return await asyncio.to_thread(_do_suggest)
