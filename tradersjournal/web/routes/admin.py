"""
Administrator API routes.

Every route here requires an admin session: 401 without a session,
403 for other roles.
"""

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, Depends

from tradersjournal.admin import users
from tradersjournal.admin.announcements import resolve_recipients, send_announcement
from tradersjournal.journal.analytics import compute_trade_stats
from tradersjournal.journal.trades import SUMMARY_COLUMNS, iter_trades
from tradersjournal.web.dependencies import get_db, require_admin_user
from tradersjournal.web.schemas import AnnouncementRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[require_admin_user])


@router.get("/users")
async def list_users(db: Any = Depends(get_db)):
    """All users with their project-update preference."""
    return await asyncio.to_thread(users.list_users, db)


@router.get("/project-update-stats")
async def project_update_stats(db: Any = Depends(get_db)):
    stats = await asyncio.to_thread(users.subscriber_stats, db)
    return {**stats.to_dict(), "last_sent": None}


@router.get("/trade-stats")
async def trade_stats(db: Any = Depends(get_db)):
    """Statistics over every trade in the journal."""

    def _do_compute():
        return compute_trade_stats(iter_trades(db, columns=SUMMARY_COLUMNS)).to_dict()

    return await asyncio.to_thread(_do_compute)


@router.get("/security-events")
async def security_events(db: Any = Depends(get_db)):
    return await asyncio.to_thread(users.security_events, db)


@router.post("/announcements")
async def send_announcements(body: AnnouncementRequest, db: Any = Depends(get_db)):
    """E-mail a project update to subscribers or to selected users."""
    emails = await asyncio.to_thread(
        resolve_recipients, db, body.send_to_all, body.selected_user_ids
    )
    result = await send_announcement(emails, body.subject, body.message)
    return result.to_dict()
