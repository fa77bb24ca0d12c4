"""
System/health API routes.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from tradersjournal import __version__
from tradersjournal.auth.profiles import SETTINGS_TABLE
from tradersjournal.db.tables import count_rows
from tradersjournal.errors import AppError
from tradersjournal.web.dependencies import get_db
from tradersjournal.web.schemas import success_response

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Liveness check."""
    return JSONResponse(success_response(data={"status": "healthy"}, message="Service is running"))


@router.get("/api/health")
async def api_health(db: Any = Depends(get_db)):
    """Readiness check: proves the database answers a count query."""
    timestamp = datetime.now(timezone.utc).isoformat()

    def _do_count():
        return count_rows(
            db.table(SETTINGS_TABLE).select("*", count="exact", head=True),
            "reach database",
        )

    try:
        await asyncio.to_thread(_do_count)
    except AppError as e:
        logger.error(f"Health check failed: {e.message or e.error}")
        return JSONResponse(
            {
                "status": "unhealthy",
                "database": "disconnected",
                "error": e.message or e.error,
                "timestamp": timestamp,
            },
            status_code=500,
        )

    return JSONResponse({
        "status": "healthy",
        "database": "connected",
        "version": __version__,
        "timestamp": timestamp,
    })
