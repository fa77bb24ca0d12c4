"""Trade journal: models, storage operations and analytics."""

from tradersjournal.journal.analytics import (
    TradeStats,
    compute_trade_stats,
    medal_for_win_rate,
    summarize_journal,
)
from tradersjournal.journal.models import Role, TradeCreate, TradeType

__all__ = [
    "Role",
    "TradeCreate",
    "TradeStats",
    "TradeType",
    "compute_trade_stats",
    "medal_for_win_rate",
    "summarize_journal",
]
