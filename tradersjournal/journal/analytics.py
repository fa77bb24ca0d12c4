"""
Trade analytics for Trader's Journal.

Computes:
- Win rate, total and average profit
- Average winning/losing trade and risk/reward ratio
- Activity stats (trades per day, time in trade, positive pips)
- Per currency-pair performance
- Medal tier from win rate
- Subscriber counts for project updates

Every reducer consumes an iterable of rows in a single pass, so callers can
feed it a paginated stream instead of a materialized table.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Optional
import logging

logger = logging.getLogger(__name__)

# Minimum win rate (percent) for each medal, highest first
MEDAL_THRESHOLDS: list[tuple[str, float]] = [
    ("diamond", 91),
    ("platinum", 86),
    ("gold", 80),
    ("silver", 70),
    ("bronze", 60),
]
MIN_TRADES_FOR_MEDAL = 10


def _as_float(value: Any) -> float:
    """Coerce a nullable numeric column to float; missing means 0."""
    if value is None:
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0.0


@dataclass
class TradeStats:
    """Profit/loss statistics over a set of trades."""

    total_trades: int = 0
    profitable_trades: int = 0
    losing_trades: int = 0
    total_profit: float = 0.0
    gross_profit: float = 0.0
    gross_loss: float = 0.0  # Sum of losing P/L (negative or zero)

    def add(self, trade: Mapping[str, Any]) -> None:
        """Fold one trade row into the running totals."""
        profit = _as_float(trade.get("profit_loss"))
        self.total_trades += 1
        self.total_profit += profit
        if profit > 0:
            self.profitable_trades += 1
            self.gross_profit += profit
        elif profit < 0:
            self.losing_trades += 1
            self.gross_loss += profit

    @property
    def average_profit(self) -> float:
        return _ratio(self.total_profit, self.total_trades)

    @property
    def win_rate(self) -> float:
        """Percentage of profitable trades (0-100)."""
        if self.total_trades == 0:
            return 0.0
        return self.profitable_trades / self.total_trades * 100

    @property
    def average_winning_trade(self) -> float:
        return _ratio(self.gross_profit, self.profitable_trades)

    @property
    def average_losing_trade(self) -> float:
        """Average losing trade as a positive number."""
        return _ratio(abs(self.gross_loss), self.losing_trades)

    @property
    def risk_reward_ratio(self) -> float:
        return _ratio(self.average_winning_trade, self.average_losing_trade)

    def to_dict(self) -> dict:
        return {
            "total_trades": self.total_trades,
            "profitable_trades": self.profitable_trades,
            "losing_trades": self.losing_trades,
            "total_profit": self.total_profit,
            "average_profit": self.average_profit,
            "win_rate": self.win_rate,
            "average_winning_trade": self.average_winning_trade,
            "average_losing_trade": self.average_losing_trade,
            "risk_reward_ratio": self.risk_reward_ratio,
            "medal": medal_for(self),
        }


@dataclass
class ActivityStats:
    """Dashboard activity metrics."""

    total_trades: int = 0
    trade_days: set = field(default_factory=set)
    duration_total: float = 0.0
    duration_count: int = 0
    positive_pip_trades: int = 0
    positive_pips_total: float = 0.0

    def add(self, trade: Mapping[str, Any]) -> None:
        self.total_trades += 1

        day = _trade_day(trade.get("date"))
        if day is not None:
            self.trade_days.add(day)

        duration = trade.get("duration")
        if duration is not None:
            try:
                self.duration_total += float(duration)
                self.duration_count += 1
            except (TypeError, ValueError):
                pass

        pips = _as_float(trade.get("pips"))
        if pips > 0:
            self.positive_pip_trades += 1
            self.positive_pips_total += pips

    @property
    def avg_trades_per_day(self) -> float:
        return _ratio(self.total_trades, len(self.trade_days))

    @property
    def avg_time_in_trade(self) -> float:
        """Average duration in minutes."""
        return _ratio(self.duration_total, self.duration_count)

    @property
    def avg_positive_pips(self) -> float:
        return _ratio(self.positive_pips_total, self.positive_pip_trades)

    @property
    def percent_positive_trades(self) -> float:
        if self.total_trades == 0:
            return 0.0
        return self.positive_pip_trades / self.total_trades * 100

    def to_dict(self) -> dict:
        return {
            "avg_trades_per_day": self.avg_trades_per_day,
            "avg_time_in_trade": self.avg_time_in_trade,
            "avg_positive_pips": self.avg_positive_pips,
            "percent_positive_trades": self.percent_positive_trades,
            "has_data": self.total_trades > 0,
        }


@dataclass
class SubscriberStats:
    """Project-update subscription counts."""

    total_users: int = 0
    subscribed_users: int = 0

    def to_dict(self) -> dict:
        return {
            "total_users": self.total_users,
            "subscribed_users": self.subscribed_users,
        }


def _trade_day(value: Any) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        except ValueError:
            try:
                return date.fromisoformat(value[:10])
            except ValueError:
                return None
    return None


def compute_trade_stats(trades: Iterable[Mapping[str, Any]]) -> TradeStats:
    """Reduce trades into a TradeStats in one pass."""
    stats = TradeStats()
    for trade in trades:
        stats.add(trade)
    return stats


def compute_activity_stats(trades: Iterable[Mapping[str, Any]]) -> ActivityStats:
    stats = ActivityStats()
    for trade in trades:
        stats.add(trade)
    return stats


@dataclass
class JournalSummary:
    """Everything the dashboard shows, built from one pass over the trades."""

    overall: TradeStats = field(default_factory=TradeStats)
    activity: ActivityStats = field(default_factory=ActivityStats)
    by_pair: dict[str, TradeStats] = field(default_factory=dict)

    def add(self, trade: Mapping[str, Any]) -> None:
        self.overall.add(trade)
        self.activity.add(trade)
        pair = (trade.get("currency_pair") or "UNKNOWN").upper()
        self.by_pair.setdefault(pair, TradeStats()).add(trade)

    def pair_performance(self) -> list[dict]:
        """Per-pair stats, most profitable pair first."""
        rows = [{"currency_pair": pair, **stats.to_dict()} for pair, stats in self.by_pair.items()]
        rows.sort(key=lambda r: r["total_profit"], reverse=True)
        return rows

    def to_dict(self) -> dict:
        return {
            **self.overall.to_dict(),
            "activity": self.activity.to_dict(),
            "pairs": self.pair_performance(),
        }


def summarize_journal(trades: Iterable[Mapping[str, Any]]) -> JournalSummary:
    summary = JournalSummary()
    for trade in trades:
        summary.add(trade)
    logger.debug(f"Summarized {summary.overall.total_trades} trades")
    return summary


def compute_subscriber_stats(user_settings: Iterable[Mapping[str, Any]], total_users: int) -> SubscriberStats:
    """Count users who opted into project-update e-mails."""
    subscribed = sum(1 for row in user_settings if row.get("email_project_updates"))
    return SubscriberStats(total_users=total_users, subscribed_users=subscribed)


def medal_for_win_rate(win_rate: Optional[float]) -> Optional[str]:
    """
    Medal tier for a win-rate percentage.

    Returns None for missing or out-of-range rates and below bronze.
    """
    if win_rate is None or win_rate < 0 or win_rate > 100:
        return None
    for medal, threshold in MEDAL_THRESHOLDS:
        if win_rate >= threshold:
            return medal
    return None


def medal_for(stats: TradeStats) -> Optional[str]:
    """Medal for a trade history; requires at least 10 trades."""
    if stats.total_trades < MIN_TRADES_FOR_MEDAL:
        return None
    return medal_for_win_rate(stats.win_rate)
