"""
Journal models.

Models:
- TradeCreate: validated input for logging a new trade
- MessageCreate: validated input for a direct message
- TradeType / Role: enums shared by routes and the authorizer

Rows themselves live in Supabase; these models only validate input and
derive the computed columns (duration, pips).
"""

import re
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, Field, field_validator

from tradersjournal.config import settings

TAG_PATTERN = re.compile(r"^[A-Za-z0-9 ]*$")
CLOCK_PATTERN = re.compile(r"^([01]?[0-9]|2[0-3]):([0-5][0-9])$")


class TradeType(str, Enum):
    """Trade direction."""

    LONG = "LONG"
    SHORT = "SHORT"


class Role(str, Enum):
    """Profile role."""

    USER = "user"
    ADMIN = "admin"


def _parse_timestamp(value: str) -> Optional[datetime]:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        return None


def compute_duration_minutes(entry_time: str, exit_time: str) -> int:
    """
    Minutes spent in a trade.

    Accepts ISO timestamps or HH:MM clock times. With clock times an exit
    earlier than the entry means the trade crossed midnight. Unparseable
    input yields 0; negative spans are clamped to 0.
    """
    entry_clock = CLOCK_PATTERN.match(entry_time or "")
    exit_clock = CLOCK_PATTERN.match(exit_time or "")
    if entry_clock and exit_clock:
        entry_minutes = int(entry_clock.group(1)) * 60 + int(entry_clock.group(2))
        exit_minutes = int(exit_clock.group(1)) * 60 + int(exit_clock.group(2))
        if exit_minutes < entry_minutes:
            exit_minutes += 24 * 60
        return exit_minutes - entry_minutes

    entry_dt = _parse_timestamp(entry_time)
    exit_dt = _parse_timestamp(exit_time)
    if entry_dt is None or exit_dt is None:
        return 0
    if (entry_dt.tzinfo is None) != (exit_dt.tzinfo is None):
        return 0
    span: timedelta = exit_dt - entry_dt
    return max(0, int(span.total_seconds() // 60))


def compute_pips(
    entry_price: float,
    exit_price: float,
    trade_type: Union[TradeType, str],
    currency_pair: str,
) -> float:
    """
    Signed pip move of a trade, rounded to one decimal.

    JPY pairs quote pips at the 2nd decimal, everything else at the 4th.
    """
    direction = TradeType(str(getattr(trade_type, "value", trade_type)).upper())
    if direction == TradeType.LONG:
        difference = exit_price - entry_price
    else:
        difference = entry_price - exit_price
    multiplier = 100 if "JPY" in currency_pair.upper() else 10000
    return round(difference * multiplier, 1)


class TradeCreate(BaseModel):
    """Input for logging a trade."""

    currency_pair: str = Field(..., min_length=1, max_length=6)
    trade_type: TradeType
    entry_price: float = Field(..., gt=0)
    exit_price: float = Field(..., gt=0)
    entry_time: str
    exit_time: str
    duration: Optional[int] = Field(None, ge=0)
    pips: Optional[float] = None
    lot_size: float = Field(..., gt=0)
    profit_loss: float
    currency: str = Field(default_factory=lambda: settings.default_currency, pattern=r"^[A-Z]{3,4}$")
    date: Optional[datetime] = None
    notes: Optional[str] = None
    tags: list[str] = Field(default_factory=list)

    @field_validator("currency_pair", mode="before")
    @classmethod
    def _normalize_pair(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().replace("/", "").upper()
        return value

    @field_validator("trade_type", mode="before")
    @classmethod
    def _normalize_trade_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("currency", mode="before")
    @classmethod
    def _normalize_currency(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        return [t.strip() for t in value if isinstance(t, str) and t.strip()] if isinstance(value, list) else value

    @field_validator("tags")
    @classmethod
    def _check_tags(cls, value: list[str]) -> list[str]:
        for tag in value:
            if len(tag) > 20:
                raise ValueError("Tags must be 20 characters or less")
            if not TAG_PATTERN.match(tag):
                raise ValueError("Tags can only contain letters, numbers, and spaces")
        return value

    def to_row(self, user_id: str) -> dict:
        """Build the ``trades`` row for insertion, filling computed columns."""
        duration = self.duration
        if duration is None:
            duration = compute_duration_minutes(self.entry_time, self.exit_time)
        pips = self.pips
        if pips is None:
            pips = compute_pips(self.entry_price, self.exit_price, self.trade_type, self.currency_pair)
        trade_date = self.date or datetime.now(timezone.utc)

        return {
            "user_id": user_id,
            "currency_pair": self.currency_pair,
            "trade_type": self.trade_type.value,
            "entry_price": self.entry_price,
            "exit_price": self.exit_price,
            "entry_time": self.entry_time,
            "exit_time": self.exit_time,
            "duration": duration,
            "pips": pips,
            "lot_size": self.lot_size,
            "profit_loss": self.profit_loss,
            "currency": self.currency,
            "date": trade_date.isoformat(),
            "notes": self.notes,
            "tags": self.tags,
        }


class MessageCreate(BaseModel):
    """Input for sending a direct message."""

    receiver_id: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    message_type: str = "text"
    file_url: Optional[str] = None
    file_name: Optional[str] = None
