"""Tests for trade input validation and derived columns."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from tradersjournal.journal.models import (
    TradeCreate,
    TradeType,
    compute_duration_minutes,
    compute_pips,
)


def _trade(**overrides):
    data = {
        "currency_pair": "eur/usd",
        "trade_type": "long",
        "entry_price": 1.1000,
        "exit_price": 1.1025,
        "entry_time": "09:30",
        "exit_time": "10:15",
        "lot_size": 1.0,
        "profit_loss": 250.0,
    }
    data.update(overrides)
    return TradeCreate(**data)


class TestPips:
    """Tests for pip calculation."""

    def test_long_winner(self):
        assert compute_pips(1.1000, 1.1025, TradeType.LONG, "EURUSD") == 25.0

    def test_short_winner(self):
        assert compute_pips(1.1025, 1.1000, "short", "EURUSD") == 25.0

    def test_long_loser(self):
        assert compute_pips(1.1025, 1.1000, "LONG", "GBPUSD") == -25.0

    def test_jpy_pair_uses_second_decimal(self):
        assert compute_pips(150.00, 150.50, "LONG", "USDJPY") == 50.0


class TestDuration:
    """Tests for time-in-trade calculation."""

    def test_clock_times(self):
        assert compute_duration_minutes("09:30", "10:15") == 45

    def test_clock_times_across_midnight(self):
        assert compute_duration_minutes("23:30", "00:15") == 45

    def test_iso_timestamps(self):
        assert compute_duration_minutes("2024-01-15T09:00:00Z", "2024-01-15T11:30:00Z") == 150

    def test_negative_span_clamped(self):
        assert compute_duration_minutes("2024-01-15T11:00:00", "2024-01-15T09:00:00") == 0

    def test_unparseable(self):
        assert compute_duration_minutes("soon", "later") == 0


class TestTradeCreate:
    """Tests for the trade input model."""

    def test_normalizes_fields(self):
        trade = _trade(currency="usd")
        assert trade.currency_pair == "EURUSD"
        assert trade.trade_type == TradeType.LONG
        assert trade.currency == "USD"

    def test_row_has_computed_columns(self):
        row = _trade(date=datetime(2024, 1, 15, tzinfo=timezone.utc)).to_row("user-1")
        assert row["user_id"] == "user-1"
        assert row["duration"] == 45
        assert row["pips"] == 25.0
        assert row["trade_type"] == "LONG"
        assert row["date"] == "2024-01-15T00:00:00+00:00"

    def test_explicit_values_win(self):
        row = _trade(duration=5, pips=1.5).to_row("user-1")
        assert row["duration"] == 5
        assert row["pips"] == 1.5

    def test_single_tag_string(self):
        assert _trade(tags="breakout").tags == ["breakout"]

    @pytest.mark.parametrize("tag", ["a" * 21, "no-dashes", "emoji🙂"])
    def test_invalid_tags(self, tag):
        with pytest.raises(ValidationError):
            _trade(tags=[tag])

    def test_rejects_unknown_trade_type(self):
        with pytest.raises(ValidationError):
            _trade(trade_type="sideways")

    def test_rejects_non_positive_price(self):
        with pytest.raises(ValidationError):
            _trade(entry_price=0)
