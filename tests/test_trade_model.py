"""Tests for the trade lifecycle functions and the trade API schemas."""

from datetime import date

import pytest
from pydantic import ValidationError

from tradescout.models.trade import (
    ExitReason,
    TradeStateError,
    TradeStatus,
    cancel_trade,
    close_trade,
    open_trade,
)
from tradescout.schemas.trade import TradeClose, TradeCreate


def _open(**overrides):
    values = dict(
        symbol="acme", entry_date=date(2024, 3, 4), entry_price=96.0,
        target_price=98.88, stop_price=94.56, position_size=52,
    )
    values.update(overrides)
    return open_trade(**values)


class TestLifecycle:
    def test_open(self):
        trade = _open()
        assert trade.symbol == "ACME"
        assert trade.status == TradeStatus.OPEN
        assert trade.pnl is None
        assert trade.created_at == trade.updated_at

    @pytest.mark.parametrize("field", ["position_size", "entry_price"])
    def test_open_rejects_non_positive(self, field):
        with pytest.raises(ValueError):
            _open(**{field: 0})

    def test_close_derives_pnl(self):
        trade = close_trade(_open(), 98.88, ExitReason.TARGET_HIT, date(2024, 3, 7))

        assert trade.status == TradeStatus.CLOSED
        assert trade.pnl == pytest.approx(149.76)
        assert trade.pnl_percent == pytest.approx(3.0)
        assert trade.exit_reason == ExitReason.TARGET_HIT
        assert trade.is_winner and not trade.is_loser

    def test_close_loser(self):
        trade = close_trade(_open(), 94.56, ExitReason.STOP_HIT, date(2024, 3, 7))
        assert trade.pnl == pytest.approx(-74.88)
        assert trade.is_loser

    def test_close_twice_raises(self):
        trade = close_trade(_open(), 97.0, ExitReason.MANUAL_EXIT, date(2024, 3, 7))
        with pytest.raises(TradeStateError):
            close_trade(trade, 99.0, ExitReason.MANUAL_EXIT, date(2024, 3, 8))

    def test_close_with_cancel_reason_raises(self):
        with pytest.raises(TradeStateError):
            close_trade(_open(), 97.0, ExitReason.CANCELLED, date(2024, 3, 7))

    def test_cancel(self):
        trade = cancel_trade(_open(), lessons_learned="news pending")
        assert trade.status == TradeStatus.CANCELLED
        assert trade.exit_reason == ExitReason.CANCELLED
        assert trade.pnl is None
        with pytest.raises(TradeStateError):
            cancel_trade(trade)


class TestSchemas:
    def test_create_normalizes_symbol(self):
        body = TradeCreate(symbol=" acme ", entry_price=96, target_price=98, stop_price=95, position_size=1)
        assert body.symbol == "ACME"

    def test_create_requires_price_order(self):
        with pytest.raises(ValidationError):
            TradeCreate(symbol="ACME", entry_price=96, target_price=95, stop_price=94, position_size=1)

    def test_close_rejects_cancel_reason(self):
        with pytest.raises(ValidationError):
            TradeClose(exit_price=90, exit_reason=ExitReason.CANCELLED)
