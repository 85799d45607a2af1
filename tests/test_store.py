"""Tests for Store queries: upserts, ordering and retention."""

from datetime import date

import pytest

from tradescout.models.daily_bar import DailyBar
from tradescout.models.performance_metrics import PerformanceMetrics, PeriodType
from tradescout.models.trade import TradeStatus


def _bar(day: date, close: float = 100.0, symbol: str = "ACME") -> DailyBar:
    return DailyBar(
        symbol=symbol, trade_date=day,
        open_price=100.0, high_price=101.0, low_price=99.0, close_price=close, volume=1000,
    )


class TestBars:
    def test_add_if_absent_keeps_existing_history(self, store):
        assert store.add_bars_if_absent([_bar(date(2024, 3, 1)), _bar(date(2024, 3, 4))]) == 2
        saved = store.add_bars_if_absent([_bar(date(2024, 3, 4), close=50.0), _bar(date(2024, 3, 5))])

        assert saved == 1
        assert store.get_bar("ACME", date(2024, 3, 4)).close_price == 100.0

    def test_upsert_refreshes_row(self, store):
        store.upsert_bar(_bar(date(2024, 3, 6), close=100.0))
        store.upsert_bar(_bar(date(2024, 3, 6), close=97.5))

        bars = store.bars_since("ACME", date(2024, 3, 1))
        assert len(bars) == 1
        assert bars[0].close_price == 97.5

    def test_bars_since_ordered_and_filtered(self, store):
        store.add_bars_if_absent([
            _bar(date(2024, 3, 5)), _bar(date(2024, 2, 1)), _bar(date(2024, 3, 1)),
            _bar(date(2024, 3, 2), symbol="OTHER"),
        ])
        bars = store.bars_since("ACME", date(2024, 3, 1))
        assert [b.trade_date for b in bars] == [date(2024, 3, 1), date(2024, 3, 5)]

    def test_distinct_symbols_and_retention(self, store):
        store.add_bars_if_absent([
            _bar(date(2023, 1, 1), symbol="OLD"), _bar(date(2024, 3, 1)), _bar(date(2024, 3, 1), symbol="BETA"),
        ])
        assert store.distinct_symbols() == ["ACME", "BETA", "OLD"]

        assert store.delete_bars_before(date(2024, 1, 1)) == 1
        assert store.distinct_symbols() == ["ACME", "BETA"]


class TestMetrics:
    def test_round_trip_is_exact(self, store, make_metrics):
        values = dict(avg_max_drop_pct=-1.2345678901, stddev_max_drop_pct=0.4321987654)
        expected = make_metrics(**values)
        store.save_volatility_metrics(make_metrics(**values))

        loaded = store.latest_metrics("ACME")

        for name in (
            "avg_daily_range_pct", "stddev_daily_range_pct", "avg_max_drop_pct",
            "stddev_max_drop_pct", "avg_daily_change_pct", "stddev_daily_change_pct",
            "avg_volume", "stddev_volume",
        ):
            assert getattr(loaded, name) == getattr(expected, name)

    def test_same_day_recalculation_replaces_row(self, store, make_metrics):
        store.save_volatility_metrics(make_metrics(avg_volume=1))
        store.save_volatility_metrics(make_metrics(avg_volume=2))

        assert store.latest_metrics("ACME").avg_volume == 2
        assert store.delete_metrics_before(date(2100, 1, 1)) == 1

    def test_latest_by_date(self, store, make_metrics):
        store.save_volatility_metrics(make_metrics(calculation_date=date(2024, 3, 2), avg_volume=2))
        store.save_volatility_metrics(make_metrics(calculation_date=date(2024, 3, 1), avg_volume=1))

        assert store.latest_metrics("ACME").avg_volume == 2
        assert store.latest_metrics("NONE") is None


class TestTrades:
    def test_list_and_filters(self, store, add_trade):
        add_trade(symbol="AAA", entry_date=date(2024, 3, 1))
        add_trade(symbol="BBB", entry_date=date(2024, 3, 4), pnl=20.0)
        add_trade(symbol="AAA", entry_date=date(2024, 3, 5))

        assert [t.entry_date for t in store.list_trades()] == [
            date(2024, 3, 5), date(2024, 3, 4), date(2024, 3, 1),
        ]
        assert len(store.list_trades(symbol="aaa")) == 2
        assert [t.symbol for t in store.list_trades(status=TradeStatus.CLOSED)] == ["BBB"]
        assert store.count_open_trades() == 2
        assert store.count_trades_entered_between(date(2024, 3, 2), date(2024, 3, 5)) == 2

    def test_save_trade_updates_row(self, store, add_trade):
        trade = add_trade()
        trade.lessons_learned = "patience"
        store.save_trade(trade)

        assert store.get_trade(trade.id).lessons_learned == "patience"


class TestPerformanceHistory:
    def test_upsert_per_period(self, store):
        def row(end, pnl):
            return PerformanceMetrics(
                period_type=PeriodType.MONTHLY, period_start=end.replace(day=1),
                period_end=end, total_pnl=pnl,
            )

        store.save_performance_metrics(row(date(2024, 1, 31), 10.0))
        store.save_performance_metrics(row(date(2024, 2, 29), 20.0))
        store.save_performance_metrics(row(date(2024, 1, 31), 15.0))

        history = store.performance_history(PeriodType.MONTHLY)
        assert [(m.period_end, m.total_pnl) for m in history] == [
            (date(2024, 2, 29), 20.0), (date(2024, 1, 31), 15.0),
        ]
        assert store.performance_history(PeriodType.WEEKLY) == []
