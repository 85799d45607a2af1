"""Store: explicit query functions over the TradeScout tables.

Each method opens its own short-lived session, so every call is atomic on its
own. Methods that write several columns of one logical row (bar refresh,
metrics upsert, performance upsert) do so inside a single transaction.
Ordering of returned lists is part of each method's contract.
"""

import logging
from datetime import date
from typing import Iterable

from sqlalchemy.engine import Engine
from sqlmodel import Session, select, func, col

from tradescout.models.daily_bar import DailyBar
from tradescout.models.performance_metrics import PerformanceMetrics, PeriodType
from tradescout.models.trade import Trade, TradeStatus
from tradescout.models.volatility_metrics import VolatilityMetrics

logger = logging.getLogger(__name__)


class Store:
    def __init__(self, engine: Engine):
        self.engine = engine

    def _session(self) -> Session:
        return Session(self.engine, expire_on_commit=False)

    # ------------------------------------------------------------------
    # Daily bars
    # ------------------------------------------------------------------

    def get_bar(self, symbol: str, trade_date: date) -> DailyBar | None:
        with self._session() as session:
            return session.exec(
                select(DailyBar)
                .where(DailyBar.symbol == symbol)
                .where(DailyBar.trade_date == trade_date)
            ).first()

    def upsert_bar(self, bar: DailyBar) -> DailyBar:
        """Insert ``bar`` or overwrite the prices of the existing (symbol, date) row."""
        with self._session() as session:
            existing = session.exec(
                select(DailyBar)
                .where(DailyBar.symbol == bar.symbol)
                .where(DailyBar.trade_date == bar.trade_date)
            ).first()
            if existing is None:
                session.add(bar)
                target = bar
            else:
                existing.open_price = bar.open_price
                existing.high_price = bar.high_price
                existing.low_price = bar.low_price
                existing.close_price = bar.close_price
                existing.volume = bar.volume
                session.add(existing)
                target = existing
            session.commit()
            return target

    def add_bars_if_absent(self, bars: Iterable[DailyBar]) -> int:
        """Insert bars whose (symbol, date) is not stored yet. Returns the insert count."""
        bars = list(bars)
        if not bars:
            return 0
        saved = 0
        with self._session() as session:
            symbols = {b.symbol for b in bars}
            existing = {
                (row.symbol, row.trade_date)
                for row in session.exec(
                    select(DailyBar).where(col(DailyBar.symbol).in_(symbols))
                ).all()
            }
            for bar in bars:
                key = (bar.symbol, bar.trade_date)
                if key in existing:
                    continue
                session.add(bar)
                existing.add(key)
                saved += 1
            session.commit()
        return saved

    def bars_since(self, symbol: str, start: date) -> list[DailyBar]:
        """Bars for ``symbol`` with trade_date >= start, oldest first."""
        with self._session() as session:
            return list(session.exec(
                select(DailyBar)
                .where(DailyBar.symbol == symbol)
                .where(DailyBar.trade_date >= start)
                .order_by(DailyBar.trade_date)
            ).all())

    def distinct_symbols(self) -> list[str]:
        with self._session() as session:
            return sorted(session.exec(select(DailyBar.symbol).distinct()).all())

    def delete_bars_before(self, cutoff: date) -> int:
        with self._session() as session:
            rows = session.exec(select(DailyBar).where(DailyBar.trade_date < cutoff)).all()
            for row in rows:
                session.delete(row)
            session.commit()
            return len(rows)

    # ------------------------------------------------------------------
    # Volatility metrics
    # ------------------------------------------------------------------

    def save_volatility_metrics(self, metrics: VolatilityMetrics) -> VolatilityMetrics:
        """Replace the row for (symbol, calculation_date, lookback_days) atomically."""
        with self._session() as session:
            existing = session.exec(
                select(VolatilityMetrics)
                .where(VolatilityMetrics.symbol == metrics.symbol)
                .where(VolatilityMetrics.calculation_date == metrics.calculation_date)
                .where(VolatilityMetrics.lookback_days == metrics.lookback_days)
            ).first()
            if existing is None:
                session.add(metrics)
                target = metrics
            else:
                existing.copy_stats_from(metrics)
                session.add(existing)
                target = existing
            session.commit()
            return target

    def latest_metrics(self, symbol: str) -> VolatilityMetrics | None:
        """Most recent calculation for ``symbol`` (latest date, then latest insert)."""
        with self._session() as session:
            return session.exec(
                select(VolatilityMetrics)
                .where(VolatilityMetrics.symbol == symbol)
                .order_by(
                    col(VolatilityMetrics.calculation_date).desc(),
                    col(VolatilityMetrics.id).desc(),
                )
                .limit(1)
            ).first()

    def delete_metrics_before(self, cutoff: date) -> int:
        with self._session() as session:
            rows = session.exec(
                select(VolatilityMetrics).where(VolatilityMetrics.calculation_date < cutoff)
            ).all()
            for row in rows:
                session.delete(row)
            session.commit()
            return len(rows)

    # ------------------------------------------------------------------
    # Trades
    # ------------------------------------------------------------------

    def add_trade(self, trade: Trade) -> Trade:
        with self._session() as session:
            session.add(trade)
            session.commit()
            session.refresh(trade)
            return trade

    save_trade = add_trade

    def get_trade(self, trade_id: int) -> Trade | None:
        with self._session() as session:
            return session.get(Trade, trade_id)

    def list_trades(
        self,
        symbol: str | None = None,
        status: TradeStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Trade]:
        """Trades newest entry first."""
        stmt = select(Trade).order_by(col(Trade.entry_date).desc(), col(Trade.id).desc())
        if symbol is not None:
            stmt = stmt.where(Trade.symbol == symbol.upper())
        if status is not None:
            stmt = stmt.where(Trade.status == status)
        with self._session() as session:
            return list(session.exec(stmt.offset(offset).limit(limit)).all())

    def count_trades_entered_between(self, start: date, end: date) -> int:
        """Trades of any status with start <= entry_date <= end."""
        with self._session() as session:
            return session.exec(
                select(func.count())
                .select_from(Trade)
                .where(Trade.entry_date >= start)
                .where(Trade.entry_date <= end)
            ).one()

    def closed_trades_between(self, start: date, end: date) -> list[Trade]:
        """CLOSED trades with start <= exit_date <= end, most recent exit first."""
        with self._session() as session:
            return list(session.exec(
                select(Trade)
                .where(Trade.status == TradeStatus.CLOSED)
                .where(Trade.exit_date >= start)
                .where(Trade.exit_date <= end)
                .order_by(col(Trade.exit_date).desc(), col(Trade.id).desc())
            ).all())

    def recent_closed_trades(self, limit: int | None = None) -> list[Trade]:
        """CLOSED trades, most recent exit first (ties: most recently created first)."""
        stmt = (
            select(Trade)
            .where(Trade.status == TradeStatus.CLOSED)
            .order_by(col(Trade.exit_date).desc(), col(Trade.id).desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        with self._session() as session:
            return list(session.exec(stmt).all())

    def all_closed_trades(self) -> list[Trade]:
        return self.recent_closed_trades()

    def count_open_trades(self) -> int:
        with self._session() as session:
            return session.exec(
                select(func.count())
                .select_from(Trade)
                .where(Trade.status == TradeStatus.OPEN)
            ).one()

    # ------------------------------------------------------------------
    # Performance metrics
    # ------------------------------------------------------------------

    def save_performance_metrics(self, metrics: PerformanceMetrics) -> PerformanceMetrics:
        """Store ``metrics``, replacing an earlier row for the same period."""
        with self._session() as session:
            existing = session.exec(
                select(PerformanceMetrics)
                .where(PerformanceMetrics.period_type == metrics.period_type)
                .where(PerformanceMetrics.period_end == metrics.period_end)
            ).first()
            if existing is not None:
                logger.info(
                    f"Replacing {metrics.period_type.value} metrics for period ending "
                    f"{metrics.period_end}"
                )
                session.delete(existing)
                session.flush()
            metrics.id = None
            session.add(metrics)
            session.commit()
            session.refresh(metrics)
            return metrics

    def performance_history(self, period_type: PeriodType) -> list[PerformanceMetrics]:
        """Saved metrics of one period type, newest period first."""
        with self._session() as session:
            return list(session.exec(
                select(PerformanceMetrics)
                .where(PerformanceMetrics.period_type == period_type)
                .order_by(col(PerformanceMetrics.period_end).desc())
            ).all())


_default_store: Store | None = None


def get_store() -> Store:
    """Process-wide store bound to the configured database engine."""
    global _default_store
    if _default_store is None:
        from tradescout.database import engine
        _default_store = Store(engine)
    return _default_store
