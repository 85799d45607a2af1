"""DailyBar model: one OHLCV row per symbol per trading day."""

from datetime import date, datetime, timezone

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field


def _pct_of_open(delta: float, open_price: float) -> float:
    if open_price == 0:
        return 0.0
    return delta / open_price * 100.0


class DailyBar(SQLModel, table=True):
    __tablename__ = "daily_bar"
    __table_args__ = (
        UniqueConstraint("symbol", "trade_date", name="uk_daily_bar_symbol_date"),
    )

    id: int | None = Field(default=None, primary_key=True)
    symbol: str = Field(index=True, max_length=10)
    trade_date: date = Field(index=True)
    open_price: float
    high_price: float
    low_price: float
    close_price: float
    volume: int
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def daily_range_pct(self) -> float:
        """(high - low) / open * 100"""
        return _pct_of_open(self.high_price - self.low_price, self.open_price)

    @property
    def max_drop_pct(self) -> float:
        """(low - open) / open * 100"""
        return _pct_of_open(self.low_price - self.open_price, self.open_price)

    @property
    def daily_change_pct(self) -> float:
        """(close - open) / open * 100"""
        return _pct_of_open(self.close_price - self.open_price, self.open_price)
