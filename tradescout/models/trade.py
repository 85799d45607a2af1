"""Trade model: lifecycle of a single position from entry to exit.

A trade is created OPEN by ``open_trade`` and leaves that state exactly once,
through ``close_trade`` (which derives pnl) or ``cancel_trade``. Rows are never
deleted.
"""

from datetime import date, datetime, timezone
from enum import Enum

from sqlmodel import SQLModel, Field


class TradeStatus(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"
    CANCELLED = "CANCELLED"


class ExitReason(str, Enum):
    TARGET_HIT = "TARGET_HIT"
    STOP_HIT = "STOP_HIT"
    TIME_EXIT = "TIME_EXIT"
    MANUAL_EXIT = "MANUAL_EXIT"
    CANCELLED = "CANCELLED"


class TradeStateError(Exception):
    """Raised when a lifecycle operation does not apply to the trade's status."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Trade(SQLModel, table=True):
    __tablename__ = "trade"

    id: int | None = Field(default=None, primary_key=True)
    symbol: str = Field(index=True, max_length=10)
    entry_date: date = Field(index=True)
    entry_price: float
    target_price: float
    stop_price: float
    position_size: int
    confidence_score: float | None = None
    entry_reasoning: str | None = Field(default=None, max_length=1000)

    status: TradeStatus = Field(default=TradeStatus.OPEN, index=True)
    exit_date: date | None = Field(default=None, index=True)
    exit_price: float | None = None
    pnl: float | None = None
    pnl_percent: float | None = None
    exit_reason: ExitReason | None = None
    lessons_learned: str | None = Field(default=None, max_length=2000)

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def is_winner(self) -> bool:
        return self.pnl is not None and self.pnl > 0

    @property
    def is_loser(self) -> bool:
        return self.pnl is not None and self.pnl < 0


def open_trade(
    symbol: str,
    entry_date: date,
    entry_price: float,
    target_price: float,
    stop_price: float,
    position_size: int,
    confidence_score: float | None = None,
    entry_reasoning: str | None = None,
) -> Trade:
    """Build a new OPEN trade (not yet persisted)."""
    if position_size <= 0:
        raise ValueError("position_size must be positive")
    if entry_price <= 0:
        raise ValueError("entry_price must be positive")
    now = _utcnow()
    return Trade(
        symbol=symbol.upper(),
        entry_date=entry_date,
        entry_price=entry_price,
        target_price=target_price,
        stop_price=stop_price,
        position_size=position_size,
        confidence_score=confidence_score,
        entry_reasoning=entry_reasoning,
        status=TradeStatus.OPEN,
        created_at=now,
        updated_at=now,
    )


def close_trade(
    trade: Trade,
    exit_price: float,
    reason: ExitReason,
    exit_date: date,
    lessons_learned: str | None = None,
) -> Trade:
    """Close an OPEN trade, deriving pnl and pnl_percent in one step."""
    if trade.status != TradeStatus.OPEN:
        raise TradeStateError(f"Trade {trade.id} is {trade.status.value}, not OPEN")
    if reason == ExitReason.CANCELLED:
        raise TradeStateError("Use cancel_trade to cancel a trade")

    price_change = exit_price - trade.entry_price

    trade.exit_price = exit_price
    trade.exit_date = exit_date
    trade.exit_reason = reason
    trade.status = TradeStatus.CLOSED
    trade.pnl = round(price_change * trade.position_size, 2)
    trade.pnl_percent = round(price_change / trade.entry_price * 100.0, 2)
    if lessons_learned is not None:
        trade.lessons_learned = lessons_learned
    trade.updated_at = _utcnow()
    return trade


def cancel_trade(trade: Trade, lessons_learned: str | None = None) -> Trade:
    """Cancel an OPEN trade. Cancelled trades carry no pnl."""
    if trade.status != TradeStatus.OPEN:
        raise TradeStateError(f"Trade {trade.id} is {trade.status.value}, not OPEN")
    trade.status = TradeStatus.CANCELLED
    trade.exit_reason = ExitReason.CANCELLED
    if lessons_learned is not None:
        trade.lessons_learned = lessons_learned
    trade.updated_at = _utcnow()
    return trade
