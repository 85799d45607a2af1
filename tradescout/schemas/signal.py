"""Pydantic schemas for live quotes, opportunity signals and trade setups."""

from datetime import datetime

from pydantic import BaseModel, Field


class Quote(BaseModel):
    """Intraday quote as returned by the market-data source."""
    symbol: str
    price: float | None = None
    open: float | None = None
    day_high: float | None = None
    day_low: float | None = None
    volume: int | None = None

    @property
    def is_complete(self) -> bool:
        return self.price is not None and self.open is not None and self.volume is not None


class HistoricalContext(BaseModel):
    avg_max_drop_pct: float
    stddev_max_drop_pct: float
    avg_volume: int
    stddev_volume: int
    avg_daily_change_pct: float

    model_config = {"frozen": True}


class OpportunitySignal(BaseModel):
    symbol: str
    current_price: float
    today_open: float
    today_high: float | None = None
    today_low: float | None = None
    current_volume: int
    current_drop_pct: float
    price_zscore: float
    volume_zscore: float
    confidence: float = Field(ge=0, le=100)
    is_opportunity: bool
    reason: str
    historical_context: HistoricalContext
    timestamp: datetime

    model_config = {"frozen": True}

    @property
    def summary(self) -> str:
        return (
            f"{self.symbol}: {self.current_drop_pct:.2f}% drop, "
            f"confidence {self.confidence:.0f}, "
            f"price z {self.price_zscore:.2f}, volume z {self.volume_zscore:.2f}"
        )


class TradeSetup(BaseModel):
    symbol: str
    entry_price: float
    target_price: float
    stop_price: float
    position_size: int = Field(gt=0)
    risk_amount: float
    profit_target: float
    confidence: float
    reasoning: str

    model_config = {"frozen": True}
