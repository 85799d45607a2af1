"""Pydantic schemas for the Trade API."""

from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from tradescout.models.trade import ExitReason, TradeStatus


class TradeCreate(BaseModel):
    symbol: str = Field(min_length=1, max_length=10)
    entry_date: date | None = None  # defaults to today in the trading timezone
    entry_price: float = Field(gt=0)
    target_price: float = Field(gt=0)
    stop_price: float = Field(gt=0)
    position_size: int = Field(gt=0)
    confidence_score: float | None = Field(default=None, ge=0, le=100)
    entry_reasoning: str | None = Field(default=None, max_length=1000)

    @field_validator("symbol")
    @classmethod
    def _normalize_symbol(cls, value: str) -> str:
        text = value.strip().upper()
        if not text:
            raise ValueError("must not be empty")
        return text

    @model_validator(mode="after")
    def _validate_prices(self):
        if not self.stop_price < self.entry_price < self.target_price:
            raise ValueError("prices must satisfy stop_price < entry_price < target_price")
        return self


class TradeClose(BaseModel):
    exit_price: float = Field(gt=0)
    exit_reason: ExitReason = ExitReason.MANUAL_EXIT
    exit_date: date | None = None
    lessons_learned: str | None = Field(default=None, max_length=2000)

    @field_validator("exit_reason")
    @classmethod
    def _reject_cancel(cls, value: ExitReason) -> ExitReason:
        if value == ExitReason.CANCELLED:
            raise ValueError("use the cancel endpoint to cancel a trade")
        return value


class TradeCancel(BaseModel):
    lessons_learned: str | None = Field(default=None, max_length=2000)


class TradeRead(BaseModel):
    id: int
    symbol: str
    entry_date: date
    entry_price: float
    target_price: float
    stop_price: float
    position_size: int
    confidence_score: float | None
    entry_reasoning: str | None
    status: TradeStatus
    exit_date: date | None
    exit_price: float | None
    pnl: float | None
    pnl_percent: float | None
    exit_reason: ExitReason | None
    lessons_learned: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
