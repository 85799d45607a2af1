"""Application configuration via environment variables."""

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

DEFAULT_WATCHLIST = [
    "AAPL", "MSFT", "GOOGL", "AMZN", "NVDA",
    "META", "JPM", "V", "JNJ", "PG",
]


class Settings(BaseSettings):
    database_url: str = "sqlite:///./tradescout.db"
    log_level: str = "INFO"

    # Telegram
    telegram_bot_token: str = ""
    telegram_chat_ids: list[int] = []

    # Capital & sizing (dollars)
    initial_capital: float = Field(default=10_000.0, gt=0)
    position_size: float = Field(default=5_000.0, gt=0)
    target_profit_per_trade: float = Field(default=150.0, gt=0)
    stop_loss_per_trade: float = Field(default=75.0, gt=0)
    annual_target_percent: float = 15.0
    quarterly_target_percent: float = 3.75

    watchlist: list[str] = DEFAULT_WATCHLIST

    # Detection thresholds have no defaults: a missing value is a startup error
    min_confidence: float = Field(ge=0, le=100)
    min_price_zscore: float
    min_volume_zscore: float
    lookback_days: int = Field(default=90, ge=2)

    # Risk limits
    max_trades_per_week: int = Field(default=3, ge=1)
    max_trades_per_month: int = Field(default=10, ge=1)
    max_daily_loss: float = Field(default=200.0, gt=0)
    max_monthly_loss: float = Field(default=500.0, gt=0)
    max_consecutive_losses: int = Field(default=3, ge=1)

    # Calendar rules
    no_friday_entries: bool = True
    trading_timezone: str = "America/Los_Angeles"

    # Alerts
    alerts_enabled: bool = True
    alert_cooldown_minutes: int = Field(default=60, ge=0)

    # Scheduling (cron expressions evaluated in trading_timezone)
    daily_maintenance_cron: str = "0 19 * * mon-fri"
    period_report_cron: str = "0 8 1 1,4,7,10 *"
    scan_cron: str = "*/15 6-12 * * mon-fri"
    retention_days: int = Field(default=365, ge=1)

    # Market data throttling
    max_concurrent_fetches: int = Field(default=4, ge=1)
    request_delay_ms: int = Field(default=250, ge=0)
    fetch_timeout_seconds: float = Field(default=15.0, gt=0)

    model_config = {"env_prefix": "TRADESCOUT_", "env_file": ".env"}

    @field_validator("watchlist")
    @classmethod
    def _normalize_watchlist(cls, value: list[str]) -> list[str]:
        symbols: list[str] = []
        for raw in value:
            symbol = raw.strip().upper()
            if symbol and symbol not in symbols:
                symbols.append(symbol)
        if not symbols:
            raise ValueError("watchlist must contain at least one symbol")
        return symbols

    @field_validator("trading_timezone")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"unknown timezone: {value}")
        return value

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.trading_timezone)


settings = Settings()
