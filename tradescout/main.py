"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from tradescout.config import settings
from tradescout.database import create_db_and_tables
from tradescout.utils.logging import setup_logging
from tradescout.api import opportunities, performance, maintenance, trades, system


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    setup_logging()
    create_db_and_tables()

    # Start Telegram bot if configured; the orchestrator alerts through it
    telegram_bot = None
    if settings.telegram_bot_token:
        from tradescout.services.telegram_bot import init_bot
        telegram_bot = init_bot()
        telegram_bot.start()

    from tradescout.engine.opportunity import init_orchestrator
    init_orchestrator(notifier=telegram_bot)

    from tradescout.engine.scheduler import start_scheduler, stop_scheduler
    start_scheduler()

    yield

    stop_scheduler()
    if telegram_bot:
        telegram_bot.stop()


app = FastAPI(
    title="TradeScout",
    description="Intraday anomaly scanner with risk gating and performance tracking",
    version="0.1.0",
    lifespan=lifespan,
)

# Mount routers
app.include_router(opportunities.router)
app.include_router(performance.router)
app.include_router(maintenance.router)
app.include_router(trades.router)
app.include_router(system.router)
