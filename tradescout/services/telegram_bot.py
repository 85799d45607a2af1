"""Telegram bot for opportunity alerts, period reports and read-only status commands."""

import asyncio
import logging
import threading
from concurrent.futures import Future
from typing import Optional

from telegram import Update
from telegram.ext import Application, CommandHandler, ContextTypes

from tradescout.config import settings
from tradescout.schemas.performance import PeriodReport
from tradescout.schemas.signal import OpportunitySignal, TradeSetup

logger = logging.getLogger(__name__)

_bot_instance: Optional["TelegramBot"] = None


def format_opportunity_alert(signal: OpportunitySignal, setup: TradeSetup) -> str:
    return (
        f"🎯 OPPORTUNITY: {signal.symbol} ({signal.confidence:.0f}% confidence)\n"
        "\n"
        f"Entry: ${setup.entry_price:.2f}\n"
        f"Target: ${setup.target_price:.2f} (+${setup.profit_target:.0f})\n"
        f"Stop: ${setup.stop_price:.2f} (-${setup.risk_amount:.0f})\n"
        f"Shares: {setup.position_size}\n"
        "\n"
        f"{setup.reasoning}"
    )


class TelegramBot:
    """Telegram bot running in a background thread with its own event loop."""

    def __init__(self, token: str, chat_ids: list[int]):
        self.token = token
        self.chat_ids = set(chat_ids)
        self._app: Optional[Application] = None
        self._thread: Optional[threading.Thread] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def _is_authorized(self, user_id: int) -> bool:
        return user_id in self.chat_ids

    async def _check_auth(self, update: Update) -> bool:
        if not update.effective_user or not self._is_authorized(update.effective_user.id):
            if update.message:
                await update.message.reply_text("Unauthorized.")
            return False
        return True

    async def _cmd_status(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        if not await self._check_auth(update):
            return

        from tradescout.engine.scheduler import get_scheduler_status
        from tradescout.store import get_store

        status = get_scheduler_status()
        store = get_store()
        scheduler_str = "running" if status["running"] else "stopped"
        text = (
            f"Scheduler: {scheduler_str}\n"
            f"Jobs: {status['job_count']}\n"
            f"Stocks tracked: {len(store.distinct_symbols())}\n"
            f"Open trades: {store.count_open_trades()}"
        )
        await update.message.reply_text(text)

    async def _cmd_risk(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        if not await self._check_auth(update):
            return

        from tradescout.services.risk_gate import RiskGate
        from tradescout.store import get_store

        await update.message.reply_text(RiskGate(get_store(), settings).risk_status())

    async def _cmd_performance(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        if not await self._check_auth(update):
            return

        from tradescout.services.performance import PerformanceTracker, format_snapshot
        from tradescout.store import get_store

        snapshot = PerformanceTracker(get_store(), settings).snapshot()
        await update.message.reply_text(format_snapshot(snapshot))

    async def send_notification(self, message: str):
        """Send a message to all whitelisted chat IDs."""
        if not self._app or not self._app.bot:
            return
        for chat_id in self.chat_ids:
            try:
                await self._app.bot.send_message(chat_id=chat_id, text=message)
            except Exception as e:
                logger.warning(f"Failed to send Telegram notification to {chat_id}: {e}")

    def _submit(self, message: str) -> Future:
        """Schedule ``message`` on the bot loop (fire-and-forget)."""
        if not self._loop or not self._loop.is_running():
            raise RuntimeError("Telegram bot is not running")
        future = asyncio.run_coroutine_threadsafe(self.send_notification(message), self._loop)
        future.add_done_callback(_log_delivery_error)
        return future

    def send_opportunity_alert(self, signal: OpportunitySignal, setup: TradeSetup) -> Future:
        return self._submit(format_opportunity_alert(signal, setup))

    def send_period_report(self, report: PeriodReport) -> Future:
        from tradescout.services.performance import format_executive_summary

        m = report.metrics
        header = f"📊 TradeScout Report - {m.period_start} to {m.period_end}\n\n"
        return self._submit(header + format_executive_summary(report))

    def _run_bot(self):
        """Run the bot in a background thread with its own event loop."""
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)

        self._app = (
            Application.builder()
            .token(self.token)
            .build()
        )

        self._app.add_handler(CommandHandler("status", self._cmd_status))
        self._app.add_handler(CommandHandler("risk", self._cmd_risk))
        self._app.add_handler(CommandHandler("performance", self._cmd_performance))

        logger.info("Telegram bot starting...")
        self._loop.run_until_complete(self._app.initialize())
        self._loop.run_until_complete(self._app.start())
        self._loop.run_until_complete(self._app.updater.start_polling())
        self._loop.run_forever()

    def start(self):
        self._thread = threading.Thread(target=self._run_bot, daemon=True)
        self._thread.start()

    def stop(self):
        if self._loop and self._app:
            async def _shutdown():
                await self._app.updater.stop()
                await self._app.stop()
                await self._app.shutdown()

            asyncio.run_coroutine_threadsafe(_shutdown(), self._loop).result(timeout=10)
            self._loop.call_soon_threadsafe(self._loop.stop)


def _log_delivery_error(future: Future):
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        logger.error(f"Telegram delivery failed: {exc}")


def init_bot() -> TelegramBot:
    """Initialize and return the bot singleton."""
    global _bot_instance
    _bot_instance = TelegramBot(
        token=settings.telegram_bot_token,
        chat_ids=settings.telegram_chat_ids,
    )
    return _bot_instance


def get_bot() -> Optional[TelegramBot]:
    """Get the bot singleton, or None if not initialized."""
    return _bot_instance
