"""Tests for Telegram message formatting and delivery scheduling."""

import asyncio
import threading
from unittest.mock import AsyncMock, MagicMock

import pytest

from tradescout.schemas.signal import TradeSetup
from tradescout.services.telegram_bot import TelegramBot, format_opportunity_alert


def _setup() -> TradeSetup:
    return TradeSetup(
        symbol="ACME",
        entry_price=96.0,
        target_price=98.88,
        stop_price=94.56,
        position_size=52,
        risk_amount=74.88,
        profit_target=149.76,
        confidence=75.0,
        reasoning="Price drop 6.0 std devs below normal",
    )


class TestFormatting:
    def test_opportunity_alert(self):
        signal = MagicMock(symbol="ACME", confidence=75.0)

        text = format_opportunity_alert(signal, _setup())

        assert text.startswith("🎯 OPPORTUNITY: ACME (75% confidence)")
        assert "Entry: $96.00" in text
        assert "Target: $98.88 (+$150)" in text
        assert "Stop: $94.56 (-$75)" in text
        assert "Shares: 52" in text
        assert text.endswith("Price drop 6.0 std devs below normal")


class TestDelivery:
    def test_submit_requires_running_loop(self):
        bot = TelegramBot(token="t", chat_ids=[1])
        with pytest.raises(RuntimeError):
            bot.send_opportunity_alert(MagicMock(symbol="ACME", confidence=75.0), _setup())

    @pytest.mark.asyncio
    async def test_send_notification_continues_after_chat_failure(self):
        bot = TelegramBot(token="t", chat_ids=[1, 2])
        bot._app = MagicMock()
        bot._app.bot.send_message = AsyncMock(side_effect=[RuntimeError("blocked"), None])

        await bot.send_notification("hello")

        assert bot._app.bot.send_message.await_count == 2

    @pytest.mark.asyncio
    async def test_send_notification_without_app_is_noop(self):
        bot = TelegramBot(token="t", chat_ids=[1])
        await bot.send_notification("hello")
        assert bot._app is None


def test_delivery_runs_on_bot_loop():
    bot = TelegramBot(token="t", chat_ids=[7])
    bot._app = MagicMock()
    bot._app.bot.send_message = AsyncMock()
    loop = asyncio.new_event_loop()
    bot._loop = loop

    started = threading.Event()
    loop.call_soon(started.set)
    thread = threading.Thread(target=loop.run_forever, daemon=True)
    thread.start()
    started.wait(timeout=5)
    try:
        bot._submit("ping").result(timeout=5)
    finally:
        loop.call_soon_threadsafe(loop.stop)
        thread.join(timeout=5)
        loop.close()

    bot._app.bot.send_message.assert_awaited_once_with(chat_id=7, text="ping")
