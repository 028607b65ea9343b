"""
Tests for AlertManager and the Telegram operator channel.
"""

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.alerts import AlertLevel, AlertManager
from src.telegram_client import TelegramClient


@pytest.fixture
def telegram():
    client = TelegramClient(token="fake_token", chat_id="fake_chat_id")
    client.app = MagicMock()
    client.app.bot.send_message = AsyncMock()
    return client


class TestAlertManager:
    """Severity filtering and delivery."""

    @pytest.mark.asyncio
    async def test_alert_is_always_logged(self, caplog):
        alerts = AlertManager()

        with caplog.at_level(logging.INFO):
            await alerts.info("pairing_required", "Scan the QR code")

        assert "[pairing_required] Scan the QR code" in caplog.text

    @pytest.mark.asyncio
    async def test_below_threshold_not_sent(self, telegram):
        alerts = AlertManager(telegram_client=telegram)

        await alerts.info("pairing_required", "Scan the QR code")

        telegram.app.bot.send_message.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_critical_is_sent(self, telegram):
        alerts = AlertManager(telegram_client=telegram)

        await alerts.critical("logged_out", "Session logged out", jid="me")

        telegram.app.bot.send_message.assert_awaited_once()
        kwargs = telegram.app.bot.send_message.await_args.kwargs
        assert kwargs["chat_id"] == "fake_chat_id"
        assert "🚨 *CRITICAL*" in kwargs["text"]
        assert "logged_out" in kwargs["text"]
        assert "Session logged out" in kwargs["text"]
        assert "jid" in kwargs["text"]

    @pytest.mark.asyncio
    async def test_threshold_from_settings(self, telegram):
        settings = MagicMock()
        settings.min_telegram_alert_level = "info"
        alerts = AlertManager(telegram_client=telegram, settings=settings)

        await alerts.notify(AlertLevel.INFO, "bot_started", "Bot started")

        telegram.app.bot.send_message.assert_awaited_once()

    def test_invalid_threshold_falls_back_to_warning(self):
        settings = MagicMock()
        settings.min_telegram_alert_level = "loud"

        alerts = AlertManager(settings=settings)

        assert alerts._min_telegram_level == AlertLevel.WARNING

    @pytest.mark.asyncio
    async def test_telegram_failure_is_swallowed(self, telegram, caplog):
        telegram.app.bot.send_message.side_effect = RuntimeError("network down")
        alerts = AlertManager(telegram_client=telegram)

        with caplog.at_level(logging.ERROR):
            await alerts.critical("logged_out", "Session logged out")

        assert "Failed to send Telegram alert" in caplog.text


class TestTelegramClient:

    def test_configured(self):
        assert TelegramClient(token="t", chat_id="c").configured
        assert not TelegramClient(token="t", chat_id="").configured

    @pytest.mark.asyncio
    async def test_send_alert_formats_details(self, telegram):
        await telegram.send_alert(
            level="ERROR",
            alert_type="reconnect_exhausted",
            message="Giving up",
            details={"attempts": 5, "codes": [428, 408]},
        )

        text = telegram.app.bot.send_message.await_args.kwargs["text"]
        assert "❌ *ERROR*" in text
        assert "attempts: `5`" in text
        assert "428" in text
