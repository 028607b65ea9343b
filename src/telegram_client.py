"""
Telegram Client - Operator notifications.

Sends session alerts (pairing required, logged out, reconnect exhausted,
start/stop) to the operator's Telegram chat. Nothing is read back from
Telegram; the bot's users never see this channel.

Configuration:
    TELEGRAM_BOT_TOKEN: Bot token from @BotFather
    TELEGRAM_CHAT_ID: Operator's personal/group chat ID
"""

import json
import logging
from datetime import datetime
from typing import Any, Optional

from telegram.ext import Application

from config import settings

logger = logging.getLogger(__name__)

_LEVEL_ICONS = {
    "DEBUG": "🔍",
    "INFO": "ℹ️",
    "WARNING": "⚠️",
    "ERROR": "❌",
    "CRITICAL": "🚨",
}


class TelegramClient:
    """Pushes operator alerts to a single Telegram chat."""

    def __init__(
        self,
        token: str | None = None,
        chat_id: str | None = None,
    ) -> None:
        """
        Initialize the Telegram client.

        Args:
            token: Bot token. Defaults to config value.
            chat_id: Target chat ID. Defaults to config value.
        """
        self.token = token or settings.telegram_bot_token
        self.chat_id = chat_id or settings.telegram_chat_id
        self.app: Optional[Application] = None

    @property
    def configured(self) -> bool:
        return bool(self.token and self.chat_id)

    async def initialize(self) -> None:
        """Build and initialize the Telegram application."""
        self.app = Application.builder().token(self.token).build()
        await self.app.initialize()
        logger.info("Telegram client initialized")

    async def shutdown(self) -> None:
        if self.app:
            await self.app.shutdown()
            self.app = None

    async def send_alert(
        self,
        level: str,
        alert_type: str,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        """
        Send an alert message to the operator chat.

        Args:
            level: AlertLevel name (e.g. "CRITICAL")
            alert_type: Category of alert (e.g. "logged_out")
            message: Human-readable alert message
            details: Optional dictionary with additional details
        """
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        icon = _LEVEL_ICONS.get(level, "🔔")

        alert_lines = [
            f"{icon} *{level}*",
            "",
            f"*Type:* `{alert_type}`",
            f"*Time:* {timestamp}",
            f"*Message:* {message}",
        ]

        if details:
            alert_lines.append("")
            alert_lines.append("*Details:*")
            for key, value in details.items():
                if isinstance(value, (dict, list)):
                    value_str = json.dumps(value, indent=2)
                else:
                    value_str = str(value)
                alert_lines.append(f"• {key}: `{value_str}`")

        await self.app.bot.send_message(
            chat_id=self.chat_id,
            text="\n".join(alert_lines),
            parse_mode="Markdown",
        )
        logger.info(f"Sent Telegram alert: {alert_type}")
