"""
Centralized Alert Management System

This module provides a single place to surface session events to the
operator, with severity-based filtering and optional Telegram delivery.

Features:
- Severity-based filtering (DEBUG, INFO, WARNING, ERROR, CRITICAL)
- Every alert is logged; alerts at or above MIN_TELEGRAM_ALERT_LEVEL are
  also sent to the operator's Telegram chat when one is configured
- Delivery failures never propagate to the caller

Usage:
    from src.alerts import AlertManager, AlertLevel

    alerts = AlertManager(telegram_client=telegram, settings=settings)

    await alerts.notify(AlertLevel.INFO, "pairing_required", "Scan the QR code")
    await alerts.critical("logged_out", "Session logged out")
"""

import logging
from enum import Enum
from typing import Any, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from src.telegram_client import TelegramClient
    from config.settings import Settings

logger = logging.getLogger(__name__)


class AlertLevel(Enum):
    """Alert severity levels."""
    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3
    CRITICAL = 4


_LOG_LEVELS = {
    AlertLevel.DEBUG: logging.DEBUG,
    AlertLevel.INFO: logging.INFO,
    AlertLevel.WARNING: logging.WARNING,
    AlertLevel.ERROR: logging.ERROR,
    AlertLevel.CRITICAL: logging.CRITICAL,
}


class AlertManager:
    """
    Alert dispatch with severity-based filtering.

    The Telegram channel is optional; without it alerts are only logged.
    """

    def __init__(
        self,
        telegram_client: Optional["TelegramClient"] = None,
        settings: Optional["Settings"] = None,
    ):
        """
        Initialize the AlertManager.

        Args:
            telegram_client: TelegramClient instance for notifications
            settings: Settings instance for configuration
        """
        self.telegram = telegram_client
        self.settings = settings

        # Default minimum alert level for Telegram notifications
        self._min_telegram_level = AlertLevel.WARNING

        if settings:
            self._load_settings()

    def _load_settings(self) -> None:
        """Load alert configuration from settings."""
        try:
            level_str = self.settings.min_telegram_alert_level.upper()
            self._min_telegram_level = AlertLevel[level_str]
            logger.debug(f"Loaded min_telegram_alert_level: {level_str}")
        except (KeyError, AttributeError) as e:
            logger.warning(f"Invalid min_telegram_alert_level, using default WARNING: {e}")

    async def notify(
        self,
        level: AlertLevel,
        alert_type: str,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        """
        Send a notification with the specified severity level.

        Args:
            level: Alert severity level
            alert_type: Category of alert (e.g., "logged_out", "pairing_required")
            message: Human-readable alert message
            details: Optional dictionary with additional alert details
        """
        log_msg = f"[{alert_type}] {message}"
        if details:
            log_msg += f" | {details}"
        logger.log(_LOG_LEVELS[level], log_msg)

        if self.telegram and level.value >= self._min_telegram_level.value:
            try:
                await self.telegram.send_alert(
                    level=level.name,
                    alert_type=alert_type,
                    message=message,
                    details=details,
                )
            except Exception as e:
                # Operator channel problems must not affect the session
                logger.error(f"Failed to send Telegram alert: {e}")

    async def startup(self, **details) -> None:
        await self.notify(AlertLevel.INFO, "bot_started", "Bot started", details)

    async def shutdown(self, reason: str = "Manual shutdown", **details) -> None:
        await self.notify(AlertLevel.INFO, "bot_stopped", f"Bot stopped: {reason}", details)

    async def critical(self, alert_type: str, message: str, **details) -> None:
        await self.notify(AlertLevel.CRITICAL, alert_type, message, details)

    async def error(self, alert_type: str, message: str, **details) -> None:
        await self.notify(AlertLevel.ERROR, alert_type, message, details)

    async def warning(self, alert_type: str, message: str, **details) -> None:
        await self.notify(AlertLevel.WARNING, alert_type, message, details)

    async def info(self, alert_type: str, message: str, **details) -> None:
        await self.notify(AlertLevel.INFO, alert_type, message, details)
