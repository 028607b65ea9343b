"""
Main orchestrator for DANUU-MD Bot.

This module wires the components together and runs the session.

Responsibilities:
    1. Load the protocol client and saved credentials
    2. Start the Session Supervisor (connect, reconnect, pairing)
    3. Route inbound messages through the Message Dispatcher
    4. Notify the operator on startup, logout and shutdown

Flow:
    ┌─────────────────────────────────────────────────────────────┐
    │  1. Load credentials from the auth state directory         │
    │  2. Connect (QR pairing if no saved session)               │
    │  3. connection.update → Supervisor                         │
    │  4. creds.update      → AuthStateStore.save                │
    │  5. messages.upsert   → MessageDispatcher.handle           │
    │  6. Logged out → stop; other drops → reconnect             │
    └─────────────────────────────────────────────────────────────┘

Entry Point:
    python -m src.bot
"""

import asyncio
import logging
import signal
import sys
from typing import Optional

from config import settings
from src import __version__
from src.alerts import AlertManager
from src.auth_state import AuthStateStore
from src.dispatcher import MessageDispatcher
from src.models import ConnectionState
from src.protocol import ClientConfig, ProtocolClient, load_protocol_client
from src.reconnect import ReconnectPolicy
from src.supervisor import SessionSupervisor
from src.telegram_client import TelegramClient

logger = logging.getLogger(__name__)


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for the process."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
    )
    # Suppress noisy HTTP logs
    logging.getLogger("httpx").setLevel(logging.WARNING)


class DanuuBot:
    """
    Ties the supervisor, dispatcher, credential store and alerts together.
    """

    def __init__(self, client: Optional[ProtocolClient] = None) -> None:
        """
        Initialize the bot.

        Args:
            client: Protocol client. Defaults to the PROTOCOL_CLIENT factory.
        """
        self._client = client
        self.store: Optional[AuthStateStore] = None
        self.telegram: Optional[TelegramClient] = None
        self.alerts: Optional[AlertManager] = None
        self.supervisor: Optional[SessionSupervisor] = None
        self.dispatcher: Optional[MessageDispatcher] = None

    async def initialize(self) -> bool:
        """
        Initialize all bot components.

        Returns:
            True if all components initialized successfully, False otherwise.
        """
        logger.info("Initializing components...")

        try:
            # 1. Protocol client
            client = self._client or load_protocol_client(settings.protocol_client)

            # 2. Operator alerts (Telegram is optional)
            telegram = TelegramClient()
            if telegram.configured:
                await telegram.initialize()
                self.telegram = telegram
            else:
                logger.info("Telegram alerts disabled (no TELEGRAM_BOT_TOKEN/TELEGRAM_CHAT_ID)")
            self.alerts = AlertManager(telegram_client=self.telegram, settings=settings)

            # 3. Credentials
            self.store = AuthStateStore(
                settings.auth_state_dir,
                encryption_key=settings.auth_encryption_key,
            )
            config = ClientConfig(
                auth_state=self.store.load(),
                browser=(settings.browser_name, settings.browser_agent, settings.browser_version),
                log_level=settings.client_log_level,
            )

            # 4. Supervisor and dispatcher
            self.supervisor = SessionSupervisor(
                client,
                config=config,
                save_creds=self.store.save,
                policy=ReconnectPolicy.from_settings(settings),
                alerts=self.alerts,
            )
            self.dispatcher = MessageDispatcher(get_handle=lambda: self.supervisor.current_handle)
            self.supervisor.set_message_handler(self.dispatcher.handle)

            logger.info("All components initialized successfully")
            return True

        except Exception as e:
            logger.error(f"Failed to initialize components: {e}")
            return False

    async def start(self) -> ConnectionState:
        """Run the session until it ends or stop() is called."""
        await self.alerts.startup(version=__version__)
        final_state = await self.supervisor.run()
        logger.info(f"Session ended in state: {final_state.value}")
        return final_state

    async def stop(self, reason: str = "Manual shutdown") -> None:
        """Gracefully stop the bot."""
        logger.info(f"Stopping bot (Reason: {reason})...")

        if self.supervisor:
            await self.supervisor.stop()

        if self.alerts:
            await self.alerts.shutdown(reason=reason)

        if self.telegram:
            try:
                await self.telegram.shutdown()
            except Exception as e:
                logger.warning(f"Error shutting down Telegram client: {e}")


async def main() -> None:
    """
    Main entry point for the bot.

    Initializes all components and runs the session.
    """
    logger.info("=" * 60)
    logger.info(f"Starting DANUU-MD Bot v{__version__}")
    logger.info(f"Auth state: {settings.auth_state_dir}")
    logger.info("=" * 60)

    bot = DanuuBot()

    if not await bot.initialize():
        logger.error("Failed to initialize bot - exiting")
        return

    # Handle shutdown signals
    loop = asyncio.get_running_loop()

    def signal_handler():
        logger.info("Shutdown signal received")
        asyncio.create_task(bot.supervisor.stop())

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, signal_handler)
        except NotImplementedError:
            # Windows doesn't support add_signal_handler
            pass

    reason = "Session ended"
    try:
        final_state = await bot.start()
        if final_state == ConnectionState.CLOSED_TERMINAL:
            reason = "Logged out or reconnects exhausted"
    except asyncio.CancelledError:
        logger.info("Bot cancelled")
        reason = "Cancelled"
    except Exception as e:
        logger.error(f"Bot error: {e}")
        reason = f"Error: {e}"
    finally:
        await bot.stop(reason)

    logger.info("Bot shutdown complete")


def cli() -> None:
    configure_logging()
    asyncio.run(main())


if __name__ == "__main__":
    cli()
