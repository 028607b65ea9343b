"""
Session Supervisor - Owns the protocol connection and keeps it alive.

States:
    CONNECTING:          connect() called, waiting for the server
    OPEN:                session ready, messages are dispatched
    CLOSED_RECOVERABLE:  dropped (network, stream error, restart) → reconnect
    CLOSED_TERMINAL:     logged out, or reconnect policy exhausted → stop

Flow:
    ┌─────────────────────────────────────────────────────────────┐
    │  connect() → CONNECTING                                     │
    │  CONNECTING → (connection=open) → OPEN                      │
    │  * → (connection=close, reason≠logged_out) → RECOVERABLE    │
    │  RECOVERABLE → (policy delay) → connect() → CONNECTING      │
    │  * → (connection=close, reason=logged_out) → TERMINAL       │
    │  RECOVERABLE → (policy exhausted) → TERMINAL                │
    └─────────────────────────────────────────────────────────────┘

Reconnects run in a single supervising task, never by recursion from the
event handler. Only the supervisor creates or replaces the connection
handle; everyone else reads it through `current_handle`.

Usage:
    supervisor = SessionSupervisor(client, save_creds=store.save)
    supervisor.set_message_handler(dispatcher.handle)
    final_state = await supervisor.run()
"""

import asyncio
import inspect
import logging
from typing import TYPE_CHECKING, Any, Callable, Optional

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    stop_after_attempt,
    wait_exponential,
)

from config import settings
from src.errors import ReconnectExhaustedError
from src.models import ConnectionState, DisconnectReason
from src.pairing import show_pairing_qr
from src.protocol import (
    CONNECTION_UPDATE,
    CREDS_UPDATE,
    MESSAGES_UPSERT,
    ClientConfig,
    ConnectionHandle,
    EventHandler,
    ProtocolClient,
    close_handle,
)
from src.reconnect import ReconnectPolicy

if TYPE_CHECKING:
    from src.alerts import AlertManager

logger = logging.getLogger(__name__)


def disconnect_status_code(update: dict[str, Any]) -> Optional[int]:
    """Status code of the last disconnect, if the client reported one."""
    last = update.get("last_disconnect") or {}
    code = last.get("status_code")
    if code is None:
        code = getattr(last.get("error"), "status_code", None)
    return code


def next_state(state: ConnectionState, update: dict[str, Any]) -> ConnectionState:
    """
    Transition function for connection.update events.

    A close is terminal only when the server says we were logged out.
    Updates without a connection field (QR, progress) keep the state.
    """
    connection = update.get("connection")
    if connection == "open":
        return ConnectionState.OPEN
    if connection == "connecting":
        return ConnectionState.CONNECTING
    if connection == "close":
        if disconnect_status_code(update) == DisconnectReason.LOGGED_OUT:
            return ConnectionState.CLOSED_TERMINAL
        return ConnectionState.CLOSED_RECOVERABLE
    return state


class SessionSupervisor:
    """
    Connects to the protocol client and reconnects on recoverable drops.
    """

    def __init__(
        self,
        client: ProtocolClient,
        config: Optional[ClientConfig] = None,
        save_creds: Optional[Callable[[Any], Any]] = None,
        policy: Optional[ReconnectPolicy] = None,
        alerts: Optional["AlertManager"] = None,
        show_qr: Callable[[str], Any] = show_pairing_qr,
        connect_retry_attempts: Optional[int] = None,
        connect_wait: Any = None,
    ) -> None:
        """
        Initialize the supervisor.

        Args:
            client: Protocol client used to open sessions.
            config: Options passed to client.connect().
            save_creds: creds.update hook (sync or async).
            policy: Reconnect policy. Defaults to one built from settings.
            alerts: Optional AlertManager for operator notifications.
            show_qr: Renders pairing QR payloads.
            connect_retry_attempts: Tries per connect() call. Defaults to config value.
            connect_wait: tenacity wait strategy between connect() tries.
        """
        self.client = client
        self.config = config or ClientConfig()
        self.policy = policy or ReconnectPolicy.from_settings(settings)
        self.alerts = alerts
        self._save_creds = save_creds
        self._show_qr = show_qr
        self._connect_retry_attempts = connect_retry_attempts or settings.connect_retry_attempts
        self._connect_wait = connect_wait or wait_exponential(multiplier=1, min=1, max=30)

        self.state = ConnectionState.IDLE
        self._handle: Optional[ConnectionHandle] = None
        self._message_handler: Optional[EventHandler] = None
        self._reconnect_task: Optional[asyncio.Task] = None
        self._done = asyncio.Event()
        self._stopping = False

    def set_message_handler(self, handler: EventHandler) -> None:
        """Register the messages.upsert handler for every future connection."""
        self._message_handler = handler

    @property
    def current_handle(self) -> Optional[ConnectionHandle]:
        return self._handle

    @property
    def reconnect_task(self) -> Optional[asyncio.Task]:
        return self._reconnect_task

    @property
    def is_terminal(self) -> bool:
        return self.state == ConnectionState.CLOSED_TERMINAL

    async def connect(self) -> ConnectionHandle:
        """
        Open a session and attach event handlers.

        Returns:
            The new connection handle; it also becomes `current_handle`.
        """
        self.state = ConnectionState.CONNECTING
        handle = await self._establish()
        self._handle = handle

        async def on_update(update: dict[str, Any]) -> None:
            if handle is not self._handle:
                logger.debug("Ignoring connection.update from a replaced connection")
                return
            await self.on_connection_update(update)

        handle.on(CONNECTION_UPDATE, on_update)
        handle.on(CREDS_UPDATE, self.on_creds_update)
        if self._message_handler:
            handle.on(MESSAGES_UPSERT, self._message_handler)

        logger.info("Connecting to WhatsApp...")
        return handle

    async def _establish(self) -> ConnectionHandle:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._connect_retry_attempts),
            wait=self._connect_wait,
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                return await self.client.connect(self.config)

    async def on_connection_update(self, update: dict[str, Any]) -> None:
        """Handle a connection.update event from the current handle."""
        qr = update.get("qr")
        if qr:
            self._show_qr(qr)
            await self._notify("info", "pairing_required", "Scan the QR code in the terminal to link the bot")

        if update.get("connection") is None:
            return

        self.state = next_state(self.state, update)

        if self.state == ConnectionState.OPEN:
            self.policy.reset()
            logger.info("Connection is open! The DANUU-MD bot is now online.")

        elif self.state == ConnectionState.CONNECTING:
            logger.info("Connection state: connecting")

        elif self.state == ConnectionState.CLOSED_RECOVERABLE:
            code = disconnect_status_code(update)
            logger.warning(f"Connection closed (reason={code}). Reconnecting: True")
            self._schedule_reconnect()

        elif self.state == ConnectionState.CLOSED_TERMINAL:
            logger.error("Connection closed (logged out). Reconnecting: False")
            self._cancel_reconnect()
            await self._notify(
                "critical",
                "logged_out",
                "Session logged out - delete the auth state and scan a new QR code",
            )
            self._done.set()

    async def on_creds_update(self, creds: Any) -> None:
        """Persist credentials in event order."""
        if self._save_creds is None:
            return
        result = self._save_creds(creds)
        if inspect.isawaitable(result):
            await result

    def _cancel_reconnect(self) -> None:
        task = self._reconnect_task
        if task and not task.done() and task is not asyncio.current_task():
            task.cancel()

    def _schedule_reconnect(self) -> None:
        if self._stopping:
            return
        if self._reconnect_task and not self._reconnect_task.done():
            logger.debug("Reconnect already in progress")
            return
        self._reconnect_task = asyncio.create_task(self._reconnect(), name="reconnect")

    async def _reconnect(self) -> None:
        """Reconnect until a session is established or the policy gives up."""
        while not self._stopping and not self.is_terminal:
            try:
                delay = self.policy.next_delay()
            except ReconnectExhaustedError as e:
                self.state = ConnectionState.CLOSED_TERMINAL
                logger.error(f"Giving up on reconnecting: {e}")
                await self._notify("critical", "reconnect_exhausted", str(e))
                self._done.set()
                return

            await asyncio.sleep(delay)
            if self._stopping or self.is_terminal:
                return

            await close_handle(self._handle)
            try:
                await self.connect()
                return
            except Exception as e:
                self.state = ConnectionState.CLOSED_RECOVERABLE
                logger.error(f"Reconnect failed: {e}")

    async def run(self) -> ConnectionState:
        """
        Connect and supervise until the session ends.

        Returns:
            The final connection state.
        """
        await self.connect()
        await self._done.wait()
        return self.state

    async def stop(self) -> None:
        """Stop supervising and close the current connection."""
        self._stopping = True

        if self._reconnect_task and not self._reconnect_task.done():
            self._cancel_reconnect()
            try:
                await self._reconnect_task
            except asyncio.CancelledError:
                pass

        await close_handle(self._handle)
        self._done.set()
        logger.info("Session supervisor stopped")

    async def _notify(self, level: str, alert_type: str, message: str) -> None:
        if self.alerts:
            await getattr(self.alerts, level)(alert_type, message)

    def get_status(self) -> dict:
        return {
            "state": self.state.value,
            "reconnect": self.policy.get_status(),
        }
