"""
Message Dispatcher - Routes inbound messages to reactions, replies and commands.

Flow (per message in a messages.upsert batch):
    ┌─────────────────────────────────────────────────────────────┐
    │  Raw message → InboundMessage (malformed → skip)            │
    │  ↓                                                          │
    │  Sent by us?            → ignore                            │
    │  Status broadcast?      → mark as read, stop                │
    │  No body / not notify?  → ignore                            │
    │  ↓                                                          │
    │  Rules, in order (each fires independently):               │
    │    auto-react   text does not start with "!"               │
    │    auto-reply   "hello" / "hi"                             │
    │    command      !start !ping !help !info !sticker !quote   │
    └─────────────────────────────────────────────────────────────┘

Auto-react and auto-reply are not exclusive: "hi" gets a 👍 reaction and
a greeting. Commands never get a reaction.

The dispatcher keeps no conversation state. It fetches the connection
handle through a getter on every message, so sends after a reconnect go to
the new session.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from config import settings
from config.replies import GREETING_HELLO, GREETING_HI
from src.commands import CommandTable, send_text
from src.errors import MalformedMessageError
from src.models import InboundMessage
from src.protocol import ConnectionHandle

logger = logging.getLogger(__name__)

NOTIFY = "notify"

AUTO_REPLIES = {
    "hello": GREETING_HELLO,
    "hi": GREETING_HI,
}


@dataclass(frozen=True)
class Rule:
    """A (predicate, action) pair evaluated for every dispatchable message."""
    name: str
    predicate: Callable[[InboundMessage], bool]
    action: Callable[[ConnectionHandle, InboundMessage], Awaitable[None]]


class MessageDispatcher:
    """
    Handles messages.upsert events from the protocol client.

    Every message in a batch is processed, in order. Messages from the
    same conversation are handled one at a time.
    """

    def __init__(
        self,
        get_handle: Callable[[], Optional[ConnectionHandle]],
        commands: Optional[CommandTable] = None,
        react_emoji: Optional[str] = None,
        auto_react: Optional[bool] = None,
        auto_reply: Optional[bool] = None,
        auto_status_view: Optional[bool] = None,
    ) -> None:
        """
        Initialize the dispatcher.

        Args:
            get_handle: Returns the current connection handle.
            commands: Command table. Defaults to one built from settings.
            react_emoji: Reaction emoji. Defaults to config value.
            auto_react: Enable auto-react. Defaults to config value.
            auto_reply: Enable auto-reply. Defaults to config value.
            auto_status_view: Enable status auto-view. Defaults to config value.
        """
        self._get_handle = get_handle
        self.commands = commands or CommandTable(
            prefix=settings.command_prefix,
            sticker_usage_hint=settings.sticker_usage_hint,
        )
        self.react_emoji = react_emoji or settings.react_emoji
        self.auto_react = settings.auto_react_enabled if auto_react is None else auto_react
        self.auto_reply = settings.auto_reply_enabled if auto_reply is None else auto_reply
        self.auto_status_view = (
            settings.auto_status_view_enabled if auto_status_view is None else auto_status_view
        )

        self.rules: list[Rule] = self._build_rules()
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    def _build_rules(self) -> list[Rule]:
        rules = []
        if self.auto_react:
            rules.append(Rule("auto_react", self._should_react, self._react))
        if self.auto_reply:
            rules.append(Rule(
                "auto_reply",
                lambda msg: msg.normalized_text in AUTO_REPLIES,
                self._auto_reply,
            ))
        rules.append(Rule(
            "command",
            lambda msg: self.commands.lookup(msg.text) is not None,
            self._run_command,
        ))
        return rules

    async def handle(self, event: dict[str, Any]) -> None:
        """
        Handle one messages.upsert event.

        Args:
            event: {"type": "notify"|..., "messages": [raw message, ...]}
        """
        event_type = event.get("type")
        for raw in event.get("messages") or []:
            await self.handle_message(raw, event_type)

    async def handle_message(self, raw: Any, event_type: Optional[str]) -> None:
        """Handle a single raw message. Never raises on bad input or send failures."""
        try:
            msg = InboundMessage.from_raw(raw)
        except MalformedMessageError as e:
            logger.debug(f"Skipping malformed message: {e}")
            return
        except Exception as e:
            logger.error(f"Skipping message that could not be parsed: {e}")
            return

        if msg.sender_is_self:
            return

        async with self._conversation(msg.remote_id):
            try:
                await self._dispatch(msg, event_type)
            except Exception as e:
                logger.error(f"Failed to handle message from {msg.remote_id}: {e}")

    @asynccontextmanager
    async def _conversation(self, jid: str):
        """Serialize messages per conversation; the lock is dropped once unused."""
        lock = self._locks.get(jid)
        if lock is None:
            lock = self._locks[jid] = asyncio.Lock()
        self._lock_users[jid] = self._lock_users.get(jid, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[jid] -= 1
            if not self._lock_users[jid]:
                del self._lock_users[jid]
                del self._locks[jid]

    async def _dispatch(self, msg: InboundMessage, event_type: Optional[str]) -> None:
        handle = self._get_handle()
        if handle is None:
            logger.warning(f"No open connection, dropping message from {msg.remote_id}")
            return

        if msg.is_status_broadcast:
            await self._view_status(handle, msg)
            return

        if not msg.has_payload or event_type != NOTIFY:
            return

        logger.info(f"Received a message from {msg.remote_id}: {msg.text}")

        for rule in self.rules:
            if rule.predicate(msg):
                logger.debug(f"Rule '{rule.name}' matched message from {msg.remote_id}")
                await rule.action(handle, msg)

    async def _view_status(self, handle: ConnectionHandle, msg: InboundMessage) -> None:
        if not self.auto_status_view:
            return
        logger.info(
            f"New status update from {msg.participant or msg.remote_id}, auto-viewing..."
        )
        await handle.read_messages([msg.key.to_dict()])

    def _should_react(self, msg: InboundMessage) -> bool:
        return (
            not msg.normalized_text.startswith(self.commands.prefix)
            and not msg.is_status_broadcast
        )

    async def _react(self, handle: ConnectionHandle, msg: InboundMessage) -> None:
        await handle.send_message(msg.remote_id, {
            "react": {"text": self.react_emoji, "key": msg.key.to_dict()},
        })

    async def _auto_reply(self, handle: ConnectionHandle, msg: InboundMessage) -> None:
        await send_text(handle, msg.remote_id, AUTO_REPLIES[msg.normalized_text])

    async def _run_command(self, handle: ConnectionHandle, msg: InboundMessage) -> None:
        action = self.commands.lookup(msg.text)
        logger.info(f"Command {msg.normalized_text} from {msg.remote_id}")
        await action(handle, msg)
