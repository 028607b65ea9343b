"""
Command Table - Fixed "!" commands and the quote bank.

Commands:
    !start   - Welcome text
    !ping    - "Pong!"
    !help    - Command list
    !info    - Bot description
    !sticker - Echo the attached image back as a sticker
    !quote   - Random quote from the quote bank

Matching is on the whole message, lower-cased. "!ping now" is not !ping.
"""

import logging
import random
from typing import TYPE_CHECKING, Awaitable, Callable, Optional, Sequence

from config.replies import (
    HELP_MESSAGE,
    INFO_MESSAGE,
    PONG_MESSAGE,
    QUOTES,
    START_MESSAGE,
    STICKER_USAGE_MESSAGE,
)

if TYPE_CHECKING:
    from src.models import InboundMessage
    from src.protocol import ConnectionHandle

logger = logging.getLogger(__name__)

CommandAction = Callable[["ConnectionHandle", "InboundMessage"], Awaitable[None]]


class QuoteBank:
    """Read-only quote list with uniform random selection."""

    def __init__(self, quotes: Sequence[str] = QUOTES, rng: Optional[random.Random] = None):
        if not quotes:
            raise ValueError("Quote bank needs at least one quote")
        self.quotes = tuple(quotes)
        self._rng = rng or random.Random()

    def pick(self) -> str:
        return self._rng.choice(self.quotes)

    def __len__(self) -> int:
        return len(self.quotes)


async def send_text(handle: "ConnectionHandle", jid: str, text: str) -> None:
    await handle.send_message(jid, {"text": text})


class CommandTable:
    """
    Maps exact lower-case triggers to actions.

    Triggers are disjoint, so at most one action runs per message.
    """

    def __init__(
        self,
        prefix: str = "!",
        quote_bank: Optional[QuoteBank] = None,
        sticker_usage_hint: bool = False,
    ) -> None:
        """
        Initialize the command table.

        Args:
            prefix: Command prefix character(s).
            quote_bank: Quotes for !quote. Defaults to the built-in bank.
            sticker_usage_hint: Reply with usage help when !sticker has no image.
        """
        self.prefix = prefix
        self.quote_bank = quote_bank or QuoteBank()
        self.sticker_usage_hint = sticker_usage_hint

        self._commands: dict[str, CommandAction] = {
            f"{prefix}start": self._cmd_start,
            f"{prefix}ping": self._cmd_ping,
            f"{prefix}help": self._cmd_help,
            f"{prefix}info": self._cmd_info,
            f"{prefix}sticker": self._cmd_sticker,
            f"{prefix}quote": self._cmd_quote,
        }

    @property
    def triggers(self) -> frozenset[str]:
        return frozenset(self._commands)

    def lookup(self, text: str) -> Optional[CommandAction]:
        """Return the action bound to text, or None."""
        return self._commands.get(text.lower())

    async def _cmd_start(self, handle: "ConnectionHandle", msg: "InboundMessage") -> None:
        await send_text(handle, msg.remote_id, START_MESSAGE)

    async def _cmd_ping(self, handle: "ConnectionHandle", msg: "InboundMessage") -> None:
        await send_text(handle, msg.remote_id, PONG_MESSAGE)

    async def _cmd_help(self, handle: "ConnectionHandle", msg: "InboundMessage") -> None:
        await send_text(handle, msg.remote_id, HELP_MESSAGE)

    async def _cmd_info(self, handle: "ConnectionHandle", msg: "InboundMessage") -> None:
        await send_text(handle, msg.remote_id, INFO_MESSAGE)

    async def _cmd_sticker(self, handle: "ConnectionHandle", msg: "InboundMessage") -> None:
        if not msg.has_image_attachment:
            logger.info(f"!sticker from {msg.remote_id} has no image attached")
            if self.sticker_usage_hint:
                await send_text(handle, msg.remote_id, STICKER_USAGE_MESSAGE)
            return

        media = await handle.download_media_message(msg.raw)
        await handle.send_message(msg.remote_id, {"sticker": media})
        logger.info(f"Sent sticker to {msg.remote_id} ({len(media)} bytes)")

    async def _cmd_quote(self, handle: "ConnectionHandle", msg: "InboundMessage") -> None:
        await send_text(handle, msg.remote_id, self.quote_bank.pick())
