"""
Protocol Client - Interface to the external chat-protocol library.

The bot never speaks the chat protocol itself. Connection establishment,
encryption, credential format, QR pairing payloads and media transport all
belong to the protocol client. This module only describes the surface the
bot consumes, so any client exposing it can be plugged in.

Events:
    connection.update  {"connection": "connecting"|"open"|"close",
                        "last_disconnect": {"status_code": int, "error": ...},
                        "qr": str}
    creds.update       credentials mapping to persist
    messages.upsert    {"type": "notify"|"append", "messages": [raw message, ...]}

Configuration:
    PROTOCOL_CLIENT=package.module:factory
"""

import importlib
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, Protocol, runtime_checkable

from src.errors import ProtocolClientLoadError

logger = logging.getLogger(__name__)

CONNECTION_UPDATE = "connection.update"
CREDS_UPDATE = "creds.update"
MESSAGES_UPSERT = "messages.upsert"

EventHandler = Callable[[Any], Awaitable[None]]


@dataclass
class ClientConfig:
    """Options handed to ProtocolClient.connect()."""
    auth_state: dict[str, Any] = field(default_factory=dict)
    browser: tuple[str, str, str] = ("DANUU-MD", "Chrome", "1.0.0")
    log_level: str = "silent"


@runtime_checkable
class ConnectionHandle(Protocol):
    """A live session returned by ProtocolClient.connect()."""

    def on(self, event: str, handler: EventHandler) -> None:
        ...

    async def send_message(self, jid: str, payload: dict[str, Any]) -> Any:
        ...

    async def read_messages(self, keys: list[dict[str, Any]]) -> None:
        ...

    async def download_media_message(self, message: dict[str, Any]) -> bytes:
        ...


@runtime_checkable
class ProtocolClient(Protocol):
    """Factory for connection handles."""

    async def connect(self, config: ClientConfig) -> ConnectionHandle:
        ...


def load_protocol_client(path: str) -> ProtocolClient:
    """
    Instantiate the protocol client named by a "module:attribute" path.

    Args:
        path: Import path of a zero-argument factory (or class).

    Returns:
        The client instance.

    Raises:
        ProtocolClientLoadError: If the path is empty, malformed or cannot be imported.
    """
    if not path or ":" not in path:
        raise ProtocolClientLoadError(
            f"PROTOCOL_CLIENT must look like 'package.module:factory', got {path!r}"
        )

    module_name, _, attr = path.partition(":")
    try:
        module = importlib.import_module(module_name)
        factory = getattr(module, attr)
    except (ImportError, AttributeError) as e:
        raise ProtocolClientLoadError(f"Cannot load protocol client {path!r}: {e}") from e

    client = factory()
    if not isinstance(client, ProtocolClient):
        raise ProtocolClientLoadError(f"{path!r} did not produce an object with connect()")

    logger.info(f"Protocol client loaded: {path}")
    return client


async def close_handle(handle: Optional[ConnectionHandle]) -> None:
    """Close a handle if the client supports it."""
    close = getattr(handle, "close", None)
    if close is None:
        return
    try:
        await close()
    except Exception as e:
        logger.warning(f"Error closing connection handle: {e}")
