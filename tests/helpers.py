"""
Test doubles and assertion helpers shared across the suite.
"""

from typing import Any
from unittest.mock import AsyncMock


class FakeHandle:
    """
    Connection handle that records sends and lets tests emit events.
    """

    def __init__(self):
        self.handlers: dict[str, list] = {}
        self.send_message = AsyncMock(return_value=None)
        self.read_messages = AsyncMock(return_value=None)
        self.download_media_message = AsyncMock(return_value=b"image-bytes")
        self.close = AsyncMock(return_value=None)

    def on(self, event: str, handler) -> None:
        self.handlers.setdefault(event, []).append(handler)

    async def emit(self, event: str, payload: Any) -> None:
        for handler in self.handlers.get(event, []):
            await handler(payload)


class FakeClient:
    """Protocol client whose connect() returns a new FakeHandle each time."""

    def __init__(self, failures: int = 0):
        self.handles: list[FakeHandle] = []
        self.configs: list = []
        self._failures = failures

    async def connect(self, config) -> FakeHandle:
        self.configs.append(config)
        if self._failures:
            self._failures -= 1
            raise ConnectionError("connection refused")
        handle = FakeHandle()
        self.handles.append(handle)
        return handle

    @property
    def connect_count(self) -> int:
        return len(self.configs)


def sent_payloads(handle) -> list[dict]:
    """All payloads passed to handle.send_message, in order."""
    return [c.args[1] for c in handle.send_message.await_args_list]


def sent_texts(handle) -> list[str]:
    return [p["text"] for p in sent_payloads(handle) if "text" in p]


def sent_reactions(handle) -> list[dict]:
    return [p["react"] for p in sent_payloads(handle) if "react" in p]
