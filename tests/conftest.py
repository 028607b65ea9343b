"""
Pytest fixtures and configuration.

This module provides shared fixtures for all tests:
- A mock connection handle recording every send
- Raw message and messages.upsert event builders
- A fake protocol client that hands out fresh handles
- A zero-delay reconnect policy

Usage:
    async def test_something(mock_handle, make_event):
        # fixtures are automatically injected
        pass
"""

from typing import Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.reconnect import ReconnectPolicy
from tests.helpers import FakeClient, FakeHandle


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test requiring multiple components"
    )
    config.addinivalue_line(
        "markers",
        "slow: mark test as slow (>1s execution time)"
    )


# =============================================================================
# Connection Fixtures
# =============================================================================

@pytest.fixture
def mock_handle():
    """Provide a fresh FakeHandle."""
    return FakeHandle()


@pytest.fixture
def fake_client():
    """Provide a FakeClient that always connects."""
    return FakeClient()


@pytest.fixture
def instant_policy():
    """Reconnect policy with no delay and no attempt limit."""
    return ReconnectPolicy(max_attempts=0, base_delay=0, max_delay=0)


# =============================================================================
# Message Fixtures
# =============================================================================

@pytest.fixture
def make_message():
    """
    Build a raw message dictionary.

    Example:
        make_message("hello")
        make_message("!sticker", image=True)
        make_message("hi", jid="status@broadcast", participant="111@s.whatsapp.net")
    """
    def _make(
        text: Optional[str] = "hello",
        jid: str = "94770000000@s.whatsapp.net",
        from_me: bool = False,
        image: bool = False,
        extended: bool = False,
        participant: Optional[str] = None,
        msg_id: str = "MSG-1",
    ) -> dict:
        body: Optional[dict] = {}
        if image:
            body["image_message"] = {"mimetype": "image/jpeg", "caption": text or ""}
        elif extended:
            body["extended_text_message"] = {"text": text}
        elif text is not None:
            body["conversation"] = text
        else:
            body = None

        return {
            "key": {
                "remote_jid": jid,
                "from_me": from_me,
                "id": msg_id,
                "participant": participant,
            },
            "message": body,
        }
    return _make


@pytest.fixture
def make_event(make_message):
    """Build a messages.upsert event from texts or raw messages."""
    def _make(*messages, event_type: str = "notify") -> dict:
        raw = [m if isinstance(m, dict) else make_message(m) for m in messages]
        return {"type": event_type, "messages": raw}
    return _make


@pytest.fixture
def mock_alerts():
    """Provide mock AlertManager."""
    alerts = MagicMock()
    alerts.info = AsyncMock()
    alerts.warning = AsyncMock()
    alerts.error = AsyncMock()
    alerts.critical = AsyncMock()
    alerts.startup = AsyncMock()
    alerts.shutdown = AsyncMock()
    return alerts
