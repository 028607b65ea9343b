"""
Exception types for DANUU-MD Bot.

Hierarchy:
    BotError
    ├── MalformedMessageError     - raw message payload cannot be read
    ├── ReconnectExhaustedError   - reconnect policy ran out of attempts
    └── ProtocolClientLoadError   - PROTOCOL_CLIENT factory cannot be loaded
"""


class BotError(Exception):
    """Base class for all bot errors."""
    pass


class MalformedMessageError(BotError):
    """Raised when an inbound message payload lacks its key."""
    pass


class ReconnectExhaustedError(BotError):
    """Raised when the reconnect policy has no attempts left."""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(f"Reconnect policy exhausted after {attempts} attempts")


class ProtocolClientLoadError(BotError):
    """Raised when the configured protocol client factory cannot be loaded."""
    pass
