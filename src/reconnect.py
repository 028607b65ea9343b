"""
Reconnect Policy - Backoff schedule for session reconnects.

The supervisor asks the policy for a delay before every reconnect. The
policy counts attempts since the last successful open and refuses once
the limit is reached.

Delay formula: min(base_delay * (exponential_base ** attempt), max_delay)

Example delays (base=1, exponential_base=2, max=60):
    Attempt 1: 1s
    Attempt 2: 2s
    Attempt 3: 4s
    ...
    Attempt 7+: 60s

Usage:
    policy = ReconnectPolicy(max_attempts=10, base_delay=1, max_delay=60)

    delay = policy.next_delay()   # raises ReconnectExhaustedError when done
    await asyncio.sleep(delay)
    ...
    policy.reset()                # after the connection opens
"""

import logging
from typing import TYPE_CHECKING

from src.errors import ReconnectExhaustedError

if TYPE_CHECKING:
    from config.settings import Settings

logger = logging.getLogger(__name__)


class ReconnectPolicy:
    """Exponential backoff with an optional attempt limit."""

    def __init__(
        self,
        max_attempts: int = 0,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
        exponential_base: float = 2.0,
    ):
        """
        Initialize reconnect policy.

        Args:
            max_attempts: Reconnects allowed between successful opens. 0 = unlimited.
            base_delay: Delay before the first reconnect, in seconds.
            max_delay: Upper bound for any delay, in seconds.
            exponential_base: Growth factor between attempts.
        """
        if max_attempts < 0:
            raise ValueError("max_attempts must be >= 0")

        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.attempts = 0

    @classmethod
    def from_settings(cls, settings: "Settings") -> "ReconnectPolicy":
        return cls(
            max_attempts=settings.reconnect_max_attempts,
            base_delay=settings.reconnect_base_delay,
            max_delay=settings.reconnect_max_delay,
            exponential_base=settings.reconnect_exponential_base,
        )

    @property
    def exhausted(self) -> bool:
        return bool(self.max_attempts) and self.attempts >= self.max_attempts

    def next_delay(self) -> float:
        """
        Consume one attempt and return how long to wait before it.

        Raises:
            ReconnectExhaustedError: If no attempts remain.
        """
        if self.exhausted:
            raise ReconnectExhaustedError(self.attempts)

        delay = min(
            self.base_delay * (self.exponential_base ** self.attempts),
            self.max_delay,
        )
        self.attempts += 1

        limit = self.max_attempts or "∞"
        logger.info(f"Reconnect attempt {self.attempts}/{limit} in {delay:.1f}s")
        return delay

    def reset(self) -> None:
        """Forget previous attempts (call once the session is open)."""
        if self.attempts:
            logger.debug(f"Reconnect policy reset after {self.attempts} attempts")
        self.attempts = 0

    def get_status(self) -> dict:
        return {
            "attempts": self.attempts,
            "max_attempts": self.max_attempts,
            "exhausted": self.exhausted,
        }
