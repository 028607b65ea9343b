"""
Centralized configuration for DANUU-MD Bot.

This module uses Pydantic Settings to load and validate environment variables.
All bot configuration is centralized here to avoid scattered config files.

Usage:
    from config import settings
    print(settings.react_emoji)

Environment Variables:
    Every field below maps to an upper-case environment variable
    (e.g. AUTO_REACT_ENABLED=false). Values may also come from a .env file.
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # =========================================================================
    # Protocol Client
    # =========================================================================
    # Factory for the chat protocol client, as "package.module:attribute".
    # The attribute is called with no arguments and must return an object
    # exposing connect(config) (see src.protocol.ProtocolClient).
    protocol_client: str = ""
    browser_name: str = "DANUU-MD"
    browser_agent: str = "Chrome"
    browser_version: str = "1.0.0"
    client_log_level: str = "silent"  # Log level handed to the protocol client

    # =========================================================================
    # Session Credentials
    # =========================================================================
    auth_state_dir: str = "auth_info_baileys"
    # Optional Fernet key; when set, saved credentials are encrypted at rest.
    # Generate with: python -c "from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())"
    auth_encryption_key: Optional[str] = None

    # =========================================================================
    # Automation Features
    # =========================================================================
    auto_status_view_enabled: bool = True
    auto_react_enabled: bool = True
    auto_reply_enabled: bool = True
    react_emoji: str = "👍"
    command_prefix: str = "!"
    # Reply with usage help when !sticker arrives without an image
    sticker_usage_hint: bool = False

    # =========================================================================
    # Reconnection
    # =========================================================================
    reconnect_max_attempts: int = 0  # 0 = unlimited
    reconnect_base_delay: float = 1.0  # seconds
    reconnect_max_delay: float = 60.0  # seconds
    reconnect_exponential_base: float = 2.0
    connect_retry_attempts: int = 3  # Retries of a single connect() call

    # =========================================================================
    # Operator Alerts (Telegram, optional)
    # =========================================================================
    telegram_bot_token: Optional[str] = None
    telegram_chat_id: Optional[str] = None
    min_telegram_alert_level: str = "WARNING"

    # =========================================================================
    # Logging
    # =========================================================================
    log_level: str = "INFO"


# Singleton instance for global settings
settings = Settings()
