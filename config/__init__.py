"""
Configuration package for DANUU-MD Bot.

Modules:
    settings: Centralized configuration using Pydantic Settings
    replies: Canned reply texts and the quote bank
"""

from config.settings import Settings, settings

__all__ = ["Settings", "settings"]
