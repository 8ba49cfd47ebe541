"""
Discord TTL bot configuration from environment variables.
"""

from __future__ import annotations

import logging
import os

from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from apps.discord_ttl_bot.common.models import RetentionPolicy

logger = logging.getLogger(__name__)

APPS_DIR = Path(__file__).parent.parent
ROOT_DIR = APPS_DIR.parent
ENV_FILE = ROOT_DIR / ".env"

DEFAULT_CHANNEL_NAMES = ["general"]
FALSE_VALUES = {"false", "0", "no", "off"}


def load_env_file(env_path: Path = ENV_FILE) -> bool:
    """Load a .env file without overriding variables that are already set."""
    if not env_path.exists():
        logger.info("No .env file found")
        return False
    load_dotenv(dotenv_path=env_path, override=False)
    logger.info(f"Loaded .env from {env_path}")
    return True


def parse_channel_names(value: Optional[str]) -> List[str]:
    """Split a comma-separated channel list. Order and duplicates are kept."""
    if not value:
        return list(DEFAULT_CHANNEL_NAMES)
    names = [name.strip().lstrip("#") for name in value.split(",")]
    return [name for name in names if name]


def parse_bool(value: Optional[str], default: bool) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() not in FALSE_VALUES


class DiscordTTLConfig:
    """Discord TTL bot settings loaded from environment variables."""

    def __init__(self) -> None:
        self.token: Optional[str] = os.getenv("DISCORD_BOT_TOKEN")

        if not self.token:
            raise ValueError("DISCORD_BOT_TOKEN environment variable is required")

        ttl_seconds_str = os.getenv("DEFAULT_MESSAGE_TTL")
        if not ttl_seconds_str:
            raise ValueError("DEFAULT_MESSAGE_TTL environment variable is required")
        try:
            ttl_seconds = float(ttl_seconds_str)
        except ValueError:
            raise ValueError(f"DEFAULT_MESSAGE_TTL must be a number of seconds but was {ttl_seconds_str!r}")

        # Raises for a non-positive time to live, before anything connects to Discord
        self.retention: RetentionPolicy = RetentionPolicy.from_seconds(ttl_seconds)

        self.channel_names: List[str] = parse_channel_names(os.getenv("DISCORD_TTL_CHANNEL_NAMES"))

        # Preview unless explicitly turned off
        self.is_preview_run: bool = parse_bool(os.getenv("DISCORD_TTL_PREVIEW"), default=True)

    def __repr__(self) -> str:
        return (
            f"DiscordTTLConfig("
            f"token=***, "
            f"ttl_millis={self.retention.ttl_millis}, "
            f"channel_names={self.channel_names}, "
            f"is_preview_run={self.is_preview_run})"
        )


_ttl_config: Optional[DiscordTTLConfig] = None


def get_bot_config() -> DiscordTTLConfig:
    """Get or create the singleton config instance."""
    global _ttl_config
    if _ttl_config is None:
        load_env_file()
        _ttl_config = DiscordTTLConfig()
    return _ttl_config


def reset_bot_config() -> None:
    """Forget the cached config so the next call re-reads the environment."""
    global _ttl_config
    _ttl_config = None
