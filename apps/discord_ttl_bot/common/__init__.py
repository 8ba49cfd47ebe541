"""
Common utilities module for the Discord TTL bot.

This module provides centralized access to shared functionality:
- Plain records for channels, messages and permissions
- The Discord session used by the sweep
- Log line formatting
"""

from apps.discord_ttl_bot.common.models import (
    Capability,
    Channel,
    ChannelKind,
    Message,
    PermissionResult,
    RetentionPolicy,
    SweepConfig,
)
from apps.discord_ttl_bot.common.discord_client import (
    DiscordSession,
    PlatformClient,
)
from apps.discord_ttl_bot.common.logging import message_to_string

__all__ = [
    'Capability',
    'Channel',
    'ChannelKind',
    'Message',
    'PermissionResult',
    'RetentionPolicy',
    'SweepConfig',
    'DiscordSession',
    'PlatformClient',
    'message_to_string',
]
