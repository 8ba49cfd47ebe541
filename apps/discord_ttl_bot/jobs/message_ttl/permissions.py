"""
Permission preflight for the message TTL sweep.

A channel is only swept if the bot can see it, read its history and manage its
messages. Text-in-voice channels require Connect permissions, too.
"""

import logging
from typing import AbstractSet, List, Optional

from apps.discord_ttl_bot.common.models import Capability, Channel, PermissionResult

logger = logging.getLogger(__name__)

REQUIRED_CAPABILITIES = (
    Capability.VIEW_CHANNEL,
    Capability.READ_MESSAGE_HISTORY,
    Capability.MANAGE_MESSAGES,
)


def required_capabilities(channel: Channel) -> List[Capability]:
    """Capabilities the bot needs in this channel, in reporting order."""
    required = list(REQUIRED_CAPABILITIES)
    if channel.kind.is_voice_based:
        required.append(Capability.CONNECT)
    return required


def check_channel_permissions(
    channel: Channel,
    capabilities: Optional[AbstractSet[Capability]],
) -> PermissionResult:
    """
    Check that the bot can read and delete messages in a channel.

    Args:
        channel: The channel about to be swept
        capabilities: The bot's effective permissions in the channel, or None
            if the bot has no member in the channel's guild

    Returns:
        PermissionResult with one reason per missing permission. Every reason
        is also logged as an error.
    """
    # No member means nothing can be verified, so every permission counts as missing
    granted = capabilities if capabilities is not None else frozenset()

    reasons: List[str] = []
    for capability in required_capabilities(channel):
        if capability in granted:
            continue
        if capability is Capability.CONNECT:
            reasons.append(f"Missing permission {capability.display_name} for voice channel {channel.name}")
        else:
            reasons.append(f"Missing permission {capability.display_name} for channel {channel.name}")

    for reason in reasons:
        logger.error(reason)

    return PermissionResult(allowed=not reasons, reasons=reasons)
