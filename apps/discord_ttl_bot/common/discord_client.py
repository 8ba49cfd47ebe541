"""
Discord session used by the message TTL job.

Wraps a logged-in discord.Client and turns discord.py objects into the plain
records in models.py. The job only talks to Discord through this session, so
tests can swap in any object with the same methods.
"""

from __future__ import annotations

import logging
from typing import AbstractSet, List, Optional, Protocol, Sequence

import discord

from apps.discord_ttl_bot.common.models import Capability, Channel, ChannelKind, Message

logger = logging.getLogger(__name__)

# Discord refuses to delete these system messages, whatever the bot's permissions
UNDELETABLE_MESSAGE_TYPES = frozenset({
    discord.MessageType.recipient_add,
    discord.MessageType.recipient_remove,
    discord.MessageType.call,
    discord.MessageType.channel_name_change,
    discord.MessageType.channel_icon_change,
    discord.MessageType.thread_starter_message,
})

# Discord accepts between 2 and 100 message IDs per bulk delete request
MAX_BULK_DELETE_COUNT = 100


class PlatformClient(Protocol):
    """Everything the message TTL job needs from Discord."""

    def list_channels(self) -> List[Channel]: ...

    def get_capabilities(self, channel: Channel) -> Optional[AbstractSet[Capability]]: ...

    async def fetch_messages(
        self, channel: Channel, limit: int, before: Optional[int] = None
    ) -> List[Message]: ...

    async def delete_message(self, channel: Channel, message: Message) -> None: ...

    async def bulk_delete_messages(self, channel: Channel, messages: Sequence[Message]) -> None: ...


def channel_kind(channel: object) -> ChannelKind:
    """Classify a discord.py channel object."""
    if isinstance(channel, (discord.DMChannel, discord.GroupChannel)):
        return ChannelKind.DM
    # StageChannel subclasses VocalGuildChannel, like VoiceChannel
    if isinstance(channel, (discord.VoiceChannel, discord.StageChannel)):
        return ChannelKind.VOICE
    if isinstance(channel, (discord.TextChannel, discord.Thread)):
        return ChannelKind.TEXT
    return ChannelKind.OTHER


def permissions_to_capabilities(permissions: discord.Permissions) -> frozenset[Capability]:
    """Map the discord.py permission flags the job cares about."""
    granted = set()
    if permissions.view_channel:
        granted.add(Capability.VIEW_CHANNEL)
    if permissions.read_message_history:
        granted.add(Capability.READ_MESSAGE_HISTORY)
    if permissions.manage_messages:
        granted.add(Capability.MANAGE_MESSAGES)
    if permissions.connect:
        granted.add(Capability.CONNECT)
    return frozenset(granted)


def to_channel(channel: discord.abc.GuildChannel) -> Channel:
    guild = getattr(channel, "guild", None)
    return Channel(
        id=channel.id,
        name=getattr(channel, "name", None) or str(channel.id),
        kind=channel_kind(channel),
        guild_id=guild.id if guild else None,
    )


def is_message_deletable(message: discord.Message, can_manage_messages: bool) -> bool:
    """
    Whether the bot may delete a message.

    System messages of some types can never be deleted. Everything else can be
    deleted by its author, or by anyone with Manage Messages.
    """
    if message.type in UNDELETABLE_MESSAGE_TYPES:
        return False
    me = message.guild.me if message.guild else None
    if me is not None and message.author.id == me.id:
        return True
    return can_manage_messages


class DiscordSession:
    """Platform client backed by a discord.py client that is already connected."""

    def __init__(self, client: discord.Client) -> None:
        self.client = client

    def list_channels(self) -> List[Channel]:
        """All channels visible to the bot, in cache order."""
        return [to_channel(channel) for channel in self.client.get_all_channels()]

    def _resolve(self, channel: Channel):
        resolved = self.client.get_channel(channel.id)
        if resolved is None:
            raise LookupError(f"Channel {channel.name} ({channel.id}) is no longer visible")
        return resolved

    def get_capabilities(self, channel: Channel) -> Optional[frozenset[Capability]]:
        """The bot's effective permissions in the channel, or None if it has no member there."""
        resolved = self._resolve(channel)
        guild = getattr(resolved, "guild", None)
        me = guild.me if guild else None
        if me is None:
            return None
        return permissions_to_capabilities(resolved.permissions_for(me))

    async def fetch_messages(
        self, channel: Channel, limit: int, before: Optional[int] = None
    ) -> List[Message]:
        """One page of messages, newest first."""
        resolved = self._resolve(channel)
        before_object = discord.Object(id=before) if before is not None else None

        me = resolved.guild.me if getattr(resolved, "guild", None) else None
        can_manage_messages = bool(me and resolved.permissions_for(me).manage_messages)

        page: List[Message] = []
        async for message in resolved.history(limit=limit, before=before_object):
            page.append(Message(
                id=message.id,
                author_name=message.author.name,
                created_at=message.created_at,
                deletable=is_message_deletable(message, can_manage_messages),
            ))
        return page

    async def delete_message(self, channel: Channel, message: Message) -> None:
        resolved = self._resolve(channel)
        await resolved.get_partial_message(message.id).delete()

    async def bulk_delete_messages(self, channel: Channel, messages: Sequence[Message]) -> None:
        """
        Delete up to 100 messages in one request.

        discord.py falls back to a single delete when given one message, since
        the bulk endpoint needs at least two.
        """
        if len(messages) > MAX_BULK_DELETE_COUNT:
            raise ValueError(
                f"Can only bulk delete {MAX_BULK_DELETE_COUNT} messages at a time, got {len(messages)}"
            )
        resolved = self._resolve(channel)
        await resolved.delete_messages([discord.Object(id=message.id) for message in messages])
