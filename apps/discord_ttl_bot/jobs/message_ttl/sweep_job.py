"""
One-shot sweep that deletes messages older than a time to live.

For every configured channel name the sweep checks the bot's permissions,
fetches the full channel history, keeps the messages older than the time to
live and hands them to the deletion module, oldest first. Channels are
processed one after another with a fixed pause in between to stay clear of
Discord's per-guild rate limits.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from apps.discord_ttl_bot.common.discord_client import PlatformClient
from apps.discord_ttl_bot.common.message_builder import build_sweep_summary
from apps.discord_ttl_bot.common.models import Channel, RetentionPolicy, SweepConfig
from apps.discord_ttl_bot.jobs.message_ttl.age_policy import is_older_than
from apps.discord_ttl_bot.jobs.message_ttl.deletion import delete_messages
from apps.discord_ttl_bot.jobs.message_ttl.history import fetch_all_messages
from apps.discord_ttl_bot.jobs.message_ttl.permissions import check_channel_permissions

logger = logging.getLogger(__name__)

SLEEP_TIME_IN_MILLIS = 1000


@dataclass
class ChannelSweepResult:
    """What happened in one channel. Counts are 'would be deleted' in a preview run."""

    channel_name: str
    channel_id: int
    messages_found: int = 0
    old_messages: int = 0
    single_deleted: int = 0
    bulk_deleted: int = 0
    not_deletable: int = 0
    skipped_reason: Optional[str] = None

    @property
    def skipped(self) -> bool:
        return self.skipped_reason is not None

    @property
    def total_deleted(self) -> int:
        return self.single_deleted + self.bulk_deleted


@dataclass
class SweepReport:
    """Accumulated counters of a sweep, in processing order."""

    is_preview_run: bool
    channels: List[ChannelSweepResult] = field(default_factory=list)

    @property
    def total_deleted(self) -> int:
        return sum(result.total_deleted for result in self.channels)

    @property
    def skipped_channels(self) -> List[ChannelSweepResult]:
        return [result for result in self.channels if result.skipped]


async def sleep(milliseconds: int = SLEEP_TIME_IN_MILLIS) -> None:
    logger.info(f"sleeping {milliseconds} milliseconds")
    await asyncio.sleep(milliseconds / 1000)


def resolve_channels(channels: Sequence[Channel], channel_names: Sequence[str]) -> List[Channel]:
    """
    Match configured names against the visible channels.

    Channels come back in listing order. A channel whose name is listed twice
    is returned twice in a row. Names without a visible text channel are
    dropped silently.
    """
    resolved: List[Channel] = []
    for channel in channels:
        if channel.kind.is_dm_based or not channel.kind.is_text_based:
            continue
        resolved.extend([channel] * channel_names.count(channel.name))
    return resolved


async def delete_old_messages_in_channel(
    client: PlatformClient,
    channel: Channel,
    time_to_live_in_millis: int,
    is_preview_run: bool,
) -> ChannelSweepResult:
    """Sweep a single channel. Skips the channel when its type or permissions don't allow it."""
    result = ChannelSweepResult(channel_name=channel.name, channel_id=channel.id)

    if channel.kind.is_dm_based:
        logger.error(f"Cannot delete old messages of DM channel {channel.id}")
        result.skipped_reason = "DM channel"
        return result

    if not channel.kind.is_text_based:
        logger.error(f"Cannot delete old messages of non-text-based channel {channel.id}")
        result.skipped_reason = "not text-based"
        return result

    permission_result = check_channel_permissions(channel, client.get_capabilities(channel))
    if not permission_result.allowed:
        result.skipped_reason = "missing permissions"
        return result

    logger.info(f"Deleting old messages in channel {channel.name}")

    messages = await fetch_all_messages(client, channel)
    result.messages_found = len(messages)
    logger.info(f"Found {len(messages)} messages in channel {channel.name}")

    now = datetime.now(timezone.utc)
    old_messages_oldest_first = [
        message for message in reversed(messages)
        if is_older_than(message, time_to_live_in_millis, now)
    ]
    result.old_messages = len(old_messages_oldest_first)
    logger.info(
        f"Found {len(old_messages_oldest_first)} messages older than {time_to_live_in_millis} millis "
        f"in channel {channel.name}"
    )

    outcome = await delete_messages(client, channel, old_messages_oldest_first, is_preview_run, now)
    result.single_deleted = outcome.single_deleted
    result.bulk_deleted = outcome.bulk_deleted
    result.not_deletable = outcome.not_deletable

    await sleep(SLEEP_TIME_IN_MILLIS)
    return result


async def run_sweep(client: PlatformClient, config: SweepConfig) -> SweepReport:
    """Sweep every configured channel. Any exception aborts the remaining channels."""
    time_to_live_in_millis = config.retention.ttl_millis
    channel_names = list(config.channel_names)

    logger.info(
        f"Deleting messages of channels: {','.join(channel_names)} that are older than "
        f"{time_to_live_in_millis} milliseconds ({config.retention.ttl_days} days)"
    )
    if config.preview:
        logger.info("This is a preview run. Messages will not really be deleted")
    else:
        logger.warning("WARNING: THIS IS NOT A PREVIEW RUN. MESSAGES WILL BE DELETED!")

    channels = resolve_channels(client.list_channels(), channel_names)
    report = SweepReport(is_preview_run=config.preview)

    for channel in channels:
        result = await delete_old_messages_in_channel(
            client, channel, time_to_live_in_millis, config.preview
        )
        report.channels.append(result)

        await sleep(SLEEP_TIME_IN_MILLIS)

    logger.info(build_sweep_summary(report))
    return report


async def sweep(
    client: PlatformClient,
    time_to_live_in_millis: int,
    channel_names: Sequence[str],
    is_preview_run: bool,
) -> SweepReport:
    """
    Delete messages older than time_to_live_in_millis in the named channels.

    Raises:
        ValueError: if the time to live is not positive, before any request is made
        PaginationLoopError: if a channel's history can't be paginated safely
    """
    config = SweepConfig(
        channel_names=list(channel_names),
        retention=RetentionPolicy(ttl_millis=time_to_live_in_millis),
        preview=is_preview_run,
    )
    return await run_sweep(client, config)
