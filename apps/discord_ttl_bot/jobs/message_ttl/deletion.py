"""
Deletion of old messages.

Discord API only allows to bulk-delete messages that are younger than 14 days.
Older messages have to be deleted one request at a time, so old messages are
split into a bulk set and a single set before anything is deleted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple

from apps.discord_ttl_bot.common.discord_client import MAX_BULK_DELETE_COUNT, PlatformClient
from apps.discord_ttl_bot.common.logging import (
    format_message_block,
    format_timestamp,
    message_to_string,
)
from apps.discord_ttl_bot.common.models import Channel, Message
from apps.discord_ttl_bot.jobs.message_ttl.age_policy import is_bulk_deletable

logger = logging.getLogger(__name__)


@dataclass
class DeletionOutcome:
    """Counts for one channel. In a preview run these are what would have been deleted."""

    single_deleted: int = 0
    bulk_deleted: int = 0
    not_deletable: int = 0

    @property
    def total_deleted(self) -> int:
        return self.single_deleted + self.bulk_deleted


def partition_messages(
    messages: Sequence[Message],
    now: Optional[datetime] = None,
) -> Tuple[List[Message], List[Message]]:
    """
    Split messages into (bulk, single) sets, keeping their order.

    The same instant is used for every message so a message can't end up in
    both sets or in neither.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    bulk: List[Message] = []
    single: List[Message] = []
    for message in messages:
        if is_bulk_deletable(message, now):
            bulk.append(message)
        else:
            single.append(message)
    return bulk, single


async def delete_single_messages(
    client: PlatformClient,
    channel: Channel,
    messages: Sequence[Message],
    is_preview_run: bool,
) -> Tuple[int, int]:
    """
    Delete messages one by one, in the given order.

    Messages older than Discord's bulk message deletion age limit cannot be
    bulk deleted, so they go through here. Messages the bot can't delete are
    logged and skipped.

    Returns:
        (deleted, not_deletable) counts
    """
    deleted_message_count = 0
    not_deletable_count = 0
    for message in messages:
        if not message.deletable:
            logger.info(f"Not deletable: message {message_to_string(message)} from channel {channel.name}")
            not_deletable_count += 1
            continue

        logger.info(
            f"{format_timestamp()} - Deleting message ({deleted_message_count + 1} / {len(messages)}) "
            f"{message_to_string(message)} from channel {channel.name}"
        )
        if not is_preview_run:
            await client.delete_message(channel, message)
        deleted_message_count += 1

    return deleted_message_count, not_deletable_count


async def bulk_delete_messages(
    client: PlatformClient,
    channel: Channel,
    messages: Sequence[Message],
    is_preview_run: bool,
) -> int:
    """
    Delete messages with batched requests of up to 100 messages each.

    Only valid for messages younger than Discord's bulk deletion age limit;
    Discord rejects the whole request otherwise.
    """
    if not messages:
        return 0

    logger.info(
        f"Bulk deleting {len(messages)} messages from channel {channel.name}: \n"
        f"{format_message_block(messages)}"
    )

    if not is_preview_run:
        for start in range(0, len(messages), MAX_BULK_DELETE_COUNT):
            await client.bulk_delete_messages(channel, messages[start:start + MAX_BULK_DELETE_COUNT])

    return len(messages)


async def delete_messages(
    client: PlatformClient,
    channel: Channel,
    old_messages_oldest_first: Sequence[Message],
    is_preview_run: bool,
    now: Optional[datetime] = None,
) -> DeletionOutcome:
    """Delete old messages, single-delete-only ones first, then the bulk-deletable rest."""
    bulk, single = partition_messages(old_messages_oldest_first, now)
    outcome = DeletionOutcome()

    if single:
        outcome.single_deleted, outcome.not_deletable = await delete_single_messages(
            client, channel, single, is_preview_run
        )

    if bulk:
        outcome.bulk_deleted = await bulk_delete_messages(client, channel, bulk, is_preview_run)

    return outcome
