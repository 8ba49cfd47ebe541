"""
Paginated retrieval of a channel's complete message history.
"""

import logging
from typing import List, Optional, Set

from apps.discord_ttl_bot.common.discord_client import PlatformClient
from apps.discord_ttl_bot.common.models import Channel, Message

logger = logging.getLogger(__name__)

MAX_FETCH_MESSAGE_COUNT = 100


class PaginationLoopError(RuntimeError):
    """Raised when the same page of messages would be requested twice."""

    def __init__(self, channel: Channel, before: int) -> None:
        super().__init__(
            f"Attempt to request the same messages twice in channel {channel.name}, namely before {before}"
        )
        self.channel = channel
        self.before = before


async def fetch_all_messages(
    client: PlatformClient,
    channel: Channel,
    batch_size: int = MAX_FETCH_MESSAGE_COUNT,
) -> List[Message]:
    """
    Fetch every message in a channel, newest first.

    The newest message is fetched on its own and serves as the first cursor;
    each following page holds up to batch_size messages older than the cursor,
    and the oldest message of a page becomes the next cursor. An empty or
    short page ends the walk, so a channel of N messages takes
    ceil(N / batch_size) page fetches after the first one.

    Raises:
        PaginationLoopError: if a cursor comes up a second time, or a page
            holds a message that is not older than its cursor
    """
    logger.info(f"Fetching all messages in channel {channel.name}")

    newest = await client.fetch_messages(channel, limit=1)
    cursor: Optional[Message] = newest[0] if len(newest) == 1 else None
    if cursor is None:
        return []

    messages: List[Message] = [cursor]

    seen_before_values: Set[int] = set()
    while cursor is not None:
        before = cursor.id
        if before in seen_before_values:
            raise PaginationLoopError(channel, before)
        seen_before_values.add(before)

        logger.info(f"Fetching messages of channel {channel.name} before {before}, limit = {batch_size}")
        page = await client.fetch_messages(channel, limit=batch_size, before=before)
        # Every message on the page must be older than the cursor, or it was fetched already
        if any(message.id >= before for message in page):
            raise PaginationLoopError(channel, before)
        messages.extend(page)

        # A short page means the start of the channel has been reached
        cursor = page[-1] if len(page) == batch_size else None

    return messages
