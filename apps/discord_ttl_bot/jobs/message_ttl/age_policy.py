"""
Age checks for messages.

Discord only accepts bulk deletes for messages younger than 14 days, so every
message the sweep deletes is either bulk-deletable or has to go through the
single-message endpoint.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from apps.discord_ttl_bot.common.models import Message

# Discord's bulk deletion threshold is 14 days
BULK_DELETE_THRESHOLD_MILLIS: int = 1000 * 60 * 60 * 24 * 14


def is_older_than(message: Message, duration_millis: int, now: Optional[datetime] = None) -> bool:
    """Return True if the message is strictly older than duration_millis."""
    if now is None:
        now = datetime.now(timezone.utc)
    message_age = now - message.created_at
    return message_age > timedelta(milliseconds=duration_millis)


def is_bulk_deletable(message: Message, now: Optional[datetime] = None) -> bool:
    """Return True if Discord will still accept the message in a bulk delete."""
    return not is_older_than(message, BULK_DELETE_THRESHOLD_MILLIS, now)
