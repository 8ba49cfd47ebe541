"""
Formatting helpers for sweep log lines.
"""

from datetime import datetime, timezone
from typing import Iterable, Optional

from apps.discord_ttl_bot.common.models import Message


def message_to_string(message: Message) -> str:
    """Describe a message as '<id> by <author> at <iso timestamp>'."""
    return f"{message.id} by {message.author_name} at {format_timestamp(message.created_at)}"


def format_timestamp(value: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-01-31T12:00:00.000Z."""
    if value is None:
        value = datetime.now(timezone.utc)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_message_block(messages: Iterable[Message], indent: str = "    ") -> str:
    """One message per line, indented, for multi-message log entries."""
    return "\n".join(f"{indent}{message_to_string(message)}" for message in messages)
