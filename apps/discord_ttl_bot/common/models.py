"""
Plain data records shared by the message TTL job and the Discord session.

These are snapshots of Discord state taken at fetch time. The job never
mutates them, it only asks the session to delete the messages they refer to.
"""

from __future__ import annotations

import math

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Sequence


class ChannelKind(Enum):
    """Kind of a Discord channel, as far as message deletion is concerned."""

    TEXT = "text"
    VOICE = "voice"  # Text-in-voice and stage channels
    DM = "dm"
    OTHER = "other"  # Categories, forums, and anything without a message history

    @property
    def is_text_based(self) -> bool:
        return self in (ChannelKind.TEXT, ChannelKind.VOICE)

    @property
    def is_voice_based(self) -> bool:
        return self is ChannelKind.VOICE

    @property
    def is_dm_based(self) -> bool:
        return self is ChannelKind.DM


class Capability(Enum):
    """Channel permissions the bot needs to read and delete messages."""

    VIEW_CHANNEL = "ViewChannel"
    READ_MESSAGE_HISTORY = "ReadMessageHistory"
    MANAGE_MESSAGES = "ManageMessages"
    CONNECT = "Connect"

    @property
    def display_name(self) -> str:
        return f"PermissionFlagsBits.{self.value}"


@dataclass(frozen=True)
class Channel:
    """Snapshot of a channel visible to the bot."""

    id: int
    name: str
    kind: ChannelKind
    guild_id: Optional[int] = None


@dataclass(frozen=True)
class Message:
    """
    Snapshot of a channel message.

    Attributes:
        id: Snowflake ID; ordering by ID is ordering by creation time
        author_name: Username of the author
        created_at: Timezone-aware creation timestamp
        deletable: Whether the bot was allowed to delete it when it was fetched
    """
    id: int
    author_name: str
    created_at: datetime
    deletable: bool = True


@dataclass(frozen=True)
class RetentionPolicy:
    """How long messages are kept before the sweep deletes them."""

    ttl_millis: int

    def __post_init__(self) -> None:
        if self.ttl_millis <= 0:
            raise ValueError(f"Time to live must be positive but was {self.ttl_millis}")

    @classmethod
    def from_seconds(cls, ttl_seconds: float) -> RetentionPolicy:
        if not math.isfinite(ttl_seconds):
            raise ValueError(f"Time to live must be a finite number of seconds but was {ttl_seconds}")
        return cls(ttl_millis=int(ttl_seconds * 1000))

    @property
    def ttl_days(self) -> float:
        return self.ttl_millis / 1000 / 60 / 60 / 24


@dataclass(frozen=True)
class SweepConfig:
    """Everything a single sweep needs to know. Channel names are not deduplicated."""

    channel_names: Sequence[str]
    retention: RetentionPolicy
    preview: bool = True


@dataclass
class PermissionResult:
    """Outcome of a permission preflight, with one reason per missing permission."""

    allowed: bool
    reasons: List[str] = field(default_factory=list)
