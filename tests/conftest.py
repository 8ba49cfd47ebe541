"""Shared fixtures: an in-memory platform client and message factories."""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Dict, List, Optional
from unittest.mock import AsyncMock

import pytest

from apps.discord_ttl_bot.common.models import Capability, Channel, ChannelKind, Message
from apps.discord_ttl_bot.jobs.message_ttl import sweep_job

ALL_CAPABILITIES = frozenset(Capability)
DAY = timedelta(days=1)


def make_message(
    message_id: int,
    age: timedelta,
    *,
    now: Optional[datetime] = None,
    author: str = "alice",
    deletable: bool = True,
) -> Message:
    if now is None:
        now = datetime.now(timezone.utc)
    return Message(id=message_id, author_name=author, created_at=now - age, deletable=deletable)


def make_history(ages: List[timedelta], start_id: int = 1000) -> List[Message]:
    """Messages newest first, with IDs growing with creation time like Discord snowflakes."""
    now = datetime.now(timezone.utc)
    oldest_first = sorted(ages, reverse=True)
    messages = [
        make_message(start_id + index, age, now=now)
        for index, age in enumerate(oldest_first)
    ]
    return list(reversed(messages))


class FakePlatformClient:
    """Platform client that serves pages from memory and records every call."""

    def __init__(self) -> None:
        self.channels: List[Channel] = []
        self.capabilities: Dict[int, Optional[frozenset]] = {}
        self.histories: Dict[int, List[Message]] = {}
        self.fetch_calls: List[tuple] = []
        self.deleted: List[tuple] = []
        self.bulk_deleted: List[tuple] = []

    def add_channel(
        self,
        channel_id: int,
        name: str,
        kind: ChannelKind = ChannelKind.TEXT,
        messages: Optional[List[Message]] = None,
        capabilities: Optional[frozenset] = ALL_CAPABILITIES,
    ) -> Channel:
        channel = Channel(id=channel_id, name=name, kind=kind, guild_id=1)
        self.channels.append(channel)
        self.capabilities[channel_id] = capabilities
        self.histories[channel_id] = list(messages or [])
        return channel

    def list_channels(self) -> List[Channel]:
        return list(self.channels)

    def get_capabilities(self, channel: Channel):
        return self.capabilities[channel.id]

    async def fetch_messages(self, channel: Channel, limit: int, before: Optional[int] = None) -> List[Message]:
        self.fetch_calls.append((channel.id, limit, before))
        history = self.histories[channel.id]
        if before is not None:
            history = [message for message in history if message.id < before]
        return history[:limit]

    async def delete_message(self, channel: Channel, message: Message) -> None:
        self.deleted.append((channel.id, message.id))

    async def bulk_delete_messages(self, channel: Channel, messages) -> None:
        self.bulk_deleted.append((channel.id, [message.id for message in messages]))

    @property
    def delete_call_count(self) -> int:
        return len(self.deleted) + len(self.bulk_deleted)


@pytest.fixture
def platform() -> FakePlatformClient:
    return FakePlatformClient()


@pytest.fixture
def fake_sleep(monkeypatch) -> AsyncMock:
    """Replace the sweep's pauses with a mock so tests don't wait."""
    sleep_mock = AsyncMock()
    monkeypatch.setattr(sweep_job, "asyncio", SimpleNamespace(sleep=sleep_mock))
    return sleep_mock
