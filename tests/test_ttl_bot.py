"""Tests for the process entry point."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from apps.discord_ttl_bot import ttl_bot
from apps.discord_ttl_bot.bot_config import reset_bot_config


async def _never_ready():
    await asyncio.sleep(10)


@pytest.fixture
def env(monkeypatch):
    monkeypatch.setenv("DISCORD_BOT_TOKEN", "secret-token")
    monkeypatch.setenv("DEFAULT_MESSAGE_TTL", "3600")
    monkeypatch.delenv("DISCORD_TTL_CHANNEL_NAMES", raising=False)
    monkeypatch.delenv("DISCORD_TTL_PREVIEW", raising=False)
    monkeypatch.setattr("apps.discord_ttl_bot.bot_config.load_env_file", lambda: False)
    reset_bot_config()
    yield monkeypatch
    reset_bot_config()


class TestMain:
    def test_success(self, env):
        run_once = AsyncMock()
        env.setattr(ttl_bot, "run_once", run_once)

        assert ttl_bot.main(["--channel", "general"]) == 0

        token, sweep_config = run_once.await_args.args
        assert token == "secret-token"
        assert sweep_config.preview is True
        assert sweep_config.retention.ttl_millis == 3_600_000

    def test_invalid_config_exits_before_connecting(self, env):
        env.setenv("DEFAULT_MESSAGE_TTL", "-1")
        run_once = AsyncMock()
        env.setattr(ttl_bot, "run_once", run_once)

        assert ttl_bot.main([]) == 1
        run_once.assert_not_called()

    def test_infinite_ttl_override_exits_cleanly(self, env):
        run_once = AsyncMock()
        env.setattr(ttl_bot, "run_once", run_once)

        assert ttl_bot.main(["--ttl-seconds", "inf"]) == 1
        run_once.assert_not_called()

    def test_fatal_sweep_error(self, env):
        env.setattr(ttl_bot, "run_once", AsyncMock(side_effect=RuntimeError("boom")))
        assert ttl_bot.main([]) == 1


class TestWaitUntilReady:
    @pytest.mark.asyncio
    async def test_ready(self):
        client = MagicMock()
        client.wait_until_ready = AsyncMock()
        connect_task = asyncio.create_task(asyncio.sleep(10))
        try:
            await ttl_bot.wait_until_ready(client, connect_task)
        finally:
            connect_task.cancel()

    @pytest.mark.asyncio
    async def test_connection_error_is_raised(self):
        client = MagicMock()
        client.wait_until_ready = AsyncMock(side_effect=_never_ready)

        async def failing_connect():
            raise ConnectionResetError("gateway closed")

        with pytest.raises(ConnectionResetError):
            await ttl_bot.wait_until_ready(client, asyncio.create_task(failing_connect()))

    @pytest.mark.asyncio
    async def test_connection_closed_without_error(self):
        client = MagicMock()
        client.wait_until_ready = AsyncMock(side_effect=_never_ready)

        async def closed_connect():
            return None

        with pytest.raises(ConnectionError, match="before the client was ready"):
            await ttl_bot.wait_until_ready(client, asyncio.create_task(closed_connect()))


def test_intents_only_request_guilds():
    intents = ttl_bot.build_intents()
    assert intents.guilds is True
    assert intents.messages is False
