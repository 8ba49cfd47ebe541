"""
Discord TTL bot entry point: log in, delete old messages, log out.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

import discord

from apps.discord_ttl_bot.bot_config import DiscordTTLConfig, get_bot_config
from apps.discord_ttl_bot.common.discord_client import DiscordSession
from apps.discord_ttl_bot.common.models import RetentionPolicy, SweepConfig
from apps.discord_ttl_bot.jobs.message_ttl import SweepReport, run_sweep

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def build_sweep_config(bot_config: DiscordTTLConfig, args: argparse.Namespace) -> SweepConfig:
    """Combine environment settings with command line overrides."""
    retention = bot_config.retention
    if args.ttl_seconds is not None:
        retention = RetentionPolicy.from_seconds(args.ttl_seconds)

    channel_names = args.channels if args.channels else bot_config.channel_names

    is_preview_run = bot_config.is_preview_run
    if args.preview is not None:
        is_preview_run = args.preview

    return SweepConfig(channel_names=channel_names, retention=retention, preview=is_preview_run)


def build_intents() -> discord.Intents:
    """The sweep only needs the guild and channel cache."""
    intents = discord.Intents.none()
    intents.guilds = True
    return intents


async def wait_until_ready(client: discord.Client, connect_task: asyncio.Task) -> None:
    """Wait for the ready event, failing if the gateway connection ends first."""
    ready_task = asyncio.create_task(client.wait_until_ready())
    done, _ = await asyncio.wait({ready_task, connect_task}, return_when=asyncio.FIRST_COMPLETED)
    if ready_task in done:
        return
    ready_task.cancel()
    # Re-raises the connection error, if there was one
    connect_task.result()
    raise ConnectionError("Discord connection closed before the client was ready")


async def run_once(token: str, sweep_config: SweepConfig) -> SweepReport:
    """Log in, wait for the channel cache, sweep, and close the connection."""
    client = discord.Client(intents=build_intents())
    async with client:
        await client.login(token)
        connect_task = asyncio.create_task(client.connect(reconnect=False))
        try:
            await wait_until_ready(client, connect_task)
            logger.info("Discord TTL is now running!")
            report = await run_sweep(DiscordSession(client), sweep_config)
        finally:
            await client.close()
            await connect_task
    logger.info("Discord TTL has finished")
    return report


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Delete Discord messages older than a time to live",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
  DISCORD_BOT_TOKEN           Bot token (required)
  DEFAULT_MESSAGE_TTL         Time to live in seconds (required, --ttl-seconds overrides it)
  DISCORD_TTL_CHANNEL_NAMES   Comma-separated channel names (default: general)
  DISCORD_TTL_PREVIEW         Set to false to really delete messages (default: true)
        """,
    )

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--preview",
        dest="preview",
        action="store_const",
        const=True,
        default=None,
        help="Only log what would be deleted. Default: taken from DISCORD_TTL_PREVIEW."
    )
    mode.add_argument(
        "--live",
        dest="preview",
        action="store_const",
        const=False,
        help="Really delete messages."
    )

    parser.add_argument(
        "--channel",
        dest="channels",
        action="append",
        metavar="NAME",
        help="Channel name to sweep, may be given several times. Default: taken from DISCORD_TTL_CHANNEL_NAMES."
    )
    parser.add_argument(
        "--ttl-seconds",
        type=float,
        default=None,
        help="Time to live in seconds. Default: taken from DEFAULT_MESSAGE_TTL."
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Run a single sweep. Returns the process exit code."""
    configure_logging()
    args = parse_args(argv)

    try:
        bot_config = get_bot_config()
        sweep_config = build_sweep_config(bot_config, args)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    logger.info(f"Starting Discord TTL with {bot_config!r}")
    try:
        asyncio.run(run_once(bot_config.token, sweep_config))
    except Exception as e:
        logger.error(f"Discord TTL failed: {e}", exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
