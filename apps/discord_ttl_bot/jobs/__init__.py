"""
Jobs module for the Discord TTL bot.

Contains the sweep that deletes messages older than the configured
time to live.
"""

from apps.discord_ttl_bot.jobs.message_ttl import run_sweep, sweep

__all__ = [
    'run_sweep',
    'sweep',
]
