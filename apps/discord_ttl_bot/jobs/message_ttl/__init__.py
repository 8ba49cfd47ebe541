"""
Message TTL job module.

Contains the sweep that deletes messages older than a time to live from
the configured channels, using bulk deletes where Discord allows them.
"""

from apps.discord_ttl_bot.jobs.message_ttl.history import PaginationLoopError
from apps.discord_ttl_bot.jobs.message_ttl.sweep_job import (
    ChannelSweepResult,
    SweepReport,
    run_sweep,
    sweep,
)

__all__ = [
    'PaginationLoopError',
    'ChannelSweepResult',
    'SweepReport',
    'run_sweep',
    'sweep',
]
