"""
Summary table for the end of a sweep.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List

from tabulate import tabulate

if TYPE_CHECKING:
    from apps.discord_ttl_bot.jobs.message_ttl.sweep_job import SweepReport

SUMMARY_HEADERS = ["Channel", "Found", "Old", "Single", "Bulk", "Not deletable", "Status"]


def build_sweep_summary(report: SweepReport) -> str:
    """
    Build a monospace table with one row per processed channel.

    Args:
        report: The finished sweep

    Returns:
        Multi-line string with a title line and the table
    """
    mode = "preview run, nothing was deleted" if report.is_preview_run else "live run"
    title = f"Sweep summary ({mode}): {report.total_deleted} message(s) deleted"

    if not report.channels:
        return title + "\nNo matching channels were found"

    table_data: List[List] = []
    for result in report.channels:
        status = f"skipped ({result.skipped_reason})" if result.skipped else "done"
        table_data.append([
            f"#{result.channel_name}",
            result.messages_found,
            result.old_messages,
            result.single_deleted,
            result.bulk_deleted,
            result.not_deletable,
            status,
        ])

    table_str = tabulate(table_data, headers=SUMMARY_HEADERS, tablefmt="github")
    return f"{title}\n{table_str}"
