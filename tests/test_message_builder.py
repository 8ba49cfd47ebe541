"""Tests for the sweep summary table."""

from apps.discord_ttl_bot.common.message_builder import build_sweep_summary
from apps.discord_ttl_bot.jobs.message_ttl.sweep_job import ChannelSweepResult, SweepReport


class TestBuildSweepSummary:
    def test_rows_per_channel(self):
        report = SweepReport(is_preview_run=False, channels=[
            ChannelSweepResult("general", 1, messages_found=10, old_messages=4, single_deleted=1, bulk_deleted=3),
            ChannelSweepResult("locked", 2, skipped_reason="missing permissions"),
        ])

        summary = build_sweep_summary(report)
        lines = summary.splitlines()

        assert lines[0] == "Sweep summary (live run): 4 message(s) deleted"
        assert "#general" in summary
        assert "skipped (missing permissions)" in summary
        # Title, header, separator and one row per channel
        assert len(lines) == 5

    def test_preview_and_empty(self):
        summary = build_sweep_summary(SweepReport(is_preview_run=True))
        assert "preview run" in summary
        assert "No matching channels were found" in summary
