"""Tests for moderation window statistics."""

from datetime import UTC, datetime, timedelta

from anonboard.board.models import Category
from anonboard.board.stats import (
    ModerationStats,
    compute_stats,
    count_since,
    window_days,
    window_start,
)


NOW = datetime(2025, 3, 2, 6, 0, tzinfo=UTC)


def hours_ago(hours: float) -> datetime:
    return NOW - timedelta(hours=hours)


class TestWindow:
    """Tests for window helpers."""

    def test_window_start(self) -> None:
        assert window_start(NOW) == hours_ago(24)

    def test_window_days_spans_both_dates(self) -> None:
        assert window_days(NOW) == ["2025-03-01", "2025-03-02"]

    def test_window_days_at_midnight(self) -> None:
        midnight = datetime(2025, 3, 2, tzinfo=UTC)
        assert window_days(midnight) == ["2025-03-01", "2025-03-02"]

    def test_window_days_wide_window(self) -> None:
        assert window_days(NOW, timedelta(hours=72)) == [
            "2025-02-27",
            "2025-02-28",
            "2025-03-01",
            "2025-03-02",
        ]

    def test_count_since_boundary_is_inclusive(self) -> None:
        since = hours_ago(24)
        assert count_since([since, hours_ago(25), hours_ago(1)], since) == 2


class TestComputeStats:
    """Tests for compute_stats."""

    def test_empty(self) -> None:
        assert compute_stats(NOW, [], [], []) == ModerationStats(0, 0, 0, 0)

    def test_counts_per_category(self) -> None:
        stats = compute_stats(
            NOW,
            post_events=[
                (Category.TIPS, hours_ago(1)),
                (Category.TIPS, hours_ago(30)),
                (Category.SUGGESTIONS, hours_ago(2)),
                ("suggestions", hours_ago(3)),
            ],
            comment_times=[hours_ago(5), hours_ago(48)],
            report_times=[],
        )
        assert stats.tips_today == 1
        assert stats.suggestions_today == 2
        assert stats.comments_today == 1

    def test_report_23h_counts_and_25h_does_not(self) -> None:
        """Report age decides, not the age of the reported post."""
        stats = compute_stats(
            NOW,
            post_events=[(Category.TIPS, hours_ago(48))],
            comment_times=[],
            report_times=[hours_ago(23), hours_ago(25)],
        )
        assert stats.reports_today == 1
        assert stats.tips_today == 0

    def test_custom_window(self) -> None:
        stats = compute_stats(
            NOW,
            post_events=[],
            comment_times=[hours_ago(2), hours_ago(6)],
            report_times=[],
            window=timedelta(hours=4),
        )
        assert stats.comments_today == 1
