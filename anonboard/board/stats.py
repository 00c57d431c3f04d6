"""Rolling-window moderation statistics.

All counts use a fixed lookback from the moment of the query (24 hours by
default), not calendar days. ``reports_today`` counts report *events*: every
report ever filed inside the window counts once, even if it was withdrawn or
resolved since, and regardless of when the reported post was created.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from .models import Category


DEFAULT_WINDOW = timedelta(hours=24)


@dataclass(frozen=True)
class ModerationStats:
    """Counts of board activity inside the moderation window."""

    tips_today: int
    suggestions_today: int
    comments_today: int
    reports_today: int


def window_start(now: datetime, window: timedelta = DEFAULT_WINDOW) -> datetime:
    """First instant inside the window (inclusive)."""
    return now - window


def window_days(now: datetime, window: timedelta = DEFAULT_WINDOW) -> list[str]:
    """UTC day buckets overlapping the window, oldest first."""
    first = window_start(now, window).astimezone(UTC).date()
    last = now.astimezone(UTC).date()
    return [
        (first + timedelta(days=offset)).isoformat()
        for offset in range((last - first).days + 1)
    ]


def count_since(timestamps: Iterable[datetime], since: datetime) -> int:
    """Count timestamps at or after ``since``."""
    return sum(1 for moment in timestamps if moment >= since)


def compute_stats(
    now: datetime,
    post_events: Iterable[tuple[Category, datetime]],
    comment_times: Iterable[datetime],
    report_times: Iterable[datetime],
    window: timedelta = DEFAULT_WINDOW,
) -> ModerationStats:
    """Aggregate raw activity streams into window counts.

    Args:
        now: Moment of the query
        post_events: ``(category, created_at)`` for candidate posts
        comment_times: ``created_at`` of candidate comments
        report_times: ``reported_at`` of every candidate report event,
            already unnested from the posts that received them
        window: Lookback length

    Returns:
        ModerationStats for ``[now - window, now]``
    """
    since = window_start(now, window)

    per_category = {category: 0 for category in Category}
    for category, created_at in post_events:
        if created_at >= since:
            per_category[Category(category)] += 1

    return ModerationStats(
        tips_today=per_category[Category.TIPS],
        suggestions_today=per_category[Category.SUGGESTIONS],
        comments_today=count_since(comment_times, since),
        reports_today=count_since(report_times, since),
    )
