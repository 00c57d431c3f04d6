"""Like and report membership toggles.

A like set holds principal ids; a report map holds ``user_id -> reported_at``.
Toggling flips one principal's membership: insert when absent, remove when
present, so two toggles by the same principal restore the original state.
Resolving reports is not a toggle: it empties the map for everyone.

These functions are pure. The repository applies the same decision as a
targeted collection mutation so concurrent toggles by different principals
on one entity never overwrite each other.
"""

from collections.abc import Collection, Iterable, Mapping
from datetime import datetime
from enum import Enum


class ToggleAction(str, Enum):
    """Mutation a toggle resolves to."""

    ADD = "add"
    REMOVE = "remove"


class ReportState(str, Enum):
    """Report state of a post."""

    CLEAN = "clean"
    REPORTED = "reported"


def decide_toggle(members: Collection[str], principal_id: str) -> ToggleAction:
    """Decide whether a toggle inserts or removes ``principal_id``."""
    if principal_id in members:
        return ToggleAction.REMOVE
    return ToggleAction.ADD


def toggle_like(likes: Iterable[str], principal_id: str) -> frozenset[str]:
    """Return the like set after ``principal_id`` toggles its like."""
    current = frozenset(likes)
    if decide_toggle(current, principal_id) is ToggleAction.REMOVE:
        return current - {principal_id}
    return current | {principal_id}


def toggle_report(
    reports: Mapping[str, datetime],
    principal_id: str,
    now: datetime,
) -> dict[str, datetime]:
    """Return the report map after ``principal_id`` toggles its report.

    An inserted report is stamped with ``now``. The result is ordered by
    report time.
    """
    updated = dict(reports)
    if decide_toggle(updated, principal_id) is ToggleAction.REMOVE:
        del updated[principal_id]
    else:
        updated[principal_id] = now
    return dict(sorted(updated.items(), key=lambda item: item[1]))


def resolve_reports(reports: Mapping[str, datetime]) -> dict[str, datetime]:
    """Clear every report regardless of who filed it."""
    return {}


def report_state(reports: Mapping[str, datetime]) -> ReportState:
    """CLEAN when nobody currently reports the post, REPORTED otherwise."""
    return ReportState.REPORTED if reports else ReportState.CLEAN
