"""Tests for like/report toggles."""

from datetime import UTC, datetime, timedelta

import pytest

from anonboard.board.ledger import (
    ReportState,
    ToggleAction,
    decide_toggle,
    report_state,
    resolve_reports,
    toggle_like,
    toggle_report,
)


T0 = datetime(2025, 3, 1, 9, 0, tzinfo=UTC)


class TestDecideToggle:
    """Tests for decide_toggle."""

    def test_absent_member_is_added(self) -> None:
        assert decide_toggle(frozenset({"b"}), "a") is ToggleAction.ADD

    def test_present_member_is_removed(self) -> None:
        assert decide_toggle({"a": T0}, "a") is ToggleAction.REMOVE


class TestToggleLike:
    """Tests for toggle_like."""

    def test_adds_like(self) -> None:
        assert toggle_like(frozenset(), "a") == frozenset({"a"})

    def test_removes_like(self) -> None:
        assert toggle_like(frozenset({"a", "b"}), "a") == frozenset({"b"})

    @pytest.mark.parametrize(
        "likes",
        [frozenset(), frozenset({"a"}), frozenset({"b", "c"})],
    )
    def test_double_toggle_restores_state(self, likes: frozenset[str]) -> None:
        """Toggling twice for the same principal is a no-op."""
        assert toggle_like(toggle_like(likes, "a"), "a") == likes

    def test_does_not_mutate_input(self) -> None:
        likes = {"a"}
        toggle_like(likes, "b")
        assert likes == {"a"}


class TestToggleReport:
    """Tests for toggle_report."""

    def test_report_is_stamped(self) -> None:
        assert toggle_report({}, "b", T0) == {"b": T0}

    def test_second_toggle_withdraws(self) -> None:
        reports = toggle_report({}, "b", T0)
        assert toggle_report(reports, "b", T0 + timedelta(hours=1)) == {}

    def test_one_entry_per_principal(self) -> None:
        """Any toggle sequence leaves at most one entry per user."""
        reports: dict[str, datetime] = {}
        for offset, user in enumerate(["b", "c", "b", "b", "c", "d"]):
            reports = toggle_report(reports, user, T0 + timedelta(minutes=offset))
        assert sorted(reports) == ["b", "d"]
        assert reports["b"] == T0 + timedelta(minutes=3)
        assert len(reports) == len(set(reports))

    def test_entries_ordered_by_time(self) -> None:
        reports = {"late": T0 + timedelta(hours=2)}
        reports = toggle_report(reports, "early", T0)
        assert list(reports) == ["early", "late"]


class TestResolve:
    """Tests for resolve_reports and report_state."""

    @pytest.mark.parametrize(
        "reports",
        [{}, {"b": T0}, {"b": T0, "c": T0 + timedelta(hours=1)}],
    )
    def test_resolve_always_empties(self, reports: dict[str, datetime]) -> None:
        assert resolve_reports(reports) == {}

    def test_state(self) -> None:
        assert report_state({}) is ReportState.CLEAN
        assert report_state({"b": T0}) is ReportState.REPORTED
