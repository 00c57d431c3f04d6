"""Tests for the board access policy."""

import pytest

from anonboard.auth.permissions import (
    Role,
    can_delete,
    can_edit,
    can_report,
    can_resolve_reports,
    is_owner,
    parse_role,
)
from anonboard.auth.schemas import Principal


AUTHOR_ID = "author-1"
AUTHOR = Principal(id=AUTHOR_ID, role="member")
STRANGER = Principal(id="stranger", role="member")
OWNER = Principal(id="owner-1", role="owner")


class TestRole:
    """Tests for Role parsing."""

    def test_role_values(self) -> None:
        assert Role.MEMBER.value == "member"
        assert Role.OWNER.value == "owner"

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("owner", Role.OWNER),
            ("member", Role.MEMBER),
            (Role.OWNER, Role.OWNER),
            ("admin", Role.MEMBER),
            (None, Role.MEMBER),
        ],
    )
    def test_parse_role(self, raw, expected: Role) -> None:
        """Unknown claims fall back to MEMBER."""
        assert parse_role(raw) is expected

    def test_is_owner(self) -> None:
        assert is_owner(OWNER) is True
        assert is_owner(AUTHOR) is False


class TestPolicy:
    """Tests for per-action predicates."""

    def test_edit_is_author_only(self) -> None:
        assert can_edit(AUTHOR, AUTHOR_ID) is True
        assert can_edit(STRANGER, AUTHOR_ID) is False
        assert can_edit(OWNER, AUTHOR_ID) is False

    @pytest.mark.parametrize(
        "principal,expected",
        [(AUTHOR, True), (OWNER, True), (STRANGER, False)],
    )
    def test_delete(self, principal: Principal, expected: bool) -> None:
        assert can_delete(principal, AUTHOR_ID) is expected

    def test_owner_deletes_even_own_and_foreign(self) -> None:
        assert can_delete(OWNER, OWNER.id) is True
        assert can_delete(OWNER, "someone-else") is True

    def test_resolve_is_owner_only(self) -> None:
        assert can_resolve_reports(OWNER) is True
        assert can_resolve_reports(AUTHOR) is False

    def test_anyone_may_report(self) -> None:
        for principal in (AUTHOR, STRANGER, OWNER):
            assert can_report(principal) is True
