"""Role-based access policy for the board.

Two roles:
- MEMBER: anonymous participant; may only edit or delete what they wrote
- OWNER: moderator; may delete anything and resolve reports

Editing never has a role override. Reporting is open to every authenticated
principal, including the author of the reported post.
"""

from enum import Enum

from anonboard.auth.schemas import Principal


class Role(str, Enum):
    """Principal roles."""

    MEMBER = "member"
    OWNER = "owner"


def parse_role(role: Role | str | None) -> Role:
    """Coerce a token claim into a Role; unknown values fall back to MEMBER."""
    if isinstance(role, Role):
        return role
    try:
        return Role(role)
    except ValueError:
        return Role.MEMBER


def is_owner(principal: Principal) -> bool:
    """Check if principal has the OWNER role."""
    return parse_role(principal.role) is Role.OWNER


def is_author(principal: Principal, author_id: str) -> bool:
    """Check if principal wrote the entity."""
    return principal.id == author_id


def can_edit(principal: Principal, author_id: str) -> bool:
    """Only the author may edit, owners included."""
    return is_author(principal, author_id)


def can_delete(principal: Principal, author_id: str) -> bool:
    """The author or any owner may delete.

    Examples:
        >>> can_delete(Principal(id="a", role="member"), "a")
        True
        >>> can_delete(Principal(id="b", role="owner"), "a")
        True
        >>> can_delete(Principal(id="b", role="member"), "a")
        False
    """
    return is_owner(principal) or is_author(principal, author_id)


def can_resolve_reports(principal: Principal) -> bool:
    """Any owner may resolve reports on any post."""
    return is_owner(principal)


def can_report(principal: Principal) -> bool:
    """Every authenticated principal may toggle a report."""
    return bool(principal.id)
