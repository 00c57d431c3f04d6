"""Anonymous board module.

Provides the community board with:
- Posts in two categories and one-level comment threads
- Like and report toggles, report resolution by owners
- Rolling-window moderation statistics

Note: Router is not exported here to avoid circular imports.
Import directly from anonboard.board.router when needed.
"""

from .exceptions import (
    BoardError,
    CommentNotFoundError,
    ForbiddenError,
    NotFoundError,
    PostNotFoundError,
    StoreUnavailableError,
    UnauthenticatedError,
    ValidationFailedError,
)
from .models import BOARD_TABLES_CQL, Category, Comment, Post, Reply, Root
from .service import BoardService


__all__ = [
    "BOARD_TABLES_CQL",
    "BoardError",
    "BoardService",
    "Category",
    "Comment",
    "CommentNotFoundError",
    "ForbiddenError",
    "NotFoundError",
    "Post",
    "PostNotFoundError",
    "Reply",
    "Root",
    "StoreUnavailableError",
    "UnauthenticatedError",
    "ValidationFailedError",
]
