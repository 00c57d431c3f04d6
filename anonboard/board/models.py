"""Database models for the anonymous board.

Cassandra table definitions for:
- Posts: main table keyed by id, plus a per-category index ordered newest first
- Post views: counter table, incremented once per detail read
- Comments: partitioned by post, clustered by creation time (oldest first)
- Report events: append-only log of report insertions, bucketed by UTC day

Likes and reports live on the entity row as a SET and a MAP so that every
toggle is a targeted collection mutation (``likes = likes + {?}``,
``DELETE reports[?]``) instead of a read-modify-write of the whole row.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4


class Category(str, Enum):
    """Post categories."""

    TIPS = "tips"
    SUGGESTIONS = "suggestions"


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

POSTS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.posts (
    post_id UUID PRIMARY KEY,
    title TEXT,
    content TEXT,
    category TEXT,
    author_id TEXT,
    author_name TEXT,
    likes SET<TEXT>,
    reports MAP<TEXT, TIMESTAMP>,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

# Newest-first listing per category; also the source of the per-category
# "new posts" counts for moderation stats
POSTS_BY_CATEGORY_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.posts_by_category (
    category TEXT,
    created_at TIMESTAMP,
    post_id UUID,
    PRIMARY KEY ((category), created_at, post_id)
) WITH CLUSTERING ORDER BY (created_at DESC, post_id ASC)
"""

POST_VIEWS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.post_views (
    post_id UUID PRIMARY KEY,
    views COUNTER
)
"""

COMMENTS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.comments (
    post_id UUID,
    created_at TIMESTAMP,
    comment_id UUID,
    parent_comment_id UUID,
    content TEXT,
    author_id TEXT,
    author_name TEXT,
    likes SET<TEXT>,
    updated_at TIMESTAMP,
    PRIMARY KEY ((post_id), created_at, comment_id)
) WITH CLUSTERING ORDER BY (created_at ASC, comment_id ASC)
"""

# O(1) lookup of the clustering key of a comment by its id
COMMENTS_BY_ID_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.comments_by_id (
    comment_id UUID PRIMARY KEY,
    post_id UUID,
    created_at TIMESTAMP
)
"""

COMMENTS_BY_DAY_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.comments_by_day (
    day TEXT,
    created_at TIMESTAMP,
    comment_id UUID,
    PRIMARY KEY ((day), created_at, comment_id)
) WITH CLUSTERING ORDER BY (created_at DESC, comment_id ASC)
"""

# Never updated or deleted: removing a report keeps the event that filed it
REPORT_EVENTS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.report_events (
    day TEXT,
    reported_at TIMESTAMP,
    post_id UUID,
    user_id TEXT,
    PRIMARY KEY ((day), reported_at, post_id, user_id)
) WITH CLUSTERING ORDER BY (reported_at DESC, post_id ASC, user_id ASC)
"""

BOARD_TABLES_CQL = [
    POSTS_TABLE_CQL,
    POSTS_BY_CATEGORY_TABLE_CQL,
    POST_VIEWS_TABLE_CQL,
    COMMENTS_TABLE_CQL,
    COMMENTS_BY_ID_TABLE_CQL,
    COMMENTS_BY_DAY_TABLE_CQL,
    REPORT_EVENTS_TABLE_CQL,
]


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to the naive datetimes the driver returns."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def utc_now() -> datetime:
    """Current UTC time truncated to the millisecond precision Cassandra stores."""
    now = datetime.now(UTC)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def reports_from_column(raw: Any) -> dict[str, datetime]:
    """Report map column as a dict ordered by report time."""
    reports = {user_id: as_utc(at) for user_id, at in (raw or {}).items()}
    return dict(sorted(reports.items(), key=lambda item: item[1]))


def day_bucket(moment: datetime) -> str:
    """UTC calendar day used as the partition key of day-bucketed tables."""
    return moment.astimezone(UTC).date().isoformat()


# ==============================================================================
# Thread Position
# ==============================================================================


@dataclass(frozen=True)
class Root:
    """Position of a top-level comment."""


@dataclass(frozen=True)
class Reply:
    """Position of a direct reply to a root comment."""

    parent_comment_id: UUID


ThreadPosition = Root | Reply


def position_from_parent(parent_comment_id: UUID | None) -> ThreadPosition:
    """Build the thread position stored as a nullable parent column."""
    if parent_comment_id is None:
        return Root()
    return Reply(parent_comment_id)


# ==============================================================================
# Entity Classes
# ==============================================================================


@dataclass
class Post:
    """Board post with its like set and report map."""

    post_id: UUID
    title: str
    content: str
    category: Category
    author_id: str
    author_name: str
    created_at: datetime
    updated_at: datetime
    views: int = 0
    likes: frozenset[str] = field(default_factory=frozenset)
    reports: dict[str, datetime] = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: Any, views: int = 0) -> "Post":
        """Create Post from Cassandra row."""
        return cls(
            post_id=row.post_id,
            title=row.title,
            content=row.content,
            category=Category(row.category),
            author_id=row.author_id,
            author_name=row.author_name,
            created_at=as_utc(row.created_at),
            updated_at=as_utc(row.updated_at or row.created_at),
            views=views,
            likes=frozenset(row.likes or ()),
            reports=reports_from_column(row.reports),
        )


@dataclass
class Comment:
    """Comment on a post, either a root or a reply to a root."""

    comment_id: UUID
    post_id: UUID
    position: ThreadPosition
    content: str
    author_id: str
    author_name: str
    created_at: datetime
    updated_at: datetime
    likes: frozenset[str] = field(default_factory=frozenset)

    @property
    def parent_comment_id(self) -> UUID | None:
        if isinstance(self.position, Reply):
            return self.position.parent_comment_id
        return None

    @property
    def is_root(self) -> bool:
        return isinstance(self.position, Root)

    @classmethod
    def from_row(cls, row: Any) -> "Comment":
        """Create Comment from Cassandra row."""
        return cls(
            comment_id=row.comment_id,
            post_id=row.post_id,
            position=position_from_parent(row.parent_comment_id),
            content=row.content,
            author_id=row.author_id,
            author_name=row.author_name,
            created_at=as_utc(row.created_at),
            updated_at=as_utc(row.updated_at or row.created_at),
            likes=frozenset(row.likes or ()),
        )


# ==============================================================================
# Factory Functions
# ==============================================================================


def create_post(
    title: str,
    content: str,
    category: Category,
    author_id: str,
    author_name: str,
    post_id: UUID | None = None,
) -> Post:
    """Create a new post with default values."""
    now = utc_now()
    return Post(
        post_id=post_id or uuid4(),
        title=title,
        content=content,
        category=category,
        author_id=author_id,
        author_name=author_name,
        created_at=now,
        updated_at=now,
    )


def create_comment(
    post_id: UUID,
    content: str,
    author_id: str,
    author_name: str,
    position: ThreadPosition,
    comment_id: UUID | None = None,
) -> Comment:
    """Create a new comment with default values."""
    now = utc_now()
    return Comment(
        comment_id=comment_id or uuid4(),
        post_id=post_id,
        position=position,
        content=content,
        author_id=author_id,
        author_name=author_name,
        created_at=now,
        updated_at=now,
    )
