"""Cassandra persistence for posts, comments and report events.

Every mutation is a single targeted statement against one row: collection
adds/removes for likes and reports, column updates for edits, and a counter
increment for views. Nothing rewrites a whole row, so concurrent toggles by
different principals on the same entity cannot drop each other's changes.

A targeted UPDATE that lands after a concurrent DELETE recreates the row with
only the key and the updated column. Reads treat such rows, which have no
``author_id``, as missing.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID

import structlog
from cassandra import DriverException
from cassandra.cluster import NoHostAvailable

from .exceptions import StoreUnavailableError
from .models import (
    Category,
    Comment,
    Post,
    as_utc,
    day_bucket,
)


if TYPE_CHECKING:
    from cassandra.cluster import Session


logger = structlog.get_logger(__name__)


def _is_partial(row: Any) -> bool:
    """True for a row holding only columns written by an UPDATE."""
    return row.author_id is None


class BoardRepository:
    """Board entity store backed by Cassandra."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient queries."""
        ks = self.keyspace

        # Posts
        self._insert_post = self.session.prepare(f"""
            INSERT INTO {ks}.posts
            (post_id, title, content, category, author_id, author_name,
             likes, reports, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)

        self._insert_post_by_category = self.session.prepare(f"""
            INSERT INTO {ks}.posts_by_category (category, created_at, post_id)
            VALUES (?, ?, ?)
        """)

        self._get_post = self.session.prepare(f"""
            SELECT * FROM {ks}.posts WHERE post_id = ?
        """)

        self._list_posts_by_category = self.session.prepare(f"""
            SELECT created_at, post_id FROM {ks}.posts_by_category
            WHERE category = ?
        """)

        self._posts_by_category_since = self.session.prepare(f"""
            SELECT created_at FROM {ks}.posts_by_category
            WHERE category = ? AND created_at >= ?
        """)

        self._update_post = self.session.prepare(f"""
            UPDATE {ks}.posts
            SET title = ?, content = ?, category = ?, updated_at = ?
            WHERE post_id = ?
        """)

        self._delete_post = self.session.prepare(f"""
            DELETE FROM {ks}.posts WHERE post_id = ?
        """)

        self._delete_post_by_category = self.session.prepare(f"""
            DELETE FROM {ks}.posts_by_category
            WHERE category = ? AND created_at = ? AND post_id = ?
        """)

        # Views (counter table)
        self._incr_views = self.session.prepare(f"""
            UPDATE {ks}.post_views SET views = views + 1 WHERE post_id = ?
        """)

        self._get_views = self.session.prepare(f"""
            SELECT views FROM {ks}.post_views WHERE post_id = ?
        """)

        self._delete_views = self.session.prepare(f"""
            DELETE FROM {ks}.post_views WHERE post_id = ?
        """)

        # Likes and reports on posts
        self._add_post_like = self.session.prepare(f"""
            UPDATE {ks}.posts SET likes = likes + ? WHERE post_id = ?
        """)

        self._remove_post_like = self.session.prepare(f"""
            UPDATE {ks}.posts SET likes = likes - ? WHERE post_id = ?
        """)

        self._add_report = self.session.prepare(f"""
            UPDATE {ks}.posts SET reports = reports + ? WHERE post_id = ?
        """)

        self._remove_report = self.session.prepare(f"""
            DELETE reports[?] FROM {ks}.posts WHERE post_id = ?
        """)

        self._clear_reports = self.session.prepare(f"""
            DELETE reports FROM {ks}.posts WHERE post_id = ?
        """)

        self._insert_report_event = self.session.prepare(f"""
            INSERT INTO {ks}.report_events (day, reported_at, post_id, user_id)
            VALUES (?, ?, ?, ?)
        """)

        self._report_events_since = self.session.prepare(f"""
            SELECT reported_at FROM {ks}.report_events
            WHERE day = ? AND reported_at >= ?
        """)

        # Comments
        self._insert_comment = self.session.prepare(f"""
            INSERT INTO {ks}.comments
            (post_id, created_at, comment_id, parent_comment_id, content,
             author_id, author_name, likes, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)

        self._insert_comment_by_id = self.session.prepare(f"""
            INSERT INTO {ks}.comments_by_id (comment_id, post_id, created_at)
            VALUES (?, ?, ?)
        """)

        self._insert_comment_by_day = self.session.prepare(f"""
            INSERT INTO {ks}.comments_by_day (day, created_at, comment_id)
            VALUES (?, ?, ?)
        """)

        self._lookup_comment = self.session.prepare(f"""
            SELECT post_id, created_at FROM {ks}.comments_by_id
            WHERE comment_id = ?
        """)

        self._get_comment = self.session.prepare(f"""
            SELECT * FROM {ks}.comments
            WHERE post_id = ? AND created_at = ? AND comment_id = ?
        """)

        self._list_comments = self.session.prepare(f"""
            SELECT * FROM {ks}.comments WHERE post_id = ?
        """)

        self._comment_authors = self.session.prepare(f"""
            SELECT author_id FROM {ks}.comments WHERE post_id = ?
        """)

        self._update_comment = self.session.prepare(f"""
            UPDATE {ks}.comments SET content = ?, updated_at = ?
            WHERE post_id = ? AND created_at = ? AND comment_id = ?
        """)

        self._add_comment_like = self.session.prepare(f"""
            UPDATE {ks}.comments SET likes = likes + ?
            WHERE post_id = ? AND created_at = ? AND comment_id = ?
        """)

        self._remove_comment_like = self.session.prepare(f"""
            UPDATE {ks}.comments SET likes = likes - ?
            WHERE post_id = ? AND created_at = ? AND comment_id = ?
        """)

        self._delete_comment = self.session.prepare(f"""
            DELETE FROM {ks}.comments
            WHERE post_id = ? AND created_at = ? AND comment_id = ?
        """)

        self._delete_comments_for_post = self.session.prepare(f"""
            DELETE FROM {ks}.comments WHERE post_id = ?
        """)

        self._delete_comment_by_id = self.session.prepare(f"""
            DELETE FROM {ks}.comments_by_id WHERE comment_id = ?
        """)

        self._delete_comment_by_day = self.session.prepare(f"""
            DELETE FROM {ks}.comments_by_day
            WHERE day = ? AND created_at = ? AND comment_id = ?
        """)

        self._comments_by_day_since = self.session.prepare(f"""
            SELECT created_at FROM {ks}.comments_by_day
            WHERE day = ? AND created_at >= ?
        """)

    async def _execute(self, statement: Any, params: list[Any]) -> list[Any]:
        """Run a statement, surfacing driver failures as StoreUnavailableError."""
        try:
            return await self.session.aexecute(statement, params)
        except (DriverException, NoHostAvailable) as e:
            logger.error(
                "board_store_failure",
                error=str(e),
                error_type=type(e).__name__,
            )
            raise StoreUnavailableError from e

    async def _first(self, statement: Any, params: list[Any]) -> Any | None:
        result = await self._execute(statement, params)
        return result[0] if result else None

    # ==========================================================================
    # Posts
    # ==========================================================================

    async def insert_post(self, post: Post) -> None:
        """Insert a post and its category index entry."""
        await self._execute(
            self._insert_post,
            [
                post.post_id,
                post.title,
                post.content,
                post.category.value,
                post.author_id,
                post.author_name,
                set(post.likes),
                dict(post.reports),
                post.created_at,
                post.updated_at,
            ],
        )
        await self._execute(
            self._insert_post_by_category,
            [post.category.value, post.created_at, post.post_id],
        )

    async def get_post(self, post_id: UUID) -> Post | None:
        """Fetch a post with its current view count."""
        row = await self._first(self._get_post, [post_id])
        if not row or _is_partial(row):
            return None
        views_row = await self._first(self._get_views, [post_id])
        return Post.from_row(row, views=views_row.views if views_row else 0)

    async def list_posts(self, categories: list[Category]) -> list[Post]:
        """List posts of the given categories, newest first."""
        index_rows = []
        for category in categories:
            index_rows.extend(
                await self._execute(self._list_posts_by_category, [category.value])
            )
        index_rows.sort(key=lambda row: row.created_at, reverse=True)

        posts = []
        for row in index_rows:
            post = await self.get_post(row.post_id)
            # Index entries can outlive a post whose delete half-failed
            if post:
                posts.append(post)
        return posts

    async def update_post(
        self,
        post: Post,
        title: str,
        content: str,
        category: Category,
        updated_at: datetime,
    ) -> None:
        """Update editable post columns, moving the index entry on category change."""
        await self._execute(
            self._update_post,
            [title, content, category.value, updated_at, post.post_id],
        )
        if category != post.category:
            await self._execute(
                self._delete_post_by_category,
                [post.category.value, post.created_at, post.post_id],
            )
            await self._execute(
                self._insert_post_by_category,
                [category.value, post.created_at, post.post_id],
            )

    async def delete_post(self, post: Post) -> None:
        """Delete a post, its index entry and its view counter."""
        await self._execute(self._delete_post, [post.post_id])
        await self._execute(
            self._delete_post_by_category,
            [post.category.value, post.created_at, post.post_id],
        )
        await self._execute(self._delete_views, [post.post_id])

    async def increment_views(self, post_id: UUID) -> None:
        await self._execute(self._incr_views, [post_id])

    async def add_post_like(self, post_id: UUID, principal_id: str) -> None:
        await self._execute(self._add_post_like, [{principal_id}, post_id])

    async def remove_post_like(self, post_id: UUID, principal_id: str) -> None:
        await self._execute(self._remove_post_like, [{principal_id}, post_id])

    # ==========================================================================
    # Reports
    # ==========================================================================

    async def add_report(
        self, post_id: UUID, principal_id: str, reported_at: datetime
    ) -> None:
        """Add one report entry and append its event to the report log."""
        await self._execute(self._add_report, [{principal_id: reported_at}, post_id])
        await self._execute(
            self._insert_report_event,
            [day_bucket(reported_at), reported_at, post_id, principal_id],
        )

    async def remove_report(self, post_id: UUID, principal_id: str) -> None:
        await self._execute(self._remove_report, [principal_id, post_id])

    async def clear_reports(self, post_id: UUID) -> None:
        await self._execute(self._clear_reports, [post_id])

    # ==========================================================================
    # Comments
    # ==========================================================================

    async def insert_comment(self, comment: Comment) -> None:
        """Insert a comment with its id lookup and day bucket entries."""
        await self._execute(
            self._insert_comment,
            [
                comment.post_id,
                comment.created_at,
                comment.comment_id,
                comment.parent_comment_id,
                comment.content,
                comment.author_id,
                comment.author_name,
                set(comment.likes),
                comment.updated_at,
            ],
        )
        await self._execute(
            self._insert_comment_by_id,
            [comment.comment_id, comment.post_id, comment.created_at],
        )
        await self._execute(
            self._insert_comment_by_day,
            [day_bucket(comment.created_at), comment.created_at, comment.comment_id],
        )

    async def get_comment(self, comment_id: UUID) -> Comment | None:
        """Fetch a comment by id through the lookup table."""
        key = await self._first(self._lookup_comment, [comment_id])
        if not key:
            return None
        row = await self._first(
            self._get_comment, [key.post_id, key.created_at, comment_id]
        )
        if not row or _is_partial(row):
            return None
        return Comment.from_row(row)

    async def list_comments(self, post_id: UUID) -> list[Comment]:
        """List a post's comments, oldest first."""
        rows = await self._execute(self._list_comments, [post_id])
        return [Comment.from_row(row) for row in rows if not _is_partial(row)]

    async def count_comments(self, post_id: UUID) -> int:
        rows = await self._execute(self._comment_authors, [post_id])
        return sum(1 for row in rows if not _is_partial(row))

    async def update_comment(
        self, comment: Comment, content: str, updated_at: datetime
    ) -> None:
        await self._execute(
            self._update_comment,
            [content, updated_at, *self._comment_key(comment)],
        )

    async def add_comment_like(self, comment: Comment, principal_id: str) -> None:
        await self._execute(
            self._add_comment_like, [{principal_id}, *self._comment_key(comment)]
        )

    async def remove_comment_like(self, comment: Comment, principal_id: str) -> None:
        await self._execute(
            self._remove_comment_like, [{principal_id}, *self._comment_key(comment)]
        )

    async def delete_comment(self, comment: Comment) -> None:
        """Delete a comment and its lookup/day entries."""
        await self._execute(self._delete_comment, self._comment_key(comment))
        await self._delete_comment_indexes(comment)

    async def delete_comments_for_post(self, post_id: UUID) -> int:
        """Delete every comment of a post. Returns how many were removed."""
        comments = await self.list_comments(post_id)
        for comment in comments:
            await self._delete_comment_indexes(comment)
        await self._execute(self._delete_comments_for_post, [post_id])
        return len(comments)

    async def _delete_comment_indexes(self, comment: Comment) -> None:
        await self._execute(self._delete_comment_by_id, [comment.comment_id])
        await self._execute(
            self._delete_comment_by_day,
            [day_bucket(comment.created_at), comment.created_at, comment.comment_id],
        )

    @staticmethod
    def _comment_key(comment: Comment) -> list[Any]:
        return [comment.post_id, comment.created_at, comment.comment_id]

    # ==========================================================================
    # Moderation window queries
    # ==========================================================================

    async def post_times_since(
        self, category: Category, since: datetime
    ) -> list[datetime]:
        rows = await self._execute(
            self._posts_by_category_since, [category.value, since]
        )
        return [as_utc(row.created_at) for row in rows]

    async def comment_times_since(self, day: str, since: datetime) -> list[datetime]:
        rows = await self._execute(self._comments_by_day_since, [day, since])
        return [as_utc(row.created_at) for row in rows]

    async def report_times_since(self, day: str, since: datetime) -> list[datetime]:
        rows = await self._execute(self._report_events_since, [day, since])
        return [as_utc(row.reported_at) for row in rows]
