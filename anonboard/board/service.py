"""Board service layer.

Business logic for:
- Post and comment CRUD with one-level threading
- Like and report toggles
- Report resolution by owners
- Rolling-window moderation statistics
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

import structlog
from redis.exceptions import RedisError

from anonboard.auth.permissions import (
    can_delete,
    can_edit,
    can_report,
    can_resolve_reports,
)
from anonboard.auth.schemas import Principal
from anonboard.config.settings import Settings, get_settings
from anonboard.core.redis import view_dedup_key

from .exceptions import (
    CommentNotFoundError,
    ForbiddenError,
    PostNotFoundError,
    StoreUnavailableError,
    UnauthenticatedError,
    ValidationFailedError,
)
from .ledger import (
    ToggleAction,
    decide_toggle,
    report_state,
    toggle_like,
    toggle_report,
)
from .ledger import resolve_reports as clear_report_map
from .models import (
    Category,
    Comment,
    Post,
    Reply,
    Root,
    create_comment,
    create_post,
    utc_now,
)
from .names import generate_display_name
from .stats import ModerationStats, compute_stats, window_days, window_start
from .threads import ThreadNode, assemble_thread


if TYPE_CHECKING:
    from redis.asyncio import Redis

    from .repository import BoardRepository


logger = structlog.get_logger(__name__)


ALL_CATEGORIES = "all"


@dataclass
class PostSummary:
    """Post as shown in listings."""

    post: Post
    comment_count: int


@dataclass
class PostDetail:
    """Post with its comments, flat and threaded."""

    post: Post
    comments: list[Comment]
    thread: list[ThreadNode]


def parse_category(value: Category | str) -> Category:
    """Validate a category value.

    Raises:
        ValidationFailedError: If the value is not a known category
    """
    try:
        return Category(value)
    except ValueError as e:
        raise ValidationFailedError(f"Unknown category: {value}") from e


def require_text(value: str | None, field_name: str) -> str:
    """Strip ``value`` and reject it when nothing is left."""
    text = (value or "").strip()
    if not text:
        raise ValidationFailedError(f"{field_name} cannot be empty")
    return text


def matches_search(post: Post, search: str) -> bool:
    """Case-insensitive substring match over title and content."""
    needle = search.casefold()
    return needle in post.title.casefold() or needle in post.content.casefold()


class BoardService:
    """Service for the anonymous board."""

    def __init__(
        self,
        repository: "BoardRepository",
        redis: "Redis | None" = None,
        settings: Settings | None = None,
    ):
        """Initialize with a board repository and optional Redis."""
        self.repository = repository
        self.redis = redis
        self.settings = settings or get_settings()

    @property
    def stats_window(self) -> timedelta:
        return timedelta(hours=self.settings.stats_window_hours)

    def _display_name(self, entity_id: UUID) -> str:
        return generate_display_name(
            entity_id,
            prefix=self.settings.display_name_prefix,
            max_suffix=self.settings.display_name_max_suffix,
        )

    @staticmethod
    def _require_principal(principal: Principal | None) -> Principal:
        if principal is None:
            raise UnauthenticatedError
        return principal

    async def _get_post_or_raise(self, post_id: UUID) -> Post:
        post = await self.repository.get_post(post_id)
        if not post:
            raise PostNotFoundError
        return post

    async def _get_comment_or_raise(self, comment_id: UUID) -> Comment:
        comment = await self.repository.get_comment(comment_id)
        if not comment:
            raise CommentNotFoundError
        return comment

    # ==========================================================================
    # Posts
    # ==========================================================================

    async def list_posts(
        self,
        category: Category | str | None = None,
        search: str | None = None,
    ) -> list[PostSummary]:
        """List posts newest first, each with its comment count.

        ``category`` of None or ``"all"`` lists every category. Each listed
        post costs one post read and one comment-count read; listings are
        not paginated.
        """
        if category is None or category == ALL_CATEGORIES:
            categories = list(Category)
        else:
            categories = [parse_category(category)]

        posts = await self.repository.list_posts(categories)
        if search:
            posts = [post for post in posts if matches_search(post, search)]

        return [
            PostSummary(
                post=post,
                comment_count=await self.repository.count_comments(post.post_id),
            )
            for post in posts
        ]

    async def get_post_detail(
        self, post_id: UUID, request_id: str | None = None
    ) -> PostDetail:
        """Fetch a post with its comments and count one view.

        When Redis is available, a second call carrying the same
        ``request_id`` does not count another view.
        """
        post = await self._get_post_or_raise(post_id)

        if await self._count_view(post_id, request_id):
            post.views += 1

        comments = await self.repository.list_comments(post_id)
        return PostDetail(
            post=post,
            comments=comments,
            thread=assemble_thread(comments),
        )

    async def _count_view(self, post_id: UUID, request_id: str | None) -> bool:
        """Increment the view counter unless this request already did."""
        if self.redis and request_id:
            try:
                first = await self.redis.set(
                    view_dedup_key(str(post_id), request_id),
                    "1",
                    nx=True,
                    ex=self.settings.view_dedup_ttl_seconds,
                )
            except RedisError as e:
                logger.warning("view_dedup_unavailable", error=str(e))
            else:
                if not first:
                    logger.info("view_already_counted", post_id=str(post_id))
                    return False

        await self.repository.increment_views(post_id)
        return True

    async def create_post(
        self,
        title: str,
        content: str,
        category: Category | str,
        principal: Principal | None,
    ) -> Post:
        """Create a post under a freshly generated anonymous name."""
        principal = self._require_principal(principal)

        post_id = uuid4()
        post = create_post(
            title=require_text(title, "Title"),
            content=require_text(content, "Content"),
            category=parse_category(category),
            author_id=principal.id,
            author_name=self._display_name(post_id),
            post_id=post_id,
        )
        await self.repository.insert_post(post)

        logger.info(
            "post_created",
            post_id=str(post.post_id),
            category=post.category.value,
        )
        return post

    async def update_post(
        self,
        post_id: UUID,
        fields: Mapping[str, Any],
        principal: Principal | None,
    ) -> Post:
        """Edit title, content and/or category.

        Fields that are missing or blank keep their current value. Only the
        author may edit; owners get no override.
        """
        principal = self._require_principal(principal)
        post = await self._get_post_or_raise(post_id)

        if not can_edit(principal, post.author_id):
            raise ForbiddenError("Only the author can edit this post")

        unknown = set(fields) - {"title", "content", "category"}
        if unknown:
            raise ValidationFailedError(
                f"Unknown fields: {', '.join(sorted(unknown))}"
            )

        title = (fields.get("title") or "").strip() or post.title
        content = (fields.get("content") or "").strip() or post.content
        category = (
            parse_category(fields["category"])
            if fields.get("category")
            else post.category
        )

        now = utc_now()
        await self.repository.update_post(post, title, content, category, now)

        logger.info("post_updated", post_id=str(post_id))

        post.title = title
        post.content = content
        post.category = category
        post.updated_at = now
        return post

    async def delete_post(self, post_id: UUID, principal: Principal | None) -> None:
        """Delete a post, then every comment that references it.

        The two steps are not atomic. If the comment cascade fails the post
        stays deleted and the leftover comments are unreachable through it.
        """
        principal = self._require_principal(principal)
        post = await self._get_post_or_raise(post_id)

        if not can_delete(principal, post.author_id):
            raise ForbiddenError("Only the author or an owner can delete this post")

        await self.repository.delete_post(post)

        try:
            removed = await self.repository.delete_comments_for_post(post_id)
        except StoreUnavailableError:
            logger.error("comment_cascade_failed", post_id=str(post_id))
            raise

        logger.info(
            "post_deleted",
            post_id=str(post_id),
            comments_removed=removed,
            by_owner=principal.id != post.author_id,
        )

    # ==========================================================================
    # Likes and reports
    # ==========================================================================

    async def toggle_post_like(
        self, post_id: UUID, principal: Principal | None
    ) -> frozenset[str]:
        """Flip the principal's like on a post and return the updated like set.

        The returned set is computed from the post as read; the store applies
        the same change as a single-element set mutation.
        """
        principal = self._require_principal(principal)
        post = await self._get_post_or_raise(post_id)

        if decide_toggle(post.likes, principal.id) is ToggleAction.ADD:
            await self.repository.add_post_like(post_id, principal.id)
        else:
            await self.repository.remove_post_like(post_id, principal.id)

        return toggle_like(post.likes, principal.id)

    async def toggle_comment_like(
        self, comment_id: UUID, principal: Principal | None
    ) -> frozenset[str]:
        """Flip the principal's like on a comment and return the updated like set."""
        principal = self._require_principal(principal)
        comment = await self._get_comment_or_raise(comment_id)

        if decide_toggle(comment.likes, principal.id) is ToggleAction.ADD:
            await self.repository.add_comment_like(comment, principal.id)
        else:
            await self.repository.remove_comment_like(comment, principal.id)

        return toggle_like(comment.likes, principal.id)

    async def toggle_report(
        self, post_id: UUID, principal: Principal | None
    ) -> dict[str, datetime]:
        """File or withdraw the principal's report on a post.

        Returns the updated report map (``user_id -> reported_at``).
        """
        principal = self._require_principal(principal)
        if not can_report(principal):
            raise ForbiddenError("Reporting is not allowed")
        post = await self._get_post_or_raise(post_id)

        now = utc_now()
        action = decide_toggle(post.reports, principal.id)
        if action is ToggleAction.ADD:
            await self.repository.add_report(post_id, principal.id, now)
        else:
            await self.repository.remove_report(post_id, principal.id)

        reports = toggle_report(post.reports, principal.id, now)
        logger.info(
            "report_toggled",
            post_id=str(post_id),
            action=action.value,
            state=report_state(reports).value,
            self_report=principal.id == post.author_id,
        )
        return reports

    async def resolve_reports(
        self, post_id: UUID, principal: Principal | None
    ) -> None:
        """Clear every report on a post. Owners only; cannot be undone."""
        principal = self._require_principal(principal)
        if not can_resolve_reports(principal):
            raise ForbiddenError("Only owners can resolve reports")
        post = await self._get_post_or_raise(post_id)

        await self.repository.clear_reports(post_id)
        cleared = len(post.reports)
        post.reports = clear_report_map(post.reports)

        logger.info(
            "reports_resolved",
            post_id=str(post_id),
            cleared=cleared,
            state=report_state(post.reports).value,
        )

    # ==========================================================================
    # Comments
    # ==========================================================================

    async def create_comment(
        self,
        post_id: UUID,
        content: str,
        principal: Principal | None,
        parent_comment_id: UUID | None = None,
    ) -> Comment:
        """Create a root comment, or a reply when ``parent_comment_id`` is set.

        A reply's parent must be a root comment of the same post.
        """
        principal = self._require_principal(principal)
        content = require_text(content, "Content")
        await self._get_post_or_raise(post_id)

        if parent_comment_id is None:
            position = Root()
        else:
            parent = await self._get_comment_or_raise(parent_comment_id)
            if parent.post_id != post_id:
                raise ValidationFailedError("Parent comment belongs to another post")
            if not parent.is_root:
                raise ValidationFailedError("Replies cannot be nested")
            position = Reply(parent.comment_id)

        comment_id = uuid4()
        comment = create_comment(
            post_id=post_id,
            content=content,
            author_id=principal.id,
            author_name=self._display_name(comment_id),
            position=position,
            comment_id=comment_id,
        )
        await self.repository.insert_comment(comment)

        logger.info(
            "comment_created",
            comment_id=str(comment.comment_id),
            post_id=str(post_id),
            is_reply=not comment.is_root,
        )
        return comment

    async def update_comment(
        self, comment_id: UUID, content: str, principal: Principal | None
    ) -> Comment:
        """Replace a comment's content. Author only."""
        principal = self._require_principal(principal)
        comment = await self._get_comment_or_raise(comment_id)

        if not can_edit(principal, comment.author_id):
            raise ForbiddenError("Only the author can edit this comment")

        content = require_text(content, "Content")
        now = utc_now()
        await self.repository.update_comment(comment, content, now)

        comment.content = content
        comment.updated_at = now
        return comment

    async def delete_comment(
        self, comment_id: UUID, principal: Principal | None
    ) -> None:
        """Delete a comment. Deleting a root comment also deletes its replies."""
        principal = self._require_principal(principal)
        comment = await self._get_comment_or_raise(comment_id)

        if not can_delete(principal, comment.author_id):
            raise ForbiddenError("Only the author or an owner can delete this comment")

        await self.repository.delete_comment(comment)

        replies_removed = 0
        if comment.is_root:
            for other in await self.repository.list_comments(comment.post_id):
                if other.parent_comment_id == comment.comment_id:
                    await self.repository.delete_comment(other)
                    replies_removed += 1

        logger.info(
            "comment_deleted",
            comment_id=str(comment_id),
            replies_removed=replies_removed,
        )

    # ==========================================================================
    # Moderation stats
    # ==========================================================================

    async def get_stats(self, now: datetime | None = None) -> ModerationStats:
        """Count posts per category, comments and report events in the window."""
        now = now or datetime.now(UTC)
        window = self.stats_window
        since = window_start(now, window)

        post_events = []
        for category in Category:
            post_events.extend(
                (category, created_at)
                for created_at in await self.repository.post_times_since(
                    category, since
                )
            )

        comment_times = []
        report_times = []
        for day in window_days(now, window):
            comment_times.extend(await self.repository.comment_times_since(day, since))
            report_times.extend(await self.repository.report_times_since(day, since))

        return compute_stats(now, post_events, comment_times, report_times, window)
