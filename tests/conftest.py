"""Shared fixtures: in-memory board store, service, app client and tokens."""

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from uuid import UUID

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from anonboard.board.exceptions import StoreUnavailableError
from anonboard.board.models import Category, Comment, Post, day_bucket
from anonboard.board.service import BoardService
from anonboard.config import get_settings
from anonboard.config.settings import Settings
from anonboard.main import app as fastapi_app


class FakeBoardRepository:
    """In-memory stand-in for BoardRepository with the same method surface."""

    def __init__(self) -> None:
        self.posts: dict[UUID, Post] = {}
        self.comments: dict[UUID, Comment] = {}
        self.views: dict[UUID, int] = {}
        self.report_events: list[tuple[str, datetime, UUID, str]] = []
        self.fail_comment_cascade = False

    # Posts

    async def insert_post(self, post: Post) -> None:
        self.posts[post.post_id] = replace(post, reports=dict(post.reports))

    async def get_post(self, post_id: UUID) -> Post | None:
        post = self.posts.get(post_id)
        if not post:
            return None
        return replace(
            post,
            views=self.views.get(post_id, 0),
            likes=frozenset(post.likes),
            reports=dict(post.reports),
        )

    async def list_posts(self, categories: list[Category]) -> list[Post]:
        posts = [
            await self.get_post(post.post_id)
            for post in self.posts.values()
            if post.category in categories
        ]
        return sorted(posts, key=lambda post: post.created_at, reverse=True)

    async def update_post(
        self,
        post: Post,
        title: str,
        content: str,
        category: Category,
        updated_at: datetime,
    ) -> None:
        stored = self.posts.get(post.post_id)
        if stored:
            stored.title = title
            stored.content = content
            stored.category = category
            stored.updated_at = updated_at

    async def delete_post(self, post: Post) -> None:
        self.posts.pop(post.post_id, None)
        self.views.pop(post.post_id, None)

    async def increment_views(self, post_id: UUID) -> None:
        self.views[post_id] = self.views.get(post_id, 0) + 1

    async def add_post_like(self, post_id: UUID, principal_id: str) -> None:
        if post_id in self.posts:
            self.posts[post_id].likes = self.posts[post_id].likes | {principal_id}

    async def remove_post_like(self, post_id: UUID, principal_id: str) -> None:
        if post_id in self.posts:
            self.posts[post_id].likes = self.posts[post_id].likes - {principal_id}

    # Reports

    async def add_report(
        self, post_id: UUID, principal_id: str, reported_at: datetime
    ) -> None:
        if post_id in self.posts:
            self.posts[post_id].reports[principal_id] = reported_at
        self.report_events.append(
            (day_bucket(reported_at), reported_at, post_id, principal_id)
        )

    async def remove_report(self, post_id: UUID, principal_id: str) -> None:
        if post_id in self.posts:
            self.posts[post_id].reports.pop(principal_id, None)

    async def clear_reports(self, post_id: UUID) -> None:
        if post_id in self.posts:
            self.posts[post_id].reports = {}

    # Comments

    async def insert_comment(self, comment: Comment) -> None:
        self.comments[comment.comment_id] = replace(comment)

    async def get_comment(self, comment_id: UUID) -> Comment | None:
        comment = self.comments.get(comment_id)
        return replace(comment) if comment else None

    async def list_comments(self, post_id: UUID) -> list[Comment]:
        comments = [
            replace(comment)
            for comment in self.comments.values()
            if comment.post_id == post_id
        ]
        return sorted(comments, key=lambda comment: comment.created_at)

    async def count_comments(self, post_id: UUID) -> int:
        return len(await self.list_comments(post_id))

    async def update_comment(
        self, comment: Comment, content: str, updated_at: datetime
    ) -> None:
        stored = self.comments.get(comment.comment_id)
        if stored:
            stored.content = content
            stored.updated_at = updated_at

    async def add_comment_like(self, comment: Comment, principal_id: str) -> None:
        stored = self.comments.get(comment.comment_id)
        if stored:
            stored.likes = stored.likes | {principal_id}

    async def remove_comment_like(self, comment: Comment, principal_id: str) -> None:
        stored = self.comments.get(comment.comment_id)
        if stored:
            stored.likes = stored.likes - {principal_id}

    async def delete_comment(self, comment: Comment) -> None:
        self.comments.pop(comment.comment_id, None)

    async def delete_comments_for_post(self, post_id: UUID) -> int:
        if self.fail_comment_cascade:
            raise StoreUnavailableError
        doomed = [c.comment_id for c in self.comments.values() if c.post_id == post_id]
        for comment_id in doomed:
            del self.comments[comment_id]
        return len(doomed)

    # Moderation window queries

    async def post_times_since(
        self, category: Category, since: datetime
    ) -> list[datetime]:
        return [
            post.created_at
            for post in self.posts.values()
            if post.category == category and post.created_at >= since
        ]

    async def comment_times_since(self, day: str, since: datetime) -> list[datetime]:
        return [
            comment.created_at
            for comment in self.comments.values()
            if day_bucket(comment.created_at) == day and comment.created_at >= since
        ]

    async def report_times_since(self, day: str, since: datetime) -> list[datetime]:
        return [
            reported_at
            for bucket, reported_at, _post_id, _user_id in self.report_events
            if bucket == day and reported_at >= since
        ]


@pytest.fixture
def settings() -> Settings:
    """Application settings."""
    return get_settings()


@pytest.fixture
def fake_repository() -> FakeBoardRepository:
    """Empty in-memory board store."""
    return FakeBoardRepository()


@pytest.fixture
def board_service(
    fake_repository: FakeBoardRepository, settings: Settings
) -> BoardService:
    """BoardService over the in-memory store, without Redis."""
    return BoardService(repository=fake_repository, settings=settings)


@pytest.fixture
def client(board_service: BoardService):
    """Test client with the board service wired into app state.

    The lifespan is not entered, so no Cassandra or Redis connection is made.
    """
    fastapi_app.state.board_service = board_service
    fastapi_app.state.redis = None
    yield TestClient(fastapi_app)
    fastapi_app.state.board_service = None


@pytest.fixture
def make_token(settings: Settings) -> Callable[..., str]:
    """Factory for signed access tokens."""

    def _make_token(sub: str = "user-a", role: str = "member", **claims) -> str:
        payload = {"sub": sub, "role": role, **claims}
        return jwt.encode(
            payload, settings.auth_secret_key, algorithm=settings.auth_algorithm
        )

    return _make_token


@pytest.fixture
def auth_headers(make_token: Callable[..., str]) -> Callable[..., dict[str, str]]:
    """Factory for Authorization headers."""

    def _auth_headers(sub: str = "user-a", role: str = "member") -> dict[str, str]:
        return {"Authorization": f"Bearer {make_token(sub=sub, role=role)}"}

    return _auth_headers
