"""Pydantic schemas for the board API.

Request/Response models for:
- Post CRUD and listings
- Comments and threads
- Like and report toggles
- Moderation statistics
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .ledger import ReportState, report_state
from .models import Category


# ==============================================================================
# Request Schemas
# ==============================================================================


def _strip_required(v: str) -> str:
    v = v.strip()
    if not v:
        msg = "Value cannot be empty"
        raise ValueError(msg)
    return v


class CreatePostRequest(BaseModel):
    """Request to create a post."""

    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1, max_length=10000)
    category: Category

    @field_validator("title", "content")
    @classmethod
    def validate_text(cls, v: str) -> str:
        """Strip whitespace and reject blank text."""
        return _strip_required(v)


class UpdatePostRequest(BaseModel):
    """Partial post update; omitted fields keep their current value."""

    title: str | None = Field(None, max_length=200)
    content: str | None = Field(None, max_length=10000)
    category: Category | None = None


class CreateCommentRequest(BaseModel):
    """Request to create a comment or a reply."""

    post_id: UUID
    parent_comment_id: UUID | None = None
    content: str = Field(..., min_length=1, max_length=5000)

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        """Strip whitespace and reject blank text."""
        return _strip_required(v)


class UpdateCommentRequest(BaseModel):
    """Request to replace a comment's content."""

    content: str = Field(..., min_length=1, max_length=5000)

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        """Strip whitespace and reject blank text."""
        return _strip_required(v)


# ==============================================================================
# Response Schemas
# ==============================================================================


class ReportEntry(BaseModel):
    """A single active report."""

    user_id: str
    reported_at: datetime


def _report_entries(reports: dict[str, datetime]) -> list[ReportEntry]:
    return [
        ReportEntry(user_id=user_id, reported_at=reported_at)
        for user_id, reported_at in reports.items()
    ]


class PostResponse(BaseModel):
    """Response for a single post."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    content: str
    category: Category
    author_id: str
    author_name: str
    views: int = 0
    likes: list[str] = Field(default_factory=list)
    like_count: int = 0
    reports: list[ReportEntry] = Field(default_factory=list)
    report_state: ReportState = ReportState.CLEAN
    comment_count: int | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_post(cls, post: Any, comment_count: int | None = None) -> "PostResponse":
        """Create response from Post entity."""
        return cls(
            id=post.post_id,
            title=post.title,
            content=post.content,
            category=post.category,
            author_id=post.author_id,
            author_name=post.author_name,
            views=post.views,
            likes=sorted(post.likes),
            like_count=len(post.likes),
            reports=_report_entries(post.reports),
            report_state=report_state(post.reports),
            comment_count=comment_count,
            created_at=post.created_at,
            updated_at=post.updated_at,
        )


class CommentResponse(BaseModel):
    """Response for a single comment."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    post_id: UUID
    parent_comment_id: UUID | None = None
    content: str
    author_id: str
    author_name: str
    likes: list[str] = Field(default_factory=list)
    like_count: int = 0
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_comment(cls, comment: Any) -> "CommentResponse":
        """Create response from Comment entity."""
        return cls(
            id=comment.comment_id,
            post_id=comment.post_id,
            parent_comment_id=comment.parent_comment_id,
            content=comment.content,
            author_id=comment.author_id,
            author_name=comment.author_name,
            likes=sorted(comment.likes),
            like_count=len(comment.likes),
            created_at=comment.created_at,
            updated_at=comment.updated_at,
        )


class ThreadNodeResponse(CommentResponse):
    """Root comment with its direct replies."""

    replies: list[CommentResponse] = Field(default_factory=list)

    @classmethod
    def from_node(cls, node: Any) -> "ThreadNodeResponse":
        """Create response from ThreadNode."""
        root = CommentResponse.from_comment(node.comment)
        return cls(
            **root.model_dump(),
            replies=[CommentResponse.from_comment(reply) for reply in node.replies],
        )


class PostListResponse(BaseModel):
    """List of posts, newest first."""

    items: list[PostResponse]
    total: int


class PostDetailResponse(BaseModel):
    """Post with its comments, flat and threaded."""

    post: PostResponse
    comments: list[CommentResponse]
    thread: list[ThreadNodeResponse]

    @classmethod
    def from_detail(cls, detail: Any) -> "PostDetailResponse":
        """Create response from PostDetail."""
        return cls(
            post=PostResponse.from_post(
                detail.post, comment_count=len(detail.comments)
            ),
            comments=[CommentResponse.from_comment(c) for c in detail.comments],
            thread=[ThreadNodeResponse.from_node(node) for node in detail.thread],
        )


class LikesResponse(BaseModel):
    """Like set after a toggle."""

    likes: list[str]
    like_count: int
    liked: bool

    @classmethod
    def from_likes(cls, likes: frozenset[str], principal_id: str) -> "LikesResponse":
        return cls(
            likes=sorted(likes),
            like_count=len(likes),
            liked=principal_id in likes,
        )


class ReportsResponse(BaseModel):
    """Report map after a toggle."""

    reports: list[ReportEntry]
    report_count: int
    report_state: ReportState
    reported: bool

    @classmethod
    def from_reports(
        cls, reports: dict[str, datetime], principal_id: str
    ) -> "ReportsResponse":
        return cls(
            reports=_report_entries(reports),
            report_count=len(reports),
            report_state=report_state(reports),
            reported=principal_id in reports,
        )


class StatsResponse(BaseModel):
    """Moderation counts for the rolling window."""

    model_config = ConfigDict(from_attributes=True)

    tips_today: int
    suggestions_today: int
    comments_today: int
    reports_today: int


class MessageResponse(BaseModel):
    """Simple message response."""

    message: str
    success: bool = True
