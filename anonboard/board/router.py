"""Board API endpoints.

Provides routes for:
- Post listing, detail and CRUD
- Comment CRUD and replies
- Like and report toggles
- Report resolution and moderation stats
"""

from uuid import UUID

from fastapi import APIRouter, Query, Request, status

from anonboard.auth.dependencies import CurrentPrincipal

from .dependencies import BoardServiceDep, handle_board_error
from .exceptions import BoardError
from .schemas import (
    CommentResponse,
    CreateCommentRequest,
    CreatePostRequest,
    LikesResponse,
    MessageResponse,
    PostDetailResponse,
    PostListResponse,
    PostResponse,
    ReportsResponse,
    StatsResponse,
    UpdateCommentRequest,
    UpdatePostRequest,
)


router = APIRouter(prefix="/v1/community", tags=["community"])


# ==============================================================================
# Stats
# ==============================================================================


@router.get("/stats", response_model=StatsResponse, summary="Moderation stats")
async def get_stats(
    board_service: BoardServiceDep,
    _principal: CurrentPrincipal,
) -> StatsResponse:
    """Posts per category, comments and report events in the last 24 hours."""
    try:
        stats = await board_service.get_stats()
    except BoardError as e:
        raise handle_board_error(e) from e
    return StatsResponse.model_validate(stats)


# ==============================================================================
# Posts
# ==============================================================================


@router.get("/posts", response_model=PostListResponse, summary="List posts")
async def list_posts(
    board_service: BoardServiceDep,
    _principal: CurrentPrincipal,
    category: str | None = Query(default=None, description="tips, suggestions or all"),
    search: str | None = Query(default=None, max_length=200),
) -> PostListResponse:
    """List posts newest first, optionally filtered by category and text."""
    try:
        summaries = await board_service.list_posts(category=category, search=search)
    except BoardError as e:
        raise handle_board_error(e) from e

    items = [
        PostResponse.from_post(summary.post, comment_count=summary.comment_count)
        for summary in summaries
    ]
    return PostListResponse(items=items, total=len(items))


@router.get(
    "/posts/{post_id}",
    response_model=PostDetailResponse,
    summary="Get post with comments",
)
async def get_post(
    post_id: UUID,
    request: Request,
    board_service: BoardServiceDep,
    _principal: CurrentPrincipal,
) -> PostDetailResponse:
    """Get a post with its comment thread. Counts one view."""
    try:
        detail = await board_service.get_post_detail(
            post_id, request_id=getattr(request.state, "request_id", None)
        )
    except BoardError as e:
        raise handle_board_error(e) from e
    return PostDetailResponse.from_detail(detail)


@router.post(
    "/posts",
    response_model=PostResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create post",
)
async def create_post(
    data: CreatePostRequest,
    board_service: BoardServiceDep,
    principal: CurrentPrincipal,
) -> PostResponse:
    """Create a post under an anonymous display name."""
    try:
        post = await board_service.create_post(
            title=data.title,
            content=data.content,
            category=data.category,
            principal=principal,
        )
    except BoardError as e:
        raise handle_board_error(e) from e
    return PostResponse.from_post(post, comment_count=0)


@router.put("/posts/{post_id}", response_model=PostResponse, summary="Update post")
async def update_post(
    post_id: UUID,
    data: UpdatePostRequest,
    board_service: BoardServiceDep,
    principal: CurrentPrincipal,
) -> PostResponse:
    """Edit a post. Only the author may edit."""
    try:
        post = await board_service.update_post(
            post_id, data.model_dump(exclude_none=True), principal
        )
    except BoardError as e:
        raise handle_board_error(e) from e
    return PostResponse.from_post(post)


@router.delete(
    "/posts/{post_id}", response_model=MessageResponse, summary="Delete post"
)
async def delete_post(
    post_id: UUID,
    board_service: BoardServiceDep,
    principal: CurrentPrincipal,
) -> MessageResponse:
    """Delete a post and its comments. Author or owner."""
    try:
        await board_service.delete_post(post_id, principal)
    except BoardError as e:
        raise handle_board_error(e) from e
    return MessageResponse(message="Post deleted")


@router.put(
    "/posts/{post_id}/like", response_model=LikesResponse, summary="Toggle post like"
)
async def toggle_post_like(
    post_id: UUID,
    board_service: BoardServiceDep,
    principal: CurrentPrincipal,
) -> LikesResponse:
    try:
        likes = await board_service.toggle_post_like(post_id, principal)
    except BoardError as e:
        raise handle_board_error(e) from e
    return LikesResponse.from_likes(likes, principal.id)


@router.put(
    "/posts/{post_id}/report",
    response_model=ReportsResponse,
    summary="Toggle post report",
)
async def toggle_report(
    post_id: UUID,
    board_service: BoardServiceDep,
    principal: CurrentPrincipal,
) -> ReportsResponse:
    """File a report, or withdraw the caller's existing one."""
    try:
        reports = await board_service.toggle_report(post_id, principal)
    except BoardError as e:
        raise handle_board_error(e) from e
    return ReportsResponse.from_reports(reports, principal.id)


@router.put(
    "/posts/{post_id}/resolve",
    response_model=MessageResponse,
    summary="Resolve post reports",
)
async def resolve_reports(
    post_id: UUID,
    board_service: BoardServiceDep,
    principal: CurrentPrincipal,
) -> MessageResponse:
    """Clear every report on a post. Owners only."""
    try:
        await board_service.resolve_reports(post_id, principal)
    except BoardError as e:
        raise handle_board_error(e) from e
    return MessageResponse(message="Reports resolved")


# ==============================================================================
# Comments
# ==============================================================================


@router.post(
    "/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create comment",
)
async def create_comment(
    data: CreateCommentRequest,
    board_service: BoardServiceDep,
    principal: CurrentPrincipal,
) -> CommentResponse:
    """Comment on a post, or reply to a root comment."""
    try:
        comment = await board_service.create_comment(
            post_id=data.post_id,
            content=data.content,
            principal=principal,
            parent_comment_id=data.parent_comment_id,
        )
    except BoardError as e:
        raise handle_board_error(e) from e
    return CommentResponse.from_comment(comment)


@router.put(
    "/comments/{comment_id}",
    response_model=CommentResponse,
    summary="Update comment",
)
async def update_comment(
    comment_id: UUID,
    data: UpdateCommentRequest,
    board_service: BoardServiceDep,
    principal: CurrentPrincipal,
) -> CommentResponse:
    try:
        comment = await board_service.update_comment(
            comment_id, data.content, principal
        )
    except BoardError as e:
        raise handle_board_error(e) from e
    return CommentResponse.from_comment(comment)


@router.delete(
    "/comments/{comment_id}",
    response_model=MessageResponse,
    summary="Delete comment",
)
async def delete_comment(
    comment_id: UUID,
    board_service: BoardServiceDep,
    principal: CurrentPrincipal,
) -> MessageResponse:
    """Delete a comment; a root comment takes its replies with it."""
    try:
        await board_service.delete_comment(comment_id, principal)
    except BoardError as e:
        raise handle_board_error(e) from e
    return MessageResponse(message="Comment deleted")


@router.put(
    "/comments/{comment_id}/like",
    response_model=LikesResponse,
    summary="Toggle comment like",
)
async def toggle_comment_like(
    comment_id: UUID,
    board_service: BoardServiceDep,
    principal: CurrentPrincipal,
) -> LikesResponse:
    try:
        likes = await board_service.toggle_comment_like(comment_id, principal)
    except BoardError as e:
        raise handle_board_error(e) from e
    return LikesResponse.from_likes(likes, principal.id)
