"""Two-level comment thread assembly."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from uuid import UUID

import structlog

from .models import Comment


logger = structlog.get_logger(__name__)


@dataclass
class ThreadNode:
    """A root comment and its direct replies, both oldest first."""

    comment: Comment
    replies: list[Comment] = field(default_factory=list)


def assemble_thread(comments: Iterable[Comment]) -> list[ThreadNode]:
    """Group a post's comments into root comments with their replies.

    ``comments`` must be ordered by ``created_at`` ascending; that order is
    kept for roots and within each reply list. A reply whose parent is
    missing, is itself a reply, or belongs to another post is dropped, so
    comments left behind by a partial delete never break rendering.
    """
    comments = list(comments)
    roots: dict[UUID, ThreadNode] = {}
    thread: list[ThreadNode] = []

    for comment in comments:
        if comment.is_root:
            node = ThreadNode(comment=comment)
            roots[comment.comment_id] = node
            thread.append(node)

    dropped = 0
    for comment in comments:
        if comment.is_root:
            continue
        node = roots.get(comment.parent_comment_id)
        if node is None or node.comment.post_id != comment.post_id:
            dropped += 1
            continue
        node.replies.append(comment)

    if dropped:
        logger.debug("orphaned_replies_dropped", count=dropped)

    return thread
