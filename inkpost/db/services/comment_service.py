"""Comment service: threaded comments on posts and their moderation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Literal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from inkpost.auth.permissions import MODERATE_COMMENTS, can_manage_comment, is_staff, require_permission
from inkpost.auth.principal import Principal
from inkpost.db.models import Comment, CommentStatus, Post
from inkpost.db.services.profile_service import require_profile
from inkpost.lib.errors import BadRequestError, ForbiddenError, NotFoundError
from inkpost.lib.hooks import AFTER_COMMENT_CREATE, AFTER_COMMENT_MODERATE, hooks
from inkpost.lib.pagination import DEFAULT_LIMIT, MAX_LIMIT, PageMeta, Paginated, clamp

logger = logging.getLogger(__name__)

MAX_CONTENT_LENGTH = 5000

SortOrder = Literal["asc", "desc"]
StatusFilter = CommentStatus | Literal["all"]


@dataclass
class CommentListQuery:
    page: int = 1
    limit: int = DEFAULT_LIMIT
    include_replies: bool = False
    sort_order: SortOrder = "asc"
    status: StatusFilter | None = None

    def normalized(self) -> CommentListQuery:
        return CommentListQuery(
            page=clamp(self.page, 1),
            limit=clamp(self.limit, 1, MAX_LIMIT),
            include_replies=self.include_replies,
            sort_order="desc" if self.sort_order == "desc" else "asc",
            status=self.status,
        )


@dataclass
class ThreadedComment:
    """A listed comment; ``replies_count`` is set for top-level listings only."""

    comment: Comment
    replies_count: int | None = None


def _clean_content(content: str, max_length: int = MAX_CONTENT_LENGTH) -> str:
    content = content.strip()
    if not content:
        raise BadRequestError("Comment content cannot be empty")
    if len(content) > max_length:
        raise BadRequestError(f"Comment content cannot exceed {max_length} characters")
    return content


def _resolve_status_filter(status: StatusFilter | None, principal: Principal | None) -> CommentStatus | None:
    """Status to filter on, or None for no filter. Only staff may widen it."""
    if not is_staff(principal) or status is None:
        return CommentStatus.APPROVED
    if status == "all":
        return None
    return CommentStatus(status)


async def _require_comment(db_session: AsyncSession, comment_id: UUID) -> Comment:
    result = await db_session.execute(select(Comment).where(Comment.id == comment_id))
    comment = result.scalar_one_or_none()
    if comment is None:
        raise NotFoundError("Comment not found")
    return comment


async def _ensure_can_mutate(db_session: AsyncSession, principal: Principal, comment: Comment) -> None:
    if not await can_manage_comment(db_session, principal, comment):
        raise ForbiddenError("Not authorized")


async def create_comment(
    db_session: AsyncSession,
    post_id: UUID,
    content: str,
    parent_id: UUID | None,
    principal: Principal,
    auto_approve: bool = True,
    max_length: int = MAX_CONTENT_LENGTH,
) -> Comment:
    """Create a comment or a reply on a post.

    A reply's parent must belong to the same post. New comments are
    approved when ``auto_approve`` is on or the caller is staff, and
    pending otherwise.
    """
    content = _clean_content(content, max_length)

    post_exists = await db_session.scalar(select(Post.id).where(Post.id == post_id))
    if post_exists is None:
        raise NotFoundError("Post not found")

    if parent_id is not None:
        parent_post_id = await db_session.scalar(select(Comment.post_id).where(Comment.id == parent_id))
        if parent_post_id is None:
            raise NotFoundError("Parent comment not found")
        if parent_post_id != post_id:
            raise BadRequestError("Parent comment does not belong to this post")

    author = await require_profile(db_session, principal)

    comment = Comment(
        post_id=post_id,
        parent_id=parent_id,
        author_id=author.id,
        content=content,
        status=CommentStatus.APPROVED if auto_approve or is_staff(principal) else CommentStatus.PENDING,
    )
    db_session.add(comment)
    await db_session.commit()
    await db_session.refresh(comment)

    await hooks.do_action(AFTER_COMMENT_CREATE, comment)
    return comment


async def get_comment_by_id(
    db_session: AsyncSession,
    comment_id: UUID,
    principal: Principal | None = None,
) -> Comment:
    """Fetch one comment. Anything not approved is hidden from non-staff."""
    comment = await _require_comment(db_session, comment_id)
    if comment.status != CommentStatus.APPROVED and not is_staff(principal):
        raise NotFoundError("Comment not found")
    return comment


async def list_comments_by_post(
    db_session: AsyncSession,
    post_id: UUID,
    query: CommentListQuery | None = None,
    principal: Principal | None = None,
) -> Paginated[ThreadedComment]:
    """List a post's comments, paginated.

    With ``include_replies`` the result is a flat list of every matching
    comment. Otherwise only top-level comments are returned, each with the
    number of direct replies that pass the same status filter.
    """
    query = (query or CommentListQuery()).normalized()
    status = _resolve_status_filter(query.status, principal)

    filters = [Comment.post_id == post_id]
    if status is not None:
        filters.append(Comment.status == status)
    if not query.include_replies:
        filters.append(Comment.parent_id.is_(None))

    total = await db_session.scalar(select(func.count()).select_from(Comment).where(*filters)) or 0
    meta = PageMeta.build(query.page, query.limit, total)

    if query.sort_order == "desc":
        order = (Comment.created_at.desc(), Comment.id.desc())
    else:
        order = (Comment.created_at.asc(), Comment.id.asc())

    result = await db_session.execute(
        select(Comment).where(*filters).order_by(*order).offset(meta.offset).limit(query.limit)
    )
    comments = list(result.scalars().all())

    if query.include_replies:
        return Paginated(data=[ThreadedComment(comment=c) for c in comments], meta=meta)

    counts: dict[UUID, int] = {}
    if comments:
        count_filters = [Comment.post_id == post_id, Comment.parent_id.in_([c.id for c in comments])]
        if status is not None:
            count_filters.append(Comment.status == status)
        rows = await db_session.execute(
            select(Comment.parent_id, func.count())
            .where(*count_filters)
            .group_by(Comment.parent_id)
        )
        counts = {parent_id: count for parent_id, count in rows.all()}

    return Paginated(
        data=[ThreadedComment(comment=c, replies_count=counts.get(c.id, 0)) for c in comments],
        meta=meta,
    )


async def update_comment_by_id(
    db_session: AsyncSession,
    comment_id: UUID,
    content: str | None,
    principal: Principal,
    max_length: int = MAX_CONTENT_LENGTH,
) -> Comment:
    """Edit a comment's text. Every edit stamps ``edited_at``."""
    comment = await _require_comment(db_session, comment_id)
    await _ensure_can_mutate(db_session, principal, comment)

    if content is not None:
        comment.content = _clean_content(content, max_length)
    comment.edited_at = datetime.now(UTC)

    await db_session.commit()
    await db_session.refresh(comment)
    return comment


async def delete_comment_by_id(
    db_session: AsyncSession,
    comment_id: UUID,
    principal: Principal,
) -> str:
    """Soft delete: the comment stays in its thread, shown as a placeholder."""
    comment = await _require_comment(db_session, comment_id)
    await _ensure_can_mutate(db_session, principal, comment)

    comment.status = CommentStatus.DELETED
    comment.edited_at = datetime.now(UTC)
    await db_session.commit()

    return "Comment deleted successfully"


async def moderate_comment(
    db_session: AsyncSession,
    comment_id: UUID,
    status: CommentStatus,
    principal: Principal,
) -> str:
    require_permission(principal, MODERATE_COMMENTS)

    comment = await _require_comment(db_session, comment_id)
    previous = comment.status
    comment.status = CommentStatus(status)
    await db_session.commit()

    logger.info("Comment %s moderated: %s -> %s", comment.id, previous, comment.status)
    await hooks.do_action(AFTER_COMMENT_MODERATE, comment, previous_status=previous)
    return "Comment status updated successfully"
