"""Comment threads, editing and moderation endpoints."""

from __future__ import annotations

from typing import Literal
from uuid import UUID

from litestar import Controller, Response, delete, get, patch, post
from sqlalchemy.ext.asyncio import AsyncSession

from inkpost.auth.guards import auth_guard
from inkpost.auth.principal import Principal
from inkpost.config import Settings
from inkpost.controllers.helpers import envelope, serialize_comment
from inkpost.controllers.schemas import CommentCreate, CommentModerate, CommentUpdate
from inkpost.db.models import CommentStatus
from inkpost.db.services import comment_service
from inkpost.db.services.comment_service import CommentListQuery
from inkpost.lib.errors import BadRequestError


def _parse_status(status: str | None) -> CommentStatus | Literal["all"] | None:
    if status is None or status == "all":
        return status
    try:
        return CommentStatus(status)
    except ValueError:
        raise BadRequestError(f"Unknown comment status {status!r}") from None


class CommentController(Controller):
    path = "/api/comments"

    @post("/", guards=[auth_guard])
    async def create(
        self,
        db_session: AsyncSession,
        settings: Settings,
        principal: Principal,
        data: CommentCreate,
    ) -> Response:
        comment = await comment_service.create_comment(
            db_session,
            data.post_id,
            data.content,
            data.parent_id,
            principal,
            auto_approve=settings.comments.auto_approve,
            max_length=settings.comments.max_length,
        )
        return envelope("Comment created successfully", serialize_comment(comment), status_code=201)

    @get("/post/{post_id:uuid}")
    async def list_for_post(
        self,
        db_session: AsyncSession,
        viewer: Principal | None,
        post_id: UUID,
        page: int = 1,
        limit: int = 20,
        include_replies: bool = False,
        sort_order: Literal["asc", "desc"] = "asc",
        status: str | None = None,
    ) -> Response:
        """List comments on a post. Non-staff only ever see approved comments."""
        query = CommentListQuery(
            page=page,
            limit=limit,
            include_replies=include_replies,
            sort_order=sort_order,
            status=_parse_status(status),
        )
        result = await comment_service.list_comments_by_post(db_session, post_id, query, viewer)
        return Response(
            content={
                "success": True,
                "message": "Comments retrieved successfully",
                "data": [serialize_comment(item.comment, item.replies_count) for item in result.data],
                "meta": {
                    "page": result.meta.page,
                    "limit": result.meta.limit,
                    "total": result.meta.total,
                    "pages": result.meta.pages,
                },
            },
            media_type="application/json",
        )

    @get("/{comment_id:uuid}")
    async def get_one(
        self,
        db_session: AsyncSession,
        viewer: Principal | None,
        comment_id: UUID,
    ) -> Response:
        comment = await comment_service.get_comment_by_id(db_session, comment_id, viewer)
        return envelope("Comment retrieved successfully", serialize_comment(comment))

    @patch("/{comment_id:uuid}", guards=[auth_guard])
    async def update(
        self,
        db_session: AsyncSession,
        settings: Settings,
        principal: Principal,
        comment_id: UUID,
        data: CommentUpdate,
    ) -> Response:
        comment = await comment_service.update_comment_by_id(
            db_session, comment_id, data.content, principal, max_length=settings.comments.max_length
        )
        return envelope("Comment updated successfully", serialize_comment(comment))

    @delete("/{comment_id:uuid}", guards=[auth_guard], status_code=200)
    async def delete_one(
        self,
        db_session: AsyncSession,
        principal: Principal,
        comment_id: UUID,
    ) -> Response:
        message = await comment_service.delete_comment_by_id(db_session, comment_id, principal)
        return envelope(message)

    @patch("/moderate/{comment_id:uuid}", guards=[auth_guard])
    async def moderate(
        self,
        db_session: AsyncSession,
        principal: Principal,
        comment_id: UUID,
        data: CommentModerate,
    ) -> Response:
        message = await comment_service.moderate_comment(db_session, comment_id, data.status, principal)
        return envelope(message)
