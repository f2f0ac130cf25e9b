"""Post endpoints. Cover images are counted as asset references."""

from __future__ import annotations

from uuid import UUID

from litestar import Controller, Response, delete, get, patch, post
from sqlalchemy.ext.asyncio import AsyncSession

from inkpost.auth.guards import auth_guard
from inkpost.auth.principal import Principal
from inkpost.controllers.helpers import envelope, serialize_post
from inkpost.controllers.schemas import PostCreate, PostUpdate
from inkpost.db.services import post_service
from inkpost.db.services.post_service import PostInput
from inkpost.lib.errors import NotFoundError


class PostController(Controller):
    path = "/api/posts"

    @post("/", guards=[auth_guard])
    async def create(self, db_session: AsyncSession, principal: Principal, data: PostCreate) -> Response:
        post_input = PostInput(
            title=data.title,
            content=data.content,
            excerpt=data.excerpt,
            slug=data.slug,
            status=data.status,
            cover_asset_id=data.cover_asset_id,
        )
        created = await post_service.create_post(db_session, post_input, principal)
        return envelope("Post created successfully", serialize_post(created), status_code=201)

    @get("/{post_id:uuid}")
    async def get_one(self, db_session: AsyncSession, post_id: UUID) -> Response:
        found = await post_service.get_post_by_id(db_session, post_id)
        if found is None:
            raise NotFoundError("Post not found")
        return envelope("Post retrieved successfully", serialize_post(found))

    @patch("/{post_id:uuid}", guards=[auth_guard])
    async def update(
        self,
        db_session: AsyncSession,
        principal: Principal,
        post_id: UUID,
        data: PostUpdate,
    ) -> Response:
        changes = data.model_dump(exclude_unset=True)
        post_input = PostInput(
            title=changes.get("title"),
            content=changes.get("content"),
            excerpt=changes.get("excerpt"),
            slug=changes.get("slug"),
            status=changes.get("status"),
        )
        if "cover_asset_id" in changes:
            post_input.cover_asset_id = changes["cover_asset_id"]

        updated = await post_service.update_post(db_session, post_id, post_input, principal)
        return envelope("Post updated successfully", serialize_post(updated))

    @delete("/{post_id:uuid}", guards=[auth_guard], status_code=200)
    async def delete_one(self, db_session: AsyncSession, principal: Principal, post_id: UUID) -> Response:
        message = await post_service.delete_post(db_session, post_id, principal)
        return envelope(message)
