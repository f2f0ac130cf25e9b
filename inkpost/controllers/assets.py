"""Asset upload, replace and delete endpoints."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from litestar import Controller, Response, delete, get, patch, post
from litestar.datastructures import UploadFile
from litestar.enums import RequestEncodingType
from litestar.params import Body
from sqlalchemy.ext.asyncio import AsyncSession

from inkpost.auth.guards import auth_guard
from inkpost.auth.principal import Principal
from inkpost.config import Settings
from inkpost.controllers.helpers import envelope, serialize_asset
from inkpost.db.services import asset_service
from inkpost.lib.storage.base import ObjectStore

MultipartFile = Annotated[UploadFile, Body(media_type=RequestEncodingType.MULTI_PART)]


class AssetController(Controller):
    path = "/api/assets"
    guards = [auth_guard]

    @get("/")
    async def list_my_assets(
        self,
        db_session: AsyncSession,
        principal: Principal,
        limit: int = 50,
        offset: int = 0,
    ) -> Response:
        assets = await asset_service.list_owner_assets(
            db_session, principal.id, limit=min(max(limit, 1), 100), offset=max(offset, 0)
        )
        return envelope("Assets retrieved successfully", [serialize_asset(a) for a in assets])

    @post("/upload")
    async def upload(
        self,
        db_session: AsyncSession,
        object_store: ObjectStore,
        settings: Settings,
        principal: Principal,
        data: MultipartFile,
    ) -> Response:
        """Upload an image; the new asset starts unreferenced."""
        content = await data.read()
        asset = await asset_service.upload_image(
            db_session,
            object_store,
            content,
            data.content_type,
            data.filename,
            principal.id,
            folder=settings.media.folder,
            max_size=settings.media.max_upload_size,
        )
        return envelope("Asset uploaded successfully", serialize_asset(asset), status_code=201)

    @patch("/{asset_id:uuid}/replace")
    async def replace(
        self,
        db_session: AsyncSession,
        object_store: ObjectStore,
        settings: Settings,
        principal: Principal,
        asset_id: UUID,
        data: MultipartFile,
    ) -> Response:
        content = await data.read()
        asset = await asset_service.replace_image(
            db_session,
            object_store,
            asset_id,
            content,
            data.content_type,
            data.filename,
            principal,
            folder=settings.media.folder,
            max_size=settings.media.max_upload_size,
        )
        return envelope("Asset replaced successfully", serialize_asset(asset))

    @delete("/by-url", status_code=200)
    async def delete_by_url(
        self,
        db_session: AsyncSession,
        object_store: ObjectStore,
        principal: Principal,
        url: str,
    ) -> Response:
        asset = await asset_service.delete_asset_by_url(db_session, object_store, url, principal)
        return envelope("Asset deleted successfully", serialize_asset(asset))

    @delete("/{asset_id:uuid}", status_code=200)
    async def delete_one(
        self,
        db_session: AsyncSession,
        object_store: ObjectStore,
        principal: Principal,
        asset_id: UUID,
    ) -> Response:
        asset = await asset_service.delete_asset(db_session, object_store, asset_id, principal)
        return envelope("Asset deleted successfully", serialize_asset(asset))
