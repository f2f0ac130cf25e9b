"""Profile endpoints: the caller's own profile, plus admin management by uuid."""

from __future__ import annotations

from typing import Literal

from litestar import Controller, Response, delete, get, patch, post
from sqlalchemy.ext.asyncio import AsyncSession

from inkpost.auth.guards import auth_guard
from inkpost.auth.principal import Principal
from inkpost.controllers.helpers import envelope, serialize_profile
from inkpost.controllers.schemas import ProfileCreate, ProfileUpdate
from inkpost.db.services import profile_service
from inkpost.db.services.profile_service import ProfileListQuery


class ProfileController(Controller):
    path = "/api/profiles"
    guards = [auth_guard]

    @get("/me")
    async def get_me(self, db_session: AsyncSession, principal: Principal) -> Response:
        """The caller's profile; created from the account on first access."""
        profile = await profile_service.get_own_profile(db_session, principal)
        return envelope("Profile retrieved successfully", serialize_profile(profile))

    @patch("/me")
    async def update_me(self, db_session: AsyncSession, principal: Principal, data: ProfileUpdate) -> Response:
        profile = await profile_service.update_own_profile(
            db_session, principal, data.model_dump(exclude_unset=True)
        )
        return envelope("Profile updated successfully", serialize_profile(profile))

    @post("/")
    async def create(self, db_session: AsyncSession, principal: Principal, data: ProfileCreate) -> Response:
        changes = data.model_dump(exclude_unset=True)
        user_uuid = changes.pop("user_uuid")
        profile = await profile_service.create_profile(db_session, principal, user_uuid, changes)
        return envelope("Profile created successfully", serialize_profile(profile), status_code=201)

    @get("/")
    async def list_profiles(
        self,
        db_session: AsyncSession,
        principal: Principal,
        page: int = 1,
        limit: int = 20,
        search: str | None = None,
        location: str | None = None,
        has_avatar: bool | None = None,
        sort: Literal["newest", "oldest", "name_asc", "name_desc"] = "newest",
    ) -> Response:
        query = ProfileListQuery(
            page=page, limit=limit, search=search, location=location, has_avatar=has_avatar, sort=sort
        )
        result = await profile_service.list_profiles(db_session, principal, query)
        return Response(
            content={
                "success": True,
                "message": "Profiles retrieved successfully",
                "data": [serialize_profile(p) for p in result.data],
                "meta": {
                    "page": result.meta.page,
                    "limit": result.meta.limit,
                    "total": result.meta.total,
                    "pages": result.meta.pages,
                },
            },
            media_type="application/json",
        )

    @get("/{user_uuid:str}")
    async def get_one(self, db_session: AsyncSession, principal: Principal, user_uuid: str) -> Response:
        profile = await profile_service.find_profile(db_session, principal, user_uuid)
        return envelope("Profile retrieved successfully", serialize_profile(profile))

    @patch("/{user_uuid:str}")
    async def update(
        self,
        db_session: AsyncSession,
        principal: Principal,
        user_uuid: str,
        data: ProfileUpdate,
    ) -> Response:
        profile = await profile_service.update_profile(
            db_session, principal, user_uuid, data.model_dump(exclude_unset=True)
        )
        return envelope("Profile updated successfully", serialize_profile(profile))

    @delete("/{user_uuid:str}", status_code=200)
    async def delete_one(self, db_session: AsyncSession, principal: Principal, user_uuid: str) -> Response:
        message = await profile_service.delete_profile(db_session, principal, user_uuid)
        return envelope(message)
