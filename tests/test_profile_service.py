"""Tests for profile lookups, own-profile edits and admin management."""

import pytest

from inkpost.auth.roles import UserRole
from inkpost.db.models import AssetStatus
from inkpost.db.services import profile_service
from inkpost.db.services.profile_service import ProfileListQuery
from inkpost.lib.errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError


class TestProfiles:
    @pytest.mark.asyncio
    async def test_ensure_profile_creates_once(self, db_session, make_user):
        user, _, _ = await make_user(with_profile=False)

        first = await profile_service.ensure_profile(db_session, user)
        second = await profile_service.ensure_profile(db_session, user)

        assert first.id == second.id
        assert first.user_uuid == user.uuid
        assert first.display_name == user.username

    @pytest.mark.asyncio
    async def test_lookups(self, db_session, make_user):
        user, _, profile = await make_user()

        assert (await profile_service.get_profile_by_user_uuid(db_session, user.uuid)).id == profile.id
        assert (await profile_service.get_profile_by_id(db_session, profile.id)).user_uuid == user.uuid

    @pytest.mark.asyncio
    async def test_require_profile_missing(self, db_session, make_user):
        _, principal, _ = await make_user(with_profile=False)

        with pytest.raises(NotFoundError, match="Profile not found"):
            await profile_service.require_profile(db_session, principal)


class TestOwnProfile:
    @pytest.mark.asyncio
    async def test_get_own_profile_creates_on_first_access(self, db_session, make_user):
        user, principal, _ = await make_user(with_profile=False)

        profile = await profile_service.get_own_profile(db_session, principal)

        assert profile.user_uuid == user.uuid
        assert (await profile_service.require_profile(db_session, principal)).id == profile.id

    @pytest.mark.asyncio
    async def test_update_strips_and_clears(self, db_session, make_user):
        _, principal, _ = await make_user()

        profile = await profile_service.update_own_profile(
            db_session, principal, {"display_name": "  Ada  ", "bio": "   ", "location": "Porto"}
        )

        assert profile.display_name == "Ada"
        assert profile.bio is None
        assert profile.location == "Porto"

    @pytest.mark.asyncio
    async def test_blank_display_name_rejected(self, db_session, make_user):
        _, principal, _ = await make_user()

        with pytest.raises(BadRequestError, match="Display name cannot be empty"):
            await profile_service.update_own_profile(db_session, principal, {"display_name": " "})

    @pytest.mark.asyncio
    async def test_user_uuid_is_immutable(self, db_session, make_user):
        _, principal, _ = await make_user()

        with pytest.raises(BadRequestError, match="user_uuid cannot be updated"):
            await profile_service.update_own_profile(db_session, principal, {"user_uuid": "other"})

    @pytest.mark.asyncio
    async def test_avatar_swap_moves_reference(self, db_session, make_user, make_asset):
        user, principal, _ = await make_user()
        first = await make_asset(user)
        second = await make_asset(user)

        await profile_service.update_own_profile(db_session, principal, {"avatar_asset_id": first.id})
        profile = await profile_service.update_own_profile(
            db_session, principal, {"avatar_asset_id": second.id}
        )
        await db_session.refresh(first)
        await db_session.refresh(second)

        assert profile.avatar_url == second.url
        assert first.ref_count == 0
        assert first.status == AssetStatus.ORPHANED
        assert second.ref_count == 1
        assert second.used_by == [{"kind": "profile", "ref_id": str(profile.id), "field": "avatar"}]

    @pytest.mark.asyncio
    async def test_clearing_avatar(self, db_session, make_user, make_asset):
        user, principal, _ = await make_user()
        asset = await make_asset(user)
        await profile_service.update_own_profile(db_session, principal, {"avatar_asset_id": asset.id})

        profile = await profile_service.update_own_profile(db_session, principal, {"avatar_asset_id": None})
        await db_session.refresh(asset)

        assert profile.avatar_asset_id is None
        assert profile.avatar_url is None
        assert asset.ref_count == 0


class TestAdminProfiles:
    @pytest.mark.asyncio
    async def test_non_admin_forbidden(self, db_session, make_user):
        target, _, _ = await make_user()
        _, editor, _ = await make_user(role=UserRole.EDITOR)

        with pytest.raises(ForbiddenError):
            await profile_service.find_profile(db_session, editor, target.uuid)
        with pytest.raises(ForbiddenError):
            await profile_service.list_profiles(db_session, editor)

    @pytest.mark.asyncio
    async def test_create_profile(self, db_session, make_user):
        target, _, _ = await make_user(with_profile=False)
        _, admin, _ = await make_user(role=UserRole.ADMIN)

        profile = await profile_service.create_profile(
            db_session, admin, target.uuid, {"display_name": "Grace", "website_url": "https://example.com"}
        )

        assert profile.user_uuid == target.uuid
        assert profile.display_name == "Grace"
        assert profile.website_url == "https://example.com"

    @pytest.mark.asyncio
    async def test_create_profile_errors(self, db_session, make_user):
        existing, _, _ = await make_user()
        bare, _, _ = await make_user(with_profile=False)
        _, admin, _ = await make_user(role=UserRole.ADMIN)

        with pytest.raises(ConflictError):
            await profile_service.create_profile(db_session, admin, existing.uuid, {"display_name": "X"})
        with pytest.raises(NotFoundError, match="User not found"):
            await profile_service.create_profile(db_session, admin, "no-such-user", {"display_name": "X"})
        with pytest.raises(BadRequestError, match="display_name is required"):
            await profile_service.create_profile(db_session, admin, bare.uuid, {"display_name": "  "})

    @pytest.mark.asyncio
    async def test_list_search_filter_and_sort(self, db_session, make_user):
        _, admin, admin_profile = await make_user(role=UserRole.ADMIN)
        _, _, zed = await make_user()
        _, _, amy = await make_user()
        update = profile_service.update_profile
        await update(db_session, admin, zed.user_uuid, {"display_name": "Zed", "location": "Oslo"})
        await update(db_session, admin, amy.user_uuid, {"display_name": "Amy", "bio": "Oslo native"})

        def listing(**query):
            return profile_service.list_profiles(db_session, admin, ProfileListQuery(**query))

        searched = await listing(search="oslo", sort="name_asc")
        located = await listing(location="Oslo")
        everyone = await listing(sort="name_desc", limit=500)

        assert [p.display_name for p in searched.data] == ["Amy", "Zed"]
        assert [p.id for p in located.data] == [zed.id]
        assert everyone.meta.limit == 100
        assert everyone.meta.total == 3
        names = [p.display_name for p in everyone.data]
        assert names == sorted(names, reverse=True)
        assert admin_profile.id in {p.id for p in everyone.data}

    @pytest.mark.asyncio
    async def test_has_avatar_filter(self, db_session, make_user, make_asset):
        user, principal, with_avatar = await make_user()
        _, admin, _ = await make_user(role=UserRole.ADMIN)
        asset = await make_asset(user)
        await profile_service.update_own_profile(db_session, principal, {"avatar_asset_id": asset.id})

        result = await profile_service.list_profiles(db_session, admin, ProfileListQuery(has_avatar=True))

        assert [p.id for p in result.data] == [with_avatar.id]

    @pytest.mark.asyncio
    async def test_delete_releases_avatar(self, db_session, make_user, make_asset):
        user, principal, _ = await make_user()
        _, admin, _ = await make_user(role=UserRole.ADMIN)
        asset = await make_asset(user)
        await profile_service.update_own_profile(db_session, principal, {"avatar_asset_id": asset.id})

        message = await profile_service.delete_profile(db_session, admin, user.uuid)
        await db_session.refresh(asset)

        assert message == "Profile deleted successfully"
        assert await profile_service.get_profile_by_user_uuid(db_session, user.uuid) is None
        assert asset.ref_count == 0
        assert asset.used_by == []

    @pytest.mark.asyncio
    async def test_delete_refused_while_authoring(self, db_session, make_user, make_post):
        author, _, author_profile = await make_user(role=UserRole.AUTHOR)
        _, admin, _ = await make_user(role=UserRole.ADMIN)
        await make_post(author_profile)

        with pytest.raises(ConflictError, match="still authors"):
            await profile_service.delete_profile(db_session, admin, author.uuid)

    @pytest.mark.asyncio
    async def test_unknown_uuid(self, db_session, make_user):
        _, admin, _ = await make_user(role=UserRole.ADMIN)

        with pytest.raises(NotFoundError, match="Profile not found"):
            await profile_service.update_profile(db_session, admin, "missing", {"bio": "x"})
