"""Tests for the post service and its cover image references."""

from uuid import uuid4

import pytest

from inkpost.auth.roles import UserRole
from inkpost.db.models import AssetStatus, PostStatus
from inkpost.db.services import post_service
from inkpost.db.services.asset_service import get_asset_by_id
from inkpost.db.services.post_service import PostInput
from inkpost.lib.errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError


class TestCreatePost:
    """Tests for create_post()."""

    @pytest.mark.asyncio
    async def test_creates_draft_with_slug(self, db_session, make_user):
        _, principal, profile = await make_user(role=UserRole.AUTHOR)

        post = await post_service.create_post(db_session, PostInput(title="Hello World!"), principal)

        assert post.slug == "hello-world"
        assert post.status == PostStatus.DRAFT
        assert post.published_at is None
        assert post.author_id == profile.id

    @pytest.mark.asyncio
    async def test_duplicate_slug_gets_suffix(self, db_session, make_user):
        _, principal, _ = await make_user(role=UserRole.AUTHOR)

        await post_service.create_post(db_session, PostInput(title="Same"), principal)
        second = await post_service.create_post(db_session, PostInput(title="Same"), principal)

        assert second.slug == "same-2"

    @pytest.mark.asyncio
    async def test_published_sets_published_at(self, db_session, make_user):
        _, principal, _ = await make_user(role=UserRole.AUTHOR)

        post = await post_service.create_post(
            db_session, PostInput(title="Live", status=PostStatus.PUBLISHED), principal
        )

        assert post.published_at is not None

    @pytest.mark.asyncio
    async def test_title_required(self, db_session, make_user):
        _, principal, _ = await make_user(role=UserRole.AUTHOR)

        with pytest.raises(BadRequestError):
            await post_service.create_post(db_session, PostInput(title="  "), principal)

    @pytest.mark.asyncio
    async def test_cover_asset_is_attached(self, db_session, make_user, make_asset):
        user, principal, _ = await make_user(role=UserRole.AUTHOR)
        asset = await make_asset(user)

        post = await post_service.create_post(
            db_session, PostInput(title="With cover", cover_asset_id=asset.id), principal
        )

        refreshed = await get_asset_by_id(db_session, asset.id)
        await db_session.refresh(refreshed)
        assert post.cover_asset_id == asset.id
        assert post.cover_image_url == asset.url
        assert refreshed.ref_count == 1
        assert refreshed.used_by == [{"kind": "post", "ref_id": str(post.id), "field": "cover_image"}]

    @pytest.mark.asyncio
    async def test_cover_being_deleted_conflicts(self, db_session, make_user, make_asset):
        user, principal, _ = await make_user(role=UserRole.AUTHOR)
        asset = await make_asset(user, status=AssetStatus.PENDING_DELETE)

        with pytest.raises(ConflictError):
            await post_service.create_post(
                db_session, PostInput(title="Broken cover", cover_asset_id=asset.id), principal
            )


class TestUpdatePost:
    """Tests for update_post()."""

    @pytest.mark.asyncio
    async def test_changing_cover_moves_reference(self, db_session, make_user, make_asset):
        user, principal, _ = await make_user(role=UserRole.AUTHOR)
        first = await make_asset(user)
        second = await make_asset(user)
        post = await post_service.create_post(
            db_session, PostInput(title="Cover swap", cover_asset_id=first.id), principal
        )

        await post_service.update_post(db_session, post.id, PostInput(cover_asset_id=second.id), principal)

        await db_session.refresh(first)
        await db_session.refresh(second)
        assert first.ref_count == 0
        assert first.status == AssetStatus.ORPHANED
        assert second.ref_count == 1

    @pytest.mark.asyncio
    async def test_clearing_cover_detaches(self, db_session, make_user, make_asset):
        user, principal, _ = await make_user(role=UserRole.AUTHOR)
        asset = await make_asset(user)
        post = await post_service.create_post(
            db_session, PostInput(title="Cover", cover_asset_id=asset.id), principal
        )

        updated = await post_service.update_post(db_session, post.id, PostInput(cover_asset_id=None), principal)

        await db_session.refresh(asset)
        assert updated.cover_asset_id is None
        assert updated.cover_image_url is None
        assert asset.ref_count == 0

    @pytest.mark.asyncio
    async def test_omitted_cover_is_untouched(self, db_session, make_user, make_asset):
        user, principal, _ = await make_user(role=UserRole.AUTHOR)
        asset = await make_asset(user)
        post = await post_service.create_post(
            db_session, PostInput(title="Cover", cover_asset_id=asset.id), principal
        )

        updated = await post_service.update_post(db_session, post.id, PostInput(title="Renamed"), principal)

        await db_session.refresh(asset)
        assert updated.title == "Renamed"
        assert updated.cover_asset_id == asset.id
        assert asset.ref_count == 1

    @pytest.mark.asyncio
    async def test_other_author_forbidden(self, db_session, make_user):
        _, owner, _ = await make_user(role=UserRole.AUTHOR)
        _, other, _ = await make_user(role=UserRole.AUTHOR)
        post = await post_service.create_post(db_session, PostInput(title="Mine"), owner)

        with pytest.raises(ForbiddenError):
            await post_service.update_post(db_session, post.id, PostInput(title="Yours"), other)

    @pytest.mark.asyncio
    async def test_editor_may_update(self, db_session, make_user):
        _, owner, _ = await make_user(role=UserRole.AUTHOR)
        _, editor, _ = await make_user(role=UserRole.EDITOR)
        post = await post_service.create_post(db_session, PostInput(title="Draft"), owner)

        updated = await post_service.update_post(
            db_session, post.id, PostInput(status=PostStatus.PUBLISHED), editor
        )

        assert updated.status == PostStatus.PUBLISHED
        assert updated.published_at is not None

    @pytest.mark.asyncio
    async def test_unknown_post(self, db_session, make_user):
        _, principal, _ = await make_user(role=UserRole.AUTHOR)

        with pytest.raises(NotFoundError):
            await post_service.update_post(db_session, uuid4(), PostInput(title="x"), principal)


class TestDeletePost:
    """Tests for delete_post()."""

    @pytest.mark.asyncio
    async def test_delete_releases_cover(self, db_session, make_user, make_asset):
        user, principal, _ = await make_user(role=UserRole.AUTHOR)
        asset = await make_asset(user)
        post = await post_service.create_post(
            db_session, PostInput(title="Bye", cover_asset_id=asset.id), principal
        )

        message = await post_service.delete_post(db_session, post.id, principal)

        await db_session.refresh(asset)
        assert message == "Post deleted successfully"
        assert await post_service.get_post_by_id(db_session, post.id) is None
        assert asset.ref_count == 0
        assert asset.status == AssetStatus.ORPHANED

    @pytest.mark.asyncio
    async def test_reader_cannot_delete_others_post(self, db_session, make_user):
        _, owner, _ = await make_user(role=UserRole.AUTHOR)
        _, reader, _ = await make_user()
        post = await post_service.create_post(db_session, PostInput(title="Keep"), owner)

        with pytest.raises(ForbiddenError):
            await post_service.delete_post(db_session, post.id, reader)
