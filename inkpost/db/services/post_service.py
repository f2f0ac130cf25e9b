"""Post service for CRUD on posts, keeping cover asset references counted."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from slugify import slugify
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from inkpost.auth.permissions import is_profile_owner, is_staff
from inkpost.auth.principal import Principal
from inkpost.db.models import AssetRefKind, Post, PostStatus
from inkpost.db.services import asset_service
from inkpost.db.services.asset_service import AssetUsage
from inkpost.db.services.profile_service import require_profile
from inkpost.lib.errors import BadRequestError, ForbiddenError, NotFoundError

COVER_FIELD = "cover_image"

_UNSET = object()


@dataclass
class PostInput:
    title: str | None = None
    content: str | None = None
    excerpt: str | None = None
    slug: str | None = None
    status: PostStatus | None = None
    cover_asset_id: UUID | None | object = _UNSET


def _cover_usage(post: Post) -> AssetUsage:
    return AssetUsage(kind=AssetRefKind.POST, ref_id=str(post.id), field=COVER_FIELD)


async def _unique_slug(db_session: AsyncSession, base: str, exclude_id: UUID | None = None) -> str:
    base = slugify(base) or "post"
    slug = base
    suffix = 2
    while True:
        query = select(Post.id).where(Post.slug == slug)
        if exclude_id is not None:
            query = query.where(Post.id != exclude_id)
        if await db_session.scalar(query) is None:
            return slug
        slug = f"{base}-{suffix}"
        suffix += 1


async def get_post_by_id(db_session: AsyncSession, post_id: UUID) -> Post | None:
    result = await db_session.execute(select(Post).where(Post.id == post_id))
    return result.scalar_one_or_none()


async def _require_post(db_session: AsyncSession, post_id: UUID) -> Post:
    post = await get_post_by_id(db_session, post_id)
    if post is None:
        raise NotFoundError("Post not found")
    return post


async def _ensure_can_edit(db_session: AsyncSession, principal: Principal, post: Post) -> None:
    if is_staff(principal):
        return
    if not await is_profile_owner(db_session, principal, post.author_id):
        raise ForbiddenError("You do not have permission to modify this post")


async def _set_cover(db_session: AsyncSession, post: Post, cover_asset_id: UUID | None) -> None:
    """Point the post at a new cover, moving the reference from the old asset."""
    if post.cover_asset_id == cover_asset_id:
        return

    asset = await asset_service.swap_reference(
        db_session, post.cover_asset_id, cover_asset_id, _cover_usage(post)
    )
    post.cover_asset_id = cover_asset_id
    post.cover_image_url = asset.url if asset is not None else None


async def create_post(db_session: AsyncSession, data: PostInput, principal: Principal) -> Post:
    """Create a post authored by the caller's profile."""
    if not data.title or not data.title.strip():
        raise BadRequestError("Post title is required")

    author = await require_profile(db_session, principal)
    status = data.status or PostStatus.DRAFT

    post = Post(
        author_id=author.id,
        title=data.title.strip(),
        slug=await _unique_slug(db_session, data.slug or data.title),
        excerpt=data.excerpt or "",
        content=data.content or "",
        status=status,
        published_at=datetime.now(UTC) if status == PostStatus.PUBLISHED else None,
    )
    db_session.add(post)
    await db_session.flush()

    if data.cover_asset_id is not _UNSET and data.cover_asset_id is not None:
        await _set_cover(db_session, post, data.cover_asset_id)

    await db_session.commit()
    await db_session.refresh(post)
    return post


async def update_post(
    db_session: AsyncSession,
    post_id: UUID,
    data: PostInput,
    principal: Principal,
) -> Post:
    """Update a post. Passing ``cover_asset_id=None`` clears the cover."""
    post = await _require_post(db_session, post_id)
    await _ensure_can_edit(db_session, principal, post)

    if data.title is not None:
        if not data.title.strip():
            raise BadRequestError("Post title cannot be empty")
        post.title = data.title.strip()
    if data.slug is not None:
        post.slug = await _unique_slug(db_session, data.slug, exclude_id=post.id)
    if data.excerpt is not None:
        post.excerpt = data.excerpt
    if data.content is not None:
        post.content = data.content
    if data.status is not None:
        if data.status == PostStatus.PUBLISHED and post.published_at is None:
            post.published_at = datetime.now(UTC)
        post.status = data.status

    if data.cover_asset_id is not _UNSET:
        await _set_cover(db_session, post, data.cover_asset_id)

    await db_session.commit()
    await db_session.refresh(post)
    return post


async def delete_post(db_session: AsyncSession, post_id: UUID, principal: Principal) -> str:
    """Delete a post and release its cover image reference."""
    post = await _require_post(db_session, post_id)
    await _ensure_can_edit(db_session, principal, post)

    if post.cover_asset_id is not None:
        await asset_service.detach_asset(db_session, post.cover_asset_id, _cover_usage(post), commit=False)

    await db_session.delete(post)
    await db_session.commit()
    return "Post deleted successfully"
