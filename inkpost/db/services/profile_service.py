"""Profile service: own-profile access plus admin management, keyed by the account's stable uuid."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from inkpost.auth.permissions import MANAGE_USERS, require_permission
from inkpost.auth.principal import Principal
from inkpost.db.models import AssetRefKind, Comment, Post, Profile, User
from inkpost.db.services import asset_service
from inkpost.db.services.asset_service import AssetUsage
from inkpost.lib.errors import BadRequestError, ConflictError, NotFoundError
from inkpost.lib.pagination import DEFAULT_LIMIT, MAX_LIMIT, PageMeta, Paginated, clamp

AVATAR_FIELD = "avatar"

EDITABLE_FIELDS = (
    "display_name",
    "bio",
    "website_url",
    "location",
    "twitter_url",
    "github_url",
    "linkedin_url",
)

ProfileSort = Literal["newest", "oldest", "name_asc", "name_desc"]

_SORTS = {
    "newest": (Profile.created_at.desc(), Profile.id.desc()),
    "oldest": (Profile.created_at.asc(), Profile.id.asc()),
    "name_asc": (Profile.display_name.asc(), Profile.id.asc()),
    "name_desc": (Profile.display_name.desc(), Profile.id.desc()),
}


@dataclass
class ProfileListQuery:
    page: int = 1
    limit: int = DEFAULT_LIMIT
    search: str | None = None
    location: str | None = None
    has_avatar: bool | None = None
    sort: ProfileSort = "newest"

    def normalized(self) -> ProfileListQuery:
        return ProfileListQuery(
            page=clamp(self.page, 1),
            limit=clamp(self.limit, 1, MAX_LIMIT),
            search=(self.search or "").strip() or None,
            location=(self.location or "").strip() or None,
            has_avatar=self.has_avatar,
            sort=self.sort if self.sort in _SORTS else "newest",
        )


def _avatar_usage(profile: Profile) -> AssetUsage:
    return AssetUsage(kind=AssetRefKind.PROFILE, ref_id=str(profile.id), field=AVATAR_FIELD)


async def get_profile_by_user_uuid(db_session: AsyncSession, user_uuid: str) -> Profile | None:
    result = await db_session.execute(select(Profile).where(Profile.user_uuid == user_uuid))
    return result.scalar_one_or_none()


async def get_profile_by_id(db_session: AsyncSession, profile_id: UUID) -> Profile | None:
    result = await db_session.execute(select(Profile).where(Profile.id == profile_id))
    return result.scalar_one_or_none()


async def require_profile(db_session: AsyncSession, principal: Principal) -> Profile:
    """The caller's profile, or ``NotFoundError`` if they never created one."""
    profile = await get_profile_by_user_uuid(db_session, principal.uuid)
    if profile is None:
        raise NotFoundError("Profile not found")
    return profile


async def ensure_profile(db_session: AsyncSession, user: User) -> Profile:
    """Return the user's profile, creating it on first use."""
    profile = await get_profile_by_user_uuid(db_session, user.uuid)
    if profile is not None:
        return profile

    profile = Profile(user_uuid=user.uuid, display_name=user.username)
    db_session.add(profile)
    await db_session.commit()
    await db_session.refresh(profile)
    return profile


async def _set_avatar(db_session: AsyncSession, profile: Profile, asset_id: UUID | None) -> None:
    if profile.avatar_asset_id == asset_id:
        return

    asset = await asset_service.swap_reference(
        db_session, profile.avatar_asset_id, asset_id, _avatar_usage(profile)
    )
    profile.avatar_asset_id = asset_id
    profile.avatar_url = asset.url if asset is not None else None


async def _apply_changes(db_session: AsyncSession, profile: Profile, changes: dict[str, Any]) -> None:
    """Copy editable fields from ``changes``; keys that are absent stay untouched."""
    if "user_uuid" in changes:
        raise BadRequestError("user_uuid cannot be updated")

    for field in EDITABLE_FIELDS:
        if field not in changes:
            continue
        value = changes[field]
        if isinstance(value, str):
            value = value.strip() or None
        if field == "display_name" and not value:
            raise BadRequestError("Display name cannot be empty")
        setattr(profile, field, value)

    if "avatar_asset_id" in changes:
        await _set_avatar(db_session, profile, changes["avatar_asset_id"])


async def get_own_profile(db_session: AsyncSession, principal: Principal) -> Profile:
    """The caller's profile, created from their account on first access."""
    user = await db_session.get(User, principal.id)
    if user is None:
        raise NotFoundError("User not found")
    return await ensure_profile(db_session, user)


async def update_own_profile(
    db_session: AsyncSession,
    principal: Principal,
    changes: dict[str, Any],
) -> Profile:
    profile = await get_own_profile(db_session, principal)
    await _apply_changes(db_session, profile, changes)
    await db_session.commit()
    await db_session.refresh(profile)
    return profile


async def _require_by_uuid(db_session: AsyncSession, user_uuid: str) -> Profile:
    profile = await get_profile_by_user_uuid(db_session, user_uuid)
    if profile is None:
        raise NotFoundError("Profile not found")
    return profile


async def create_profile(
    db_session: AsyncSession,
    principal: Principal,
    user_uuid: str,
    changes: dict[str, Any],
) -> Profile:
    """Create the profile for an existing account (admins only)."""
    require_permission(principal, MANAGE_USERS)

    if await get_profile_by_user_uuid(db_session, user_uuid) is not None:
        raise ConflictError("Profile with this uuid already exists")
    if await db_session.scalar(select(User.id).where(User.uuid == user_uuid)) is None:
        raise NotFoundError("User not found")

    display_name = (changes.get("display_name") or "").strip()
    if not display_name:
        raise BadRequestError("display_name is required")

    profile = Profile(user_uuid=user_uuid, display_name=display_name)
    db_session.add(profile)
    await db_session.flush()
    await _apply_changes(db_session, profile, changes)

    await db_session.commit()
    await db_session.refresh(profile)
    return profile


async def list_profiles(
    db_session: AsyncSession,
    principal: Principal,
    query: ProfileListQuery | None = None,
) -> Paginated[Profile]:
    """Search and page through profiles (admins only).

    ``search`` matches display name, bio, location or uuid, case-insensitively.
    """
    require_permission(principal, MANAGE_USERS)
    query = (query or ProfileListQuery()).normalized()

    filters = []
    if query.search:
        pattern = f"%{query.search}%"
        filters.append(
            or_(
                Profile.display_name.ilike(pattern),
                Profile.bio.ilike(pattern),
                Profile.location.ilike(pattern),
                Profile.user_uuid.ilike(pattern),
            )
        )
    if query.location:
        filters.append(Profile.location == query.location)
    if query.has_avatar is True:
        filters.append(Profile.avatar_url.is_not(None))
    elif query.has_avatar is False:
        filters.append(Profile.avatar_url.is_(None))

    total = await db_session.scalar(select(func.count()).select_from(Profile).where(*filters)) or 0
    meta = PageMeta.build(query.page, query.limit, total)

    result = await db_session.execute(
        select(Profile).where(*filters).order_by(*_SORTS[query.sort]).offset(meta.offset).limit(query.limit)
    )
    return Paginated(data=list(result.scalars().all()), meta=meta)


async def find_profile(db_session: AsyncSession, principal: Principal, user_uuid: str) -> Profile:
    require_permission(principal, MANAGE_USERS)
    return await _require_by_uuid(db_session, user_uuid)


async def update_profile(
    db_session: AsyncSession,
    principal: Principal,
    user_uuid: str,
    changes: dict[str, Any],
) -> Profile:
    require_permission(principal, MANAGE_USERS)
    profile = await _require_by_uuid(db_session, user_uuid)
    await _apply_changes(db_session, profile, changes)
    await db_session.commit()
    await db_session.refresh(profile)
    return profile


async def delete_profile(db_session: AsyncSession, principal: Principal, user_uuid: str) -> str:
    """Delete a profile that authors nothing, releasing its avatar reference."""
    require_permission(principal, MANAGE_USERS)
    profile = await _require_by_uuid(db_session, user_uuid)

    authored = await db_session.scalar(select(Post.id).where(Post.author_id == profile.id).limit(1))
    if authored is None:
        authored = await db_session.scalar(select(Comment.id).where(Comment.author_id == profile.id).limit(1))
    if authored is not None:
        raise ConflictError("Profile still authors posts or comments")

    if profile.avatar_asset_id is not None:
        await asset_service.detach_asset(
            db_session, profile.avatar_asset_id, _avatar_usage(profile), commit=False
        )

    await db_session.delete(profile)
    await db_session.commit()
    return "Profile deleted successfully"
