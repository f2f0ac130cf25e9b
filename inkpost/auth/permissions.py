"""Ownership and permission checks shared by the services."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from inkpost.db.models.profile import Profile
from inkpost.lib.errors import ForbiddenError

if TYPE_CHECKING:
    from inkpost.auth.principal import Principal
    from inkpost.db.models.comment import Comment


MANAGE_USERS = "manage-users"
MODERATE_COMMENTS = "moderate-comments"


def is_staff(principal: Principal | None) -> bool:
    """Staff are admins, super admins and editors. Anonymous callers never are."""
    return principal is not None and principal.is_staff


def can_manage(principal: Principal | None, owner_id: UUID | None) -> bool:
    """Staff may manage anything; others only resources they own."""
    if principal is None:
        return False
    if is_staff(principal):
        return True
    return owner_id is not None and owner_id == principal.id


def require_permission(principal: Principal | None, permission: str) -> None:
    """Raise ``ForbiddenError`` unless the caller's role grants ``permission``."""
    if principal is None or not principal.has_permission(permission):
        raise ForbiddenError("Not authorized")


async def is_profile_owner(
    db_session: AsyncSession,
    principal: Principal,
    profile_id: UUID,
) -> bool:
    """Check that ``profile_id`` belongs to the caller, by stable uuid."""
    result = await db_session.execute(
        select(Profile.user_uuid).where(Profile.id == profile_id)
    )
    user_uuid = result.scalar_one_or_none()
    return user_uuid is not None and user_uuid == principal.uuid


async def can_manage_comment(
    db_session: AsyncSession,
    principal: Principal | None,
    comment: Comment,
) -> bool:
    """Staff, or the account behind the comment's author profile."""
    if principal is None:
        return False
    if is_staff(principal):
        return True
    return await is_profile_owner(db_session, principal, comment.author_id)
