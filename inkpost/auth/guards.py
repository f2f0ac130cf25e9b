"""Request guards and principal providers for the API controllers."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from litestar import Request
from litestar.exceptions import NotAuthorizedException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from inkpost.auth.principal import Principal
from inkpost.auth.session_keys import SESSION_USER_ID
from inkpost.db.models.user import User

if TYPE_CHECKING:
    from litestar.connection import ASGIConnection
    from litestar.handlers.base import BaseRouteHandler


async def auth_guard(connection: ASGIConnection, _: BaseRouteHandler) -> None:
    """Reject requests without a logged-in session."""
    if not connection.session.get(SESSION_USER_ID):
        raise NotAuthorizedException("Authentication required")


async def _load_principal(request: Request, db_session: AsyncSession) -> Principal | None:
    user_id = request.session.get(SESSION_USER_ID)
    if not user_id:
        return None

    try:
        user_uuid = UUID(str(user_id))
    except ValueError:
        return None

    result = await db_session.execute(select(User).where(User.id == user_uuid))
    user = result.scalar_one_or_none()
    if user is None or not user.is_active:
        return None
    return Principal.from_user(user)


async def provide_principal(request: Request, db_session: AsyncSession) -> Principal:
    """Dependency: the authenticated caller, or 401."""
    principal = await _load_principal(request, db_session)
    if principal is None:
        raise NotAuthorizedException("Invalid user session")
    return principal


async def provide_viewer(request: Request, db_session: AsyncSession) -> Principal | None:
    """Dependency: the caller when logged in, else None (public endpoints)."""
    return await _load_principal(request, db_session)
