"""Application configuration helpers for inkpost.

Database, session and media-serving setup live here so ``asgi.py`` only
wires them together.
"""

import hashlib
from pathlib import Path

from advanced_alchemy.config import EngineConfig
from advanced_alchemy.extensions.litestar import AsyncSessionConfig, SQLAlchemyAsyncConfig
from litestar.middleware.session.client_side import CookieBackendConfig
from litestar.static_files import create_static_files_router

from inkpost.config import Settings
from inkpost.db.base import Base
from inkpost.lib.media_url import UPLOAD_MARKER


def build_db_config(settings: Settings) -> SQLAlchemyAsyncConfig:
    """Build the SQLAlchemy async database configuration."""
    if "sqlite" in settings.db.url:
        engine_config = EngineConfig(echo=settings.db.echo)
    else:
        engine_config = EngineConfig(
            pool_size=settings.db.pool_size,
            max_overflow=settings.db.pool_overflow,
            pool_timeout=settings.db.pool_timeout,
            pool_pre_ping=settings.db.pool_pre_ping,
            echo=settings.db.echo,
        )

    return SQLAlchemyAsyncConfig(
        connection_string=settings.db.url,
        metadata=Base.metadata,
        create_all=settings.db.create_all,
        session_config=AsyncSessionConfig(expire_on_commit=False),
        engine_config=engine_config,
    )


def build_session_config(settings: Settings) -> CookieBackendConfig:
    """Build the client-side encrypted session configuration."""
    session_secret = hashlib.sha256(settings.secret_key.encode()).digest()
    return CookieBackendConfig(
        secret=session_secret,
        max_age=settings.session.max_age,
        httponly=True,
        secure=not settings.debug,
        samesite="lax",
        domain=settings.session.cookie_domain,
    )


def build_media_router(settings: Settings):
    """Serve locally stored uploads under ``/media/upload``.

    Returns None unless the local backend is active.
    """
    if settings.media.backend != "local":
        return None

    media_path = Path(settings.media.local.path)
    media_path.mkdir(parents=True, exist_ok=True)
    return create_static_files_router(
        path=f"/media{UPLOAD_MARKER.rstrip('/')}",
        directories=[media_path],
        name="media",
    )
