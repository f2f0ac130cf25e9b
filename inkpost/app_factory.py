"""Litestar application factory for inkpost."""

import logging
from typing import Any

from advanced_alchemy.extensions.litestar import SQLAlchemyPlugin
from litestar import Litestar
from litestar.di import Provide
from litestar.exceptions import HTTPException

from inkpost.app_config import build_db_config, build_media_router, build_session_config
from inkpost.auth.guards import provide_principal, provide_viewer
from inkpost.config import Settings, get_settings
from inkpost.controllers.assets import AssetController
from inkpost.controllers.comments import CommentController
from inkpost.controllers.helpers import provide_object_store, provide_settings
from inkpost.controllers.posts import PostController
from inkpost.controllers.profiles import ProfileController
from inkpost.lib import observability
from inkpost.lib.errors import ServiceError
from inkpost.lib.exceptions import (
    http_exception_handler,
    internal_server_error_handler,
    service_error_handler,
)
from inkpost.lib.storage import ObjectStore, create_object_store

logger = logging.getLogger(__name__)

EXCEPTION_HANDLERS: dict[type[Exception], Any] = {
    ServiceError: service_error_handler,
    HTTPException: http_exception_handler,
    Exception: internal_server_error_handler,
}

DEPENDENCIES = {
    "principal": Provide(provide_principal),
    "viewer": Provide(provide_viewer),
    "object_store": Provide(provide_object_store),
    "settings": Provide(provide_settings),
}


def create_app(settings: Settings | None = None, object_store: ObjectStore | None = None) -> Litestar:
    """Create and configure the Litestar application.

    The object store is built once from ``settings.media`` unless one is
    passed in, and shared through ``app.state.object_store``.
    """
    settings = settings or get_settings()

    logging.getLogger("inkpost").setLevel(settings.logging.level.upper())
    observability.configure(settings)

    db_config = build_db_config(settings)
    session_config = build_session_config(settings)
    store = object_store or create_object_store(settings.media)

    route_handlers: list = [AssetController, CommentController, PostController, ProfileController]
    media_router = build_media_router(settings)
    if media_router is not None:
        route_handlers.append(media_router)

    async def on_startup(_app: Litestar) -> None:
        observability.instrument_sqlalchemy(db_config.get_engine())
        logger.info("inkpost started with %s object store", store.provider)

    app = Litestar(
        on_startup=[on_startup],
        route_handlers=route_handlers,
        dependencies=DEPENDENCIES,
        plugins=[SQLAlchemyPlugin(config=db_config)],
        middleware=[session_config.middleware],
        exception_handlers=EXCEPTION_HANDLERS,
        debug=settings.debug,
    )
    app.state.object_store = store
    app.state.settings = settings
    return app
