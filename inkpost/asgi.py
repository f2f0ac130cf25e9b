"""ASGI entry point: ``hypercorn inkpost.asgi:app``."""

from inkpost.app_factory import create_app
from inkpost.lib import observability

app = observability.instrument_app(create_app())
