"""Observability facade wrapping Pydantic Logfire.

Provides spans around object store calls, ASGI request instrumentation and
exception reporting. Gracefully no-ops when logfire is not installed or not
enabled in configuration.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from inkpost.config import Settings

_logfire = None
_configured = False


def is_available() -> bool:
    return _logfire is not None and _configured


def configure(settings: Settings) -> None:
    """Initialize logfire from LogfireConfig settings.

    No-ops if logfire is not installed or not enabled.
    """
    global _logfire, _configured

    if not settings.logfire.enabled:
        return

    try:
        import logfire as lf
    except ImportError:
        return

    kwargs: dict[str, Any] = {
        "service_name": settings.logfire.service_name,
        "send_to_logfire": "if-token-present",
    }
    if settings.logfire.environment:
        kwargs["environment"] = settings.logfire.environment
    if settings.logfire.console:
        kwargs["console"] = lf.ConsoleOptions()

    lf.configure(**kwargs)
    _logfire = lf
    _configured = True


def instrument_app(app):
    """Wrap an ASGI app with logfire instrumentation. Returns the app unchanged if unavailable."""
    if not is_available():
        return app
    return _logfire.instrument_asgi(app)


def instrument_sqlalchemy(engine) -> None:
    """Trace SQL queries on ``engine`` when logfire is configured."""
    if is_available():
        _logfire.instrument_sqlalchemy(engine=engine)


@contextmanager
def span(name: str, **attrs: Any):
    """Context manager that yields a logfire span, or None if unavailable."""
    if is_available():
        with _logfire.span(name, **attrs) as s:
            yield s
    else:
        yield None


def exception(msg: str, **kwargs: Any) -> bool:
    """Log an exception with traceback via logfire. Returns True if logged, False if unavailable."""
    if is_available():
        _logfire.exception(msg, **kwargs)
        return True
    return False
