import logging

from litestar import Request, Response
from litestar.exceptions import HTTPException
from litestar.status_codes import HTTP_500_INTERNAL_SERVER_ERROR

from inkpost.lib import observability
from inkpost.lib.errors import ServiceError

logger = logging.getLogger(__name__)


def _error_response(status_code: int, message: str, kind: str) -> Response:
    return Response(
        content={"success": False, "message": message, "error": kind},
        status_code=status_code,
        media_type="application/json",
    )


def service_error_handler(request: Request, exc: ServiceError) -> Response:
    """Map a service failure to its status code and the error envelope."""
    if exc.status_code >= 500:
        logger.warning("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    return _error_response(exc.status_code, exc.message, exc.kind)


def http_exception_handler(request: Request, exc: HTTPException) -> Response:
    status_code = exc.status_code
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return _error_response(status_code, detail, "http_error")


def internal_server_error_handler(request: Request, exc: Exception) -> Response:
    """Log unexpected exceptions and hide their details from the client."""
    if not observability.exception(
        "Unhandled exception on {method} {path}",
        method=request.method,
        path=request.url.path,
    ):
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)

    return _error_response(HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error", "internal_error")
